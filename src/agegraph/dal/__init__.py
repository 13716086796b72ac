"""Data Abstraction Layer (DAL) for the AGE graph adapter.

Query rendering, agtype parsing, connection pooling and driver error
translation live here; callers depend only on `agegraph.common.interfaces`.
"""
