"""Connection and runtime settings for the AGE graph adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from agegraph.common.config.env import get_env_bool, get_env_float, get_env_int, get_env_str

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_NAME = "sulfurgraph"


@dataclass(frozen=True)
class GraphSettings:
    """Settings for the PostgreSQL/AGE connection pool and graph operations.

    Attributes:
        host: Database host.
        port: Database port.
        database: Database name.
        user: Database role.
        password: Database password.
        graph_name: AGE graph every Cypher statement targets.
        load_extension: Run ``LOAD 'age'`` on each new connection.
        pool_min_size: Connections kept open by the pool.
        pool_max_size: Upper bound on concurrent connections.
        acquire_timeout_seconds: Bounded wait for a free pooled connection.
        operation_timeout_seconds: Deadline for one repository operation.
        command_timeout_seconds: Per-statement timeout enforced by the driver.
    """

    host: str
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: Optional[str] = field(default=None, repr=False)
    graph_name: str = DEFAULT_GRAPH_NAME
    load_extension: bool = True
    pool_min_size: int = 1
    pool_max_size: int = 10
    acquire_timeout_seconds: float = 5.0
    operation_timeout_seconds: float = 30.0
    command_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Reject settings the pool cannot honour."""
        if self.pool_min_size < 0 or self.pool_max_size < 1:
            raise ValueError("Pool sizes must be positive.")
        if self.pool_min_size > self.pool_max_size:
            raise ValueError(
                f"GRAPH_POOL_MIN_SIZE ({self.pool_min_size}) exceeds "
                f"GRAPH_POOL_MAX_SIZE ({self.pool_max_size})."
            )

    @property
    def dsn(self) -> str:
        """Return a libpq-style DSN without the password."""
        return f"postgresql://{self.user}@{self.host}:{self.port}/{self.database}"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "GraphSettings":
        """Build settings from environment variables (and a .env file if present)."""
        if load_env_file:
            load_dotenv()

        settings = cls(
            host=get_env_str("DB_HOST", required=True),
            port=get_env_int("DB_PORT", 5432),
            database=get_env_str("DB_DATABASE", "postgres"),
            user=get_env_str("DB_USER", "postgres"),
            password=get_env_str("DB_PASSWORD"),
            graph_name=get_env_str("AGE_GRAPH_NAME", DEFAULT_GRAPH_NAME),
            load_extension=get_env_bool("AGE_LOAD_EXTENSION", True),
            pool_min_size=get_env_int("GRAPH_POOL_MIN_SIZE", 1),
            pool_max_size=get_env_int("GRAPH_POOL_MAX_SIZE", 10),
            acquire_timeout_seconds=get_env_float("GRAPH_POOL_ACQUIRE_TIMEOUT", 5.0),
            operation_timeout_seconds=get_env_float("GRAPH_OPERATION_TIMEOUT", 30.0),
            command_timeout_seconds=get_env_float("GRAPH_COMMAND_TIMEOUT", 30.0),
        )
        logger.info(
            "Graph settings loaded: %s graph=%s pool=%d..%d",
            settings.dsn,
            settings.graph_name,
            settings.pool_min_size,
            settings.pool_max_size,
        )
        return settings
