"""Unit tests for the browser-facing graph mapping."""

import json

from agegraph.schema.graph import Edge, GraphView, Node, to_vis_edge, to_vis_graph, to_vis_node


def test_vis_node_caption_prefers_name():
    """The name property is used as the caption when present."""
    node = Node(id="1", label="Pipe", properties={"name": "P-101", "label": "Main"})

    vis = to_vis_node(node)

    assert vis.label == "P-101"
    assert vis.group == "Pipe"
    assert json.loads(vis.title) == {"name": "P-101", "label": "Main"}


def test_vis_node_caption_fallbacks():
    """Caption falls back to the label property, then the entity label."""
    assert to_vis_node(Node(id="1", label="Pipe", properties={"label": "Main"})).label == "Main"
    assert to_vis_node(Node(id="1", label="Pipe", properties={"name": ""})).label == "Pipe"


def test_vis_node_title_is_indented_json():
    """The hover title is the property bag pretty-printed."""
    vis = to_vis_node(Node(id="1", label="Pipe", properties={"a": 1}))

    assert vis.title == '{\n  "a": 1\n}'


def test_vis_edge_uses_from_and_to():
    """Edges serialize endpoints as from/to strings."""
    edge = Edge(id="9", label="CONNECTS", properties={}, source_id="1", target_id="2")

    payload = to_vis_edge(edge).model_dump(by_alias=True)

    assert payload["from"] == "1"
    assert payload["to"] == "2"
    assert payload["label"] == "CONNECTS"


def test_vis_edge_label_property_wins():
    """A label property overrides the edge type as caption."""
    edge = Edge(id="9", label="CONNECTS", properties={"label": "feeds"}, source_id="1", target_id="2")

    assert to_vis_edge(edge).label == "feeds"


def test_vis_graph_payload():
    """The view serializes into nodes and edges lists with string ids."""
    view = GraphView(
        nodes=[Node(id="844424930334979", label="Pipe")],
        edges=[
            Edge(
                id="1125899906842625",
                label="CONNECTS",
                source_id="844424930334979",
                target_id="844424930334979",
            )
        ],
    )

    payload = json.loads(json.dumps(to_vis_graph(view)))

    assert payload["nodes"][0]["id"] == "844424930334979"
    assert payload["edges"][0]["from"] == "844424930334979"
    assert payload["edges"][0]["id"] == "1125899906842625"
