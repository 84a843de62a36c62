"""Tests for the graph store."""

import pytest

from flowbridge import GraphSnapshot, NodeNotFoundError
from flowbridge.core.graph import Edge, Node, NodeData
from flowbridge.core.store import DUPLICATE_OFFSET


def test_add_node_uses_catalog_defaults(store):
    node = store.add_node("telegram-receive", {"x": 10, "y": 20})

    assert node.id == "n1"
    assert node.type == "customNode"
    assert node.position.x == 10 and node.position.y == 20
    assert node.data.type == "telegram-receive"
    assert node.config["checkInterval"] == "10"
    assert store.selected_node == node
    assert store.nodes == [node]


def test_add_node_unknown_type_is_a_no_op(store):
    assert store.add_node("teleport", {"x": 0, "y": 0}) is None
    assert store.nodes == []
    assert store.selected_node is None


def test_added_nodes_do_not_share_config(store):
    first = store.add_node("telegram", {"x": 0, "y": 0})
    second = store.add_node("telegram", {"x": 0, "y": 0})

    store.update_node_data(first.id, {"config": {"chatId": "1"}})

    assert store.get_node(second.id).config["chatId"] == ""


def test_update_node_data_merges_config(store):
    node = store.add_node("telegram", {"x": 0, "y": 0})

    updated = store.update_node_data(node.id, {"config": {"chatId": "42"}})

    assert updated.config == {"chatId": "42", "message": ""}
    assert store.get_node(node.id).config["chatId"] == "42"
    assert store.selected_node == updated


def test_update_node_data_changes_label_and_keeps_config(store):
    node = store.add_node("delay", {"x": 0, "y": 0})

    updated = store.update_node_data(node.id, {"label": "Wait a bit", "config": None})

    assert updated.data.label == "Wait a bit"
    assert updated.config == {"delay": 5}


def test_update_missing_node_raises_and_leaves_store_unchanged(store):
    node = store.add_node("delay", {"x": 0, "y": 0})

    with pytest.raises(NodeNotFoundError):
        store.update_node_data("missing", {"label": "x"})

    assert store.nodes == [node]


def test_duplicate_node_offsets_and_selects(store):
    node = store.add_node("telegram", {"x": 100, "y": 100})
    store.update_node_data(node.id, {"config": {"chatId": "42"}})

    clone = store.duplicate_node(node.id)

    assert clone.id != node.id
    assert clone.position.x == 100 + DUPLICATE_OFFSET
    assert clone.position.y == 100 + DUPLICATE_OFFSET
    assert clone.config["chatId"] == "42"
    assert store.selected_node == clone
    assert len(store.nodes) == 2


def test_duplicate_missing_node_returns_none(store):
    assert store.duplicate_node("missing") is None
    assert store.nodes == []


def test_delete_node_cascades_edges(store):
    a = store.add_node("telegram-receive", {"x": 0, "y": 0})
    b = store.add_node("telegram", {"x": 0, "y": 0})
    c = store.add_node("arweave-upload", {"x": 0, "y": 0})
    store.add_edge(a.id, b.id)
    store.add_edge(a.id, c.id)
    kept = store.add_edge(b.id, c.id)

    store.delete_node(a.id)

    assert [node.id for node in store.nodes] == [b.id, c.id]
    assert store.edges == [kept]


def test_delete_selected_node_clears_selection(store):
    a = store.add_node("telegram-receive", {"x": 0, "y": 0})
    b = store.add_node("telegram", {"x": 0, "y": 0})
    edge = store.add_edge(a.id, b.id)
    store.set_selected_node(a)
    store.set_selected_edge(edge)

    store.delete_node(a.id)

    assert store.selected_node is None
    assert store.selected_edge is None


def test_add_edge_rejects_duplicate_connection(store):
    a = store.add_node("telegram-receive", {"x": 0, "y": 0})
    b = store.add_node("telegram", {"x": 0, "y": 0})

    edge = store.add_edge(a.id, b.id)

    assert edge.type == "smoothstep"
    assert edge.animated is True
    assert store.add_edge(a.id, b.id) is None
    assert store.add_edge(a.id, b.id, source_handle="out") is not None
    assert len(store.edges) == 2


def test_delete_edge(store):
    a = store.add_node("telegram-receive", {"x": 0, "y": 0})
    b = store.add_node("telegram", {"x": 0, "y": 0})
    edge = store.add_edge(a.id, b.id)
    store.set_selected_edge(edge)

    store.delete_edge(edge.id)

    assert store.edges == []
    assert store.selected_edge is None


def test_source_nodes(store):
    a = store.add_node("telegram-receive", {"x": 0, "y": 0})
    b = store.add_node("telegram", {"x": 0, "y": 0})
    c = store.add_node("delay", {"x": 0, "y": 0})
    store.add_edge(a.id, b.id)

    assert [node.id for node in store.source_nodes()] == [a.id, c.id]
    assert [edge.target for edge in store.outgoing_edges(a.id)] == [b.id]
    assert [edge.source for edge in store.incoming_edges(b.id)] == [a.id]


def test_get_node_raises_for_missing_id(store):
    with pytest.raises(NodeNotFoundError):
        store.get_node("missing")
    assert store.find_node("missing") is None


def test_snapshot_is_a_copy(store):
    node = store.add_node("delay", {"x": 0, "y": 0})

    snapshot = store.snapshot()
    snapshot.nodes[0].data.label = "changed"

    assert store.get_node(node.id).data.label == "Delay"


def test_replace_swaps_graph_and_clears_selection(store):
    store.add_node("delay", {"x": 0, "y": 0})
    snapshot = GraphSnapshot(
        nodes=[
            Node(id="x", data=NodeData(label="X", type="telegram")),
            Node(id="y", data=NodeData(label="Y", type="delay")),
        ],
        edges=[Edge(id="e", source="x", target="y")],
    )

    store.replace(snapshot)

    assert [node.id for node in store.nodes] == ["x", "y"]
    assert [edge.id for edge in store.edges] == ["e"]
    assert store.selected_node is None
