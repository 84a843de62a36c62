"""Authoritative mutable graph plus editor selection state.

Every user action on the canvas (add, duplicate, delete node; connect,
delete edge) is routed through :class:`GraphStore`. The execution engine reads
the graph from here and never mutates it.
"""

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from flowbridge import catalog
from flowbridge.core.graph import (
    Edge,
    GraphSnapshot,
    Node,
    find_source_nodes,
    incoming_edges,
    outgoing_edges,
)
from flowbridge.utils.errors import NodeNotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_OFFSET = 50.0


def _new_id() -> str:
    return uuid.uuid4().hex


class GraphStore:
    """Node/edge collections and selection state.

    Example:
        >>> store = GraphStore()
        >>> trigger = store.add_node("telegram-receive", {"x": 0, "y": 0})
        >>> notify = store.add_node("telegram", {"x": 200, "y": 0})
        >>> store.add_edge(trigger.id, notify.id)
        >>> [n.id for n in store.source_nodes()] == [trigger.id]
        True
    """

    def __init__(self, id_factory: Callable[[], str] = _new_id):
        """Initialize an empty store.

        Args:
            id_factory: Callable producing fresh node/edge ids
        """
        self._id_factory = id_factory
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.selected_node: Optional[Node] = None
        self.selected_edge: Optional[Edge] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_node(self, node_id: str) -> Node:
        """Get a node by ID.

        Raises:
            NodeNotFoundError: If node does not exist
        """
        node = self.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def has_node(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def find_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def outgoing_edges(self, node_id: str) -> List[Edge]:
        return outgoing_edges(self.edges, node_id)

    def incoming_edges(self, node_id: str) -> List[Edge]:
        return incoming_edges(self.edges, node_id)

    def source_nodes(self) -> List[Node]:
        """Nodes with no incoming edge (entry points for execution)."""
        return find_source_nodes(self.nodes, self.edges)

    def snapshot(self) -> GraphSnapshot:
        """Deep copy of the current node and edge sets."""
        return GraphSnapshot(
            nodes=[node.model_copy(deep=True) for node in self.nodes],
            edges=[edge.model_copy(deep=True) for edge in self.edges],
        )

    # ------------------------------------------------------------------
    # Node actions
    # ------------------------------------------------------------------

    def set_nodes(self, nodes: List[Node]) -> None:
        self.nodes = list(nodes)

    def add_node(self, node_type: str, position: Dict[str, float]) -> Optional[Node]:
        """Create a node from the catalog defaults and select it.

        Args:
            node_type: Catalog node-type identifier
            position: Canvas coordinate ``{"x": ..., "y": ...}``

        Returns:
            The new node, or None if ``node_type`` is unknown (no mutation)
        """
        node_data = catalog.get_node_data(node_type)
        if node_data is None:
            logger.warning("Cannot add node of unknown type %r", node_type)
            return None

        node = Node(id=self._id_factory(), position=position, data=node_data)
        self.nodes = [*self.nodes, node]
        self.selected_node = node
        return node

    def update_node_data(self, node_id: str, data: Dict[str, Any]) -> Node:
        """Merge ``data`` into a node's data.

        A ``config`` key is merged into the existing config, so keys that are
        not mentioned survive.

        Args:
            node_id: Node to update
            data: Partial node data

        Returns:
            The updated node

        Raises:
            NodeNotFoundError: If the node does not exist (state unchanged)
        """
        node = self.find_node(node_id)
        if node is None:
            logger.error("Node with ID %s not found", node_id)
            raise NodeNotFoundError(node_id)

        updated = dict(data)
        if updated.get("config") is not None:
            updated["config"] = {**node.data.config, **updated["config"]}
        else:
            updated.pop("config", None)

        merged = {**node.data.model_dump(), **updated}
        new_node = node.model_copy(update={"data": type(node.data).model_validate(merged)})
        self.nodes = [new_node if n.id == node_id else n for n in self.nodes]

        if self.selected_node is not None and self.selected_node.id == node_id:
            self.selected_node = new_node

        logger.debug("Node %s updated", node_id, extra={"node_data": new_node.data.model_dump()})
        return new_node

    def duplicate_node(self, node_id: str) -> Optional[Node]:
        """Clone a node with a new id, offset by (+50, +50), and select it.

        Returns:
            The clone, or None if ``node_id`` does not exist
        """
        node = self.find_node(node_id)
        if node is None:
            return None

        clone = node.model_copy(deep=True)
        clone.id = self._id_factory()
        clone.position = node.position.offset(DUPLICATE_OFFSET, DUPLICATE_OFFSET)
        self.nodes = [*self.nodes, clone]
        self.selected_node = clone
        return clone

    def delete_node(self, node_id: str) -> None:
        """Remove a node and every edge that references it."""
        self.edges = [
            edge for edge in self.edges if edge.source != node_id and edge.target != node_id
        ]
        self.nodes = [node for node in self.nodes if node.id != node_id]
        if self.selected_node is not None and self.selected_node.id == node_id:
            self.selected_node = None
        if self.selected_edge is not None and self.find_edge(self.selected_edge.id) is None:
            self.selected_edge = None

    # ------------------------------------------------------------------
    # Edge actions
    # ------------------------------------------------------------------

    def set_edges(self, edges: List[Edge]) -> None:
        self.edges = list(edges)

    def add_edge(
        self,
        source: str,
        target: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
    ) -> Optional[Edge]:
        """Connect two nodes.

        Returns:
            The new edge, or None if an identical connection already exists
        """
        key = (source, target, source_handle, target_handle)
        if any(edge.connection_key == key for edge in self.edges):
            return None

        edge = Edge(
            id=self._id_factory(),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
            type="smoothstep",
            animated=True,
        )
        self.edges = [*self.edges, edge]
        return edge

    def delete_edge(self, edge_id: str) -> None:
        self.edges = [edge for edge in self.edges if edge.id != edge_id]
        if self.selected_edge is not None and self.selected_edge.id == edge_id:
            self.selected_edge = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_selected_node(self, node: Optional[Node]) -> None:
        self.selected_node = node

    def set_selected_edge(self, edge: Optional[Edge]) -> None:
        self.selected_edge = edge

    def replace(self, snapshot: GraphSnapshot) -> None:
        """Replace nodes and edges wholesale (used when loading)."""
        self.set_nodes(snapshot.nodes)
        self.set_edges(snapshot.edges)
        self.selected_node = None
        self.selected_edge = None

    def __repr__(self) -> str:
        return f"GraphStore(nodes={len(self.nodes)}, edges={len(self.edges)})"
