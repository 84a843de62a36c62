"""Core graph data structures for Flowbridge.

Nodes and edges mirror the React Flow objects the canvas works with, so a
snapshot written by the front-end loads without translation. Field names are
snake_case in Python and camelCase on the wire.
"""

from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """2D canvas coordinate of a node."""

    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)


class NodeData(BaseModel):
    """Display metadata and configuration carried by a node.

    ``type`` is the node-type identifier that selects the capability adapter
    at execution time (e.g. ``"telegram-receive"``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    label: str
    type: str
    icon: str = ""
    description: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)


class Node(BaseModel):
    """A node placed on the canvas.

    Attributes:
        id: Unique identifier within the graph
        type: Canvas renderer name (``"customNode"`` for every catalog node)
        position: Canvas coordinate
        data: Node metadata and configuration
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    type: str = "customNode"
    position: Position = Field(default_factory=Position)
    data: NodeData

    @property
    def node_type(self) -> str:
        """Node-type identifier used for adapter dispatch."""
        return self.data.type

    @property
    def config(self) -> Dict[str, Any]:
        return self.data.config


class Edge(BaseModel):
    """Represents a directed connection between two nodes in the graph."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    source: str
    target: str
    source_handle: Optional[str] = Field(None, alias="sourceHandle")
    target_handle: Optional[str] = Field(None, alias="targetHandle")
    type: str = "smoothstep"
    animated: bool = True

    @property
    def connection_key(self) -> tuple:
        """The tuple that must be unique across all edges of a graph."""
        return (self.source, self.target, self.source_handle, self.target_handle)

    def __hash__(self):
        return hash(self.connection_key)


class GraphSnapshot(BaseModel):
    """Serializable ``{nodes, edges}`` view of a graph."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


def find_source_nodes(nodes: List[Node], edges: List[Edge]) -> List[Node]:
    """Return nodes with zero incoming edges, in node order.

    A node with at least one incoming edge is never a source, even if no
    source can reach it.

    Args:
        nodes: All nodes in the graph
        edges: All edges in the graph

    Returns:
        Source nodes (execution entry points)
    """
    targets: Set[str] = {edge.target for edge in edges}
    return [node for node in nodes if node.id not in targets]


def outgoing_edges(edges: List[Edge], node_id: str) -> List[Edge]:
    """Edges whose source is ``node_id``, in insertion order."""
    return [edge for edge in edges if edge.source == node_id]


def incoming_edges(edges: List[Edge], node_id: str) -> List[Edge]:
    """Edges whose target is ``node_id``, in insertion order."""
    return [edge for edge in edges if edge.target == node_id]
