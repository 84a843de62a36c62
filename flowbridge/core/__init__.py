"""Core execution engine components."""

from flowbridge.core.graph import Edge, GraphSnapshot, Node, NodeData, Position
from flowbridge.core.store import GraphStore
from flowbridge.core.events import EventEmitter, EventType, ExecutionEvent
from flowbridge.core.state import ExecutionStateProjection, NodeStatus, RunState
from flowbridge.core.engine import WorkflowEngine

__all__ = [
    "Edge",
    "GraphSnapshot",
    "Node",
    "NodeData",
    "Position",
    "GraphStore",
    "EventEmitter",
    "EventType",
    "ExecutionEvent",
    "ExecutionStateProjection",
    "NodeStatus",
    "RunState",
    "WorkflowEngine",
]
