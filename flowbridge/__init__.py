"""
Flowbridge: asynchronous workflow execution engine

Runs graphs assembled on a React Flow canvas: trigger nodes poll an
automation backend for new items, and every detected item flows along the
graph's edges to action nodes (send a Telegram message, upload to Arweave,
wait). Notify-type consumers are joined before background uploads are
spawned, and a global start/stop lifecycle tears down every active poller.

Example:
    >>> from flowbridge import GraphStore, WorkflowEngine
    >>>
    >>> store = GraphStore()
    >>> trigger = store.add_node("telegram-receive", {"x": 0, "y": 0})
    >>> notify = store.add_node("telegram", {"x": 300, "y": 0})
    >>> upload = store.add_node("arweave-upload", {"x": 300, "y": 150})
    >>> store.update_node_data(notify.id, {"config": {"chatId": "42", "message": "New file"}})
    >>> store.add_edge(trigger.id, notify.id)
    >>> store.add_edge(trigger.id, upload.id)
    >>>
    >>> engine = WorkflowEngine(store)
    >>> await engine.start()
    >>> ...
    >>> await engine.stop()
"""

__version__ = "0.1.0"

# Core components
from flowbridge.core.graph import Edge, GraphSnapshot, Node, NodeData, Position
from flowbridge.core.store import GraphStore
from flowbridge.core.engine import WorkflowEngine
from flowbridge.core.events import EventEmitter, EventType, ExecutionEvent
from flowbridge.core.state import ExecutionStateProjection, NodeStatus

# Node catalog and adapters
from flowbridge import catalog
from flowbridge.utils.registry import AdapterRegistry
from flowbridge.adapters.base import BaseAdapter, CapabilityAdapter, LongRunningHandle, PropagationTier
from flowbridge.adapters.poller import Poller

# Persistence
from flowbridge.backends import MemoryBackend, SnapshotBackend, SQLiteBackend
from flowbridge.persistence import WorkflowPersistence, deserialize_graph, serialize_graph

# Configuration and errors
from flowbridge.utils.config import EngineConfig, load_env
from flowbridge.utils.logging import configure_logging
from flowbridge.utils.errors import (
    FlowbridgeError,
    NodeNotFoundError,
    UnknownNodeTypeError,
    ConfigurationError,
    AdapterError,
    AdapterHandshakeError,
    NodeExecutionError,
    SnapshotError,
)

__all__ = [
    # Core
    "Edge",
    "GraphSnapshot",
    "Node",
    "NodeData",
    "Position",
    "GraphStore",
    "WorkflowEngine",
    "EventEmitter",
    "EventType",
    "ExecutionEvent",
    "ExecutionStateProjection",
    "NodeStatus",
    # Catalog and adapters
    "catalog",
    "AdapterRegistry",
    "BaseAdapter",
    "CapabilityAdapter",
    "LongRunningHandle",
    "PropagationTier",
    "Poller",
    # Persistence
    "MemoryBackend",
    "SnapshotBackend",
    "SQLiteBackend",
    "WorkflowPersistence",
    "serialize_graph",
    "deserialize_graph",
    # Configuration
    "EngineConfig",
    "load_env",
    "configure_logging",
    # Errors
    "FlowbridgeError",
    "NodeNotFoundError",
    "UnknownNodeTypeError",
    "ConfigurationError",
    "AdapterError",
    "AdapterHandshakeError",
    "NodeExecutionError",
    "SnapshotError",
]
