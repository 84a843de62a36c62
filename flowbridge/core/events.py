"""Event system for observing workflow execution.

Events are published alongside every run-state transition so that a UI or
log sink can follow a run without polling the state projection.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Execution event types."""

    # Workflow lifecycle
    WORKFLOW_START = "workflow-start"
    WORKFLOW_STOP = "workflow-stop"

    # Node lifecycle
    NODE_START = "node-start"
    NODE_COMPLETE = "node-complete"
    NODE_ERROR = "node-error"

    # A long-running trigger detected a new item
    TRIGGER_FIRED = "trigger-fired"


@dataclass
class ExecutionEvent:
    """A single execution event.

    Attributes:
        type: Event type
        node_id: Node the event refers to (None for workflow events)
        node_type: Node-type identifier of that node
        output: Result produced by the node, if any
        error: Error message for NODE_ERROR
        timestamp: When the event was created
        metadata: Additional free-form data
    """

    type: EventType
    node_id: Optional[str] = None
    node_type: Optional[str] = None
    output: Optional[Any] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a JSON-friendly dictionary."""
        payload: Dict[str, Any] = {
            "type": self.type.value if isinstance(self.type, EventType) else self.type,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.node_id:
            payload["node_id"] = self.node_id
        if self.node_type:
            payload["node_type"] = self.node_type
        if self.output is not None:
            payload["output"] = self.output
        if self.error is not None:
            payload["errorText"] = self.error
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


Listener = Callable[[ExecutionEvent], Awaitable[None]]


class EventEmitter:
    """Event emitter for publishing execution events.

    Listener failures are logged and never interrupt execution.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def on(self, listener: Listener) -> None:
        """Register an event listener.

        Args:
            listener: Async function that receives ExecutionEvent objects
        """
        self._listeners.append(listener)

    def off(self, listener: Listener) -> None:
        """Remove an event listener.

        Args:
            listener: The listener function to remove
        """
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def emit(self, event: ExecutionEvent) -> None:
        """Emit an event to all listeners.

        Args:
            event: The event to emit
        """
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception("Error in event listener for %s", event.type.value)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
