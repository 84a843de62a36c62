"""Run state and its read-only projection.

:class:`RunState` is owned by the engine. Every write touches a single key
of one mapping, so interleaved tasks (source fan-out, poll ticks, notify
batches) never lose each other's updates. :class:`ExecutionStateProjection`
is the read-only view handed to observers.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class NodeStatus(str, Enum):
    """Per-node execution status."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class RunState:
    """Mutable execution state for the current run.

    Attributes:
        is_running: Global run flag
        run_id: Incremented on every start/stop so stale callbacks can
            tell that the run they belong to is over
        node_execution_state: Node ID -> status
        node_results: Node ID -> adapter output or long-running handle
        node_errors: Node ID -> error message for nodes in ``error``
    """

    def __init__(self):
        self.is_running: bool = False
        self.run_id: int = 0
        self.node_execution_state: Dict[str, NodeStatus] = {}
        self.node_results: Dict[str, Any] = {}
        self.node_errors: Dict[str, str] = {}

    def reset(self, is_running: bool) -> int:
        """Clear every per-node mapping and set the global flag in one step.

        Args:
            is_running: New value of the global run flag

        Returns:
            The new run id
        """
        self.is_running = is_running
        self.run_id += 1
        self.node_execution_state = {}
        self.node_results = {}
        self.node_errors = {}
        return self.run_id

    def set_status(self, node_id: str, status: NodeStatus) -> None:
        self.node_execution_state[node_id] = status
        if status != NodeStatus.ERROR:
            self.node_errors.pop(node_id, None)

    def set_result(self, node_id: str, result: Any) -> None:
        self.node_results[node_id] = result

    def set_error(self, node_id: str, message: str) -> None:
        self.node_execution_state[node_id] = NodeStatus.ERROR
        self.node_errors[node_id] = message

    def get_status(self, node_id: str) -> Optional[NodeStatus]:
        return self.node_execution_state.get(node_id)

    def is_current(self, run_id: int) -> bool:
        """True while ``run_id`` identifies an active run."""
        return self.is_running and self.run_id == run_id


class ExecutionStateProjection:
    """Read-only view of a :class:`RunState`.

    The projection reads through to the live state, so it reflects every
    transition the moment the engine makes it.

    Example:
        >>> view = engine.state
        >>> view.is_running
        False
        >>> view.node_execution_state.get("n1")
    """

    def __init__(self, state: RunState):
        self._state = state

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def node_execution_state(self) -> Mapping[str, NodeStatus]:
        return MappingProxyType(self._state.node_execution_state)

    @property
    def node_results(self) -> Mapping[str, Any]:
        return MappingProxyType(self._state.node_results)

    @property
    def node_errors(self) -> Mapping[str, str]:
        return MappingProxyType(self._state.node_errors)

    def status_of(self, node_id: str) -> Optional[NodeStatus]:
        return self._state.get_status(node_id)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict copy of the projection (handles rendered by repr)."""
        return {
            "is_running": self.is_running,
            "node_execution_state": {
                node_id: status.value
                for node_id, status in self._state.node_execution_state.items()
            },
            "node_results": {
                node_id: result if _is_plain(result) else repr(result)
                for node_id, result in self._state.node_results.items()
            },
            "node_errors": dict(self._state.node_errors),
        }


def _is_plain(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool, list, dict))
