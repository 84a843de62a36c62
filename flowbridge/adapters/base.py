"""Capability adapter protocol and base implementation.

A capability adapter performs the effect of one node type (send a message,
upload a file, listen for new files). The engine only depends on the
contract defined here:

- ``execute(config, input)`` returns a plain result, or
- for long-running node types, a :class:`LongRunningHandle` that the engine
  keeps in the run state and stops on ``WorkflowEngine.stop()``.

Adapters never retry; a failed call fails the branch.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from flowbridge.utils.errors import ConfigurationError


class PropagationTier(str, Enum):
    """How a node is scheduled when it is the *target* of a fan-out.

    - NOTIFY: dispatched concurrently with other notify targets and joined
      before anything else proceeds
    - BACKGROUND: spawned after the notify batch, never awaited
    - SEQUENTIAL: awaited one after another after the other tiers
    """

    NOTIFY = "notify"
    BACKGROUND = "background"
    SEQUENTIAL = "sequential"


ItemCallback = Callable[[Any], Awaitable[None]]


@runtime_checkable
class LongRunningHandle(Protocol):
    """Result of a long-running adapter (an armed listener).

    A handle may also offer ``async check_now() -> list`` to run one
    detection cycle on demand; the engine uses it when present.
    """

    def start(self, callback: ItemCallback) -> None:
        """Begin delivering detected items to ``callback``."""
        ...

    async def stop(self) -> None:
        """Cancel background work and release external resources."""
        ...


@runtime_checkable
class CapabilityAdapter(Protocol):
    """Protocol every adapter must implement."""

    node_type: str
    tier: PropagationTier
    required_config: Tuple[str, ...]

    async def execute(self, config: Dict[str, Any], input: Any = None) -> Any:
        """Perform the node's effect.

        Args:
            config: The node's configuration
            input: Value produced by the upstream node, if any

        Returns:
            Plain result or a LongRunningHandle

        Raises:
            Exception: If the effect fails
        """
        ...


class BaseAdapter(ABC):
    """Base implementation with config validation.

    Subclasses set ``node_type``, ``tier`` and ``required_config`` and
    implement ``_execute_impl()``.
    """

    node_type: str = ""
    tier: PropagationTier = PropagationTier.SEQUENTIAL
    required_config: Tuple[str, ...] = ()

    def validate_config(self, config: Dict[str, Any]) -> None:
        """Check that every required config field is present and non-empty.

        Raises:
            ConfigurationError: On the first missing field
        """
        for key in self.required_config:
            value = config.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ConfigurationError(self.node_type, key)

    @abstractmethod
    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> Any:
        """Subclasses implement the effect here."""
        pass

    async def execute(self, config: Dict[str, Any], input: Any = None) -> Any:
        """Validate ``config`` and run the effect."""
        self.validate_config(config)
        return await self._execute_impl(config, input)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(node_type='{self.node_type}')"


def is_long_running(result: Any) -> bool:
    """True if ``result`` is a handle the engine must keep and stop later.

    Only callable ``start`` and ``stop`` are required.
    """
    return callable(getattr(result, "start", None)) and callable(getattr(result, "stop", None))


def get_stop(result: Any) -> Optional[Callable[[], Awaitable[None]]]:
    """Return the ``stop`` coroutine function of a result, if it has one."""
    stop = getattr(result, "stop", None)
    return stop if callable(stop) else None
