"""Pytest configuration and fixtures for Flowbridge tests."""

import asyncio
import itertools
from typing import Any, Dict, List, Optional

import pytest

from flowbridge import (
    AdapterRegistry,
    BaseAdapter,
    EngineConfig,
    GraphStore,
    MemoryBackend,
    Node,
    NodeData,
    PropagationTier,
    WorkflowEngine,
)


class RecordingAdapter(BaseAdapter):
    """Adapter that records when it starts and ends, and what it received."""

    def __init__(
        self,
        node_type: str,
        log: List[tuple],
        tier: PropagationTier = PropagationTier.SEQUENTIAL,
        delay: float = 0.0,
        fail: bool = False,
    ):
        self.node_type = node_type
        self.tier = tier
        self.log = log
        self.delay = delay
        self.fail = fail
        self.inputs: List[Any] = []

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> Any:
        self.inputs.append(input)
        self.log.append(("start", self.node_type))
        await asyncio.sleep(self.delay)
        if self.fail:
            self.log.append(("fail", self.node_type))
            raise RuntimeError(f"{self.node_type} failed intentionally")
        self.log.append(("end", self.node_type))
        return {"from": self.node_type, "input": input}


class FakeHandle:
    """Long-running handle whose items are pushed by the test."""

    def __init__(self, fail_on_stop: bool = False):
        self.callback = None
        self.started = False
        self.stopped = False
        self.fail_on_stop = fail_on_stop
        self.pending: List[Any] = []

    def start(self, callback) -> None:
        self.callback = callback
        self.started = True

    async def stop(self) -> None:
        self.stopped = True
        self.callback = None
        if self.fail_on_stop:
            raise RuntimeError("shutdown handshake failed")

    async def check_now(self) -> List[Any]:
        items, self.pending = self.pending, []
        for item in items:
            await self.emit(item)
        return items

    async def emit(self, item: Any) -> None:
        assert self.callback is not None, "handle is not started"
        await self.callback(item)


class FakeTriggerAdapter(BaseAdapter):
    """Trigger adapter handing out a fresh FakeHandle on every execution."""

    tier = PropagationTier.SEQUENTIAL

    def __init__(self, node_type: str = "fake-trigger", fail_on_stop: bool = False):
        self.node_type = node_type
        self.fail_on_stop = fail_on_stop
        self.handles: List[FakeHandle] = []

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> FakeHandle:
        handle = FakeHandle(fail_on_stop=self.fail_on_stop)
        self.handles.append(handle)
        return handle

    @property
    def handle(self) -> Optional[FakeHandle]:
        return self.handles[-1] if self.handles else None


def make_node(node_id: str, node_type: str, config: Optional[Dict[str, Any]] = None) -> Node:
    """Build a node directly (bypassing the catalog)."""
    return Node(
        id=node_id,
        data=NodeData(label=node_id, type=node_type, config=config or {}),
    )


@pytest.fixture
def id_factory():
    """Deterministic id generator: n1, n2, ..."""
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


@pytest.fixture
def store(id_factory):
    """Create an empty graph store with predictable ids."""
    return GraphStore(id_factory=id_factory)


@pytest.fixture
def registry():
    """Create an adapter registry without the built-in HTTP adapters."""
    return AdapterRegistry(builtins=False)


@pytest.fixture
def engine_config():
    return EngineConfig(blip_seconds=0.05, max_concurrency=10)


@pytest.fixture
def engine(store, registry, engine_config):
    """Create an engine over the store and registry fixtures."""
    return WorkflowEngine(store, registry=registry, config=engine_config)


@pytest.fixture
def backend():
    """Create an in-memory snapshot backend."""
    return MemoryBackend()


@pytest.fixture
def execution_log():
    return []
