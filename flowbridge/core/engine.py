"""Workflow execution engine.

This module implements the per-node state machine that walks the graph from
its source nodes, invokes capability adapters, routes results along edges
and owns the run state.

A one-shot node runs its children one after another, each awaited. An item
emitted by a trigger is fanned out in three tiers chosen by the *target*
adapter:

1. notify targets run concurrently and are joined
2. background targets are spawned afterwards and never awaited
3. everything else runs sequentially, each awaited in turn

Long-running adapters (triggers) return a handle instead of a value. The
engine keeps the handle in the run state, starts it with a callback, and
stops it on :meth:`WorkflowEngine.stop`.
"""

import asyncio
import functools
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from flowbridge.adapters.base import PropagationTier, get_stop, is_long_running
from flowbridge.core.events import EventEmitter, EventType, ExecutionEvent
from flowbridge.core.graph import Node
from flowbridge.core.state import ExecutionStateProjection, NodeStatus, RunState
from flowbridge.core.store import GraphStore
from flowbridge.parallel import BackgroundSupervisor, ParallelConfig, ParallelExecutor
from flowbridge.utils.config import EngineConfig
from flowbridge.utils.errors import NodeExecutionError, NodeNotFoundError
from flowbridge.utils.registry import AdapterRegistry

logger = logging.getLogger(__name__)

DEFAULT_NOTIFY_MESSAGE = "parallel before"


class WorkflowEngine:
    """Executes the graph held by a :class:`GraphStore`.

    Key features:
    - Independent execution of every source node on start
    - Tiered fan-out of trigger items (joined notify batch, background spawn)
    - Pass-through for node types without an adapter
    - Long-running trigger handles with success "blips"
    - Idempotent, non-raising stop that tears down every handle

    Example:
        >>> store = GraphStore()
        >>> engine = WorkflowEngine(store)
        >>> await engine.start()
        >>> engine.state.node_execution_state
        {'a1b2...': <NodeStatus.RUNNING: 'running'>}
        >>> await engine.stop()
    """

    def __init__(
        self,
        store: GraphStore,
        registry: Optional[AdapterRegistry] = None,
        config: Optional[EngineConfig] = None,
        event_emitter: Optional[EventEmitter] = None,
    ):
        """Initialize engine.

        Args:
            store: Graph store supplying nodes and edges
            registry: Adapter registry (built-in adapters if omitted)
            config: Engine tunables
            event_emitter: Optional event emitter for observers
        """
        self.store = store
        self.registry = registry if registry is not None else AdapterRegistry()
        self.config = config or EngineConfig()
        self.events = event_emitter or EventEmitter()

        self._state = RunState()
        self.state = ExecutionStateProjection(self._state)

        self.parallel = ParallelExecutor(ParallelConfig(max_concurrency=self.config.max_concurrency))
        self.supervisor = BackgroundSupervisor()
        self._lifecycle_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    # ------------------------------------------------------------------
    # Global lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> List[asyncio.Task]:
        """Start the workflow from every source node.

        Run state is cleared and the run flag set in one step. Each source
        node executes as its own task, so one failing source never halts the
        others. A start while a run is active stops that run first.

        Returns:
            The spawned source-node tasks

        Raises:
            Exception: Any failure while spawning; the run flag is cleared
                but node state already written is kept
        """
        async with self._lifecycle_lock:
            if self._state.is_running:
                logger.warning("Workflow already running; stopping it before restarting")
                await self._stop_locked()

            run_id = self._state.reset(is_running=True)
            try:
                sources = self.store.source_nodes()
                logger.info(
                    "Starting workflow run %s with %d source node(s)", run_id, len(sources)
                )
                tasks = [
                    self.supervisor.spawn(
                        self.execute(node.id), name=f"source:{node.id}", run_id=run_id
                    )
                    for node in sources
                ]
            except Exception:
                logger.exception("Error starting workflow")
                self._state.is_running = False
                raise

        await self._emit(
            ExecutionEvent(
                type=EventType.WORKFLOW_START,
                metadata={"run_id": run_id, "source_nodes": [node.id for node in sources]},
            )
        )
        return tasks

    async def stop(self) -> None:
        """Stop the workflow.

        Stops every long-running handle in the run state (a failing stop is
        logged and does not prevent the others), cancels outstanding
        background work, then clears the run state. Safe to call when
        nothing is running; never raises.
        """
        async with self._lifecycle_lock:
            await self._stop_locked()

    async def _stop_locked(self) -> None:
        state = self._state
        was_running = state.is_running
        run_id = state.run_id
        if was_running:
            logger.info("Stopping workflow run %s", run_id)

        for node_id, status in list(state.node_execution_state.items()):
            if status == NodeStatus.RUNNING and get_stop(state.node_results.get(node_id)) is None:
                logger.debug("Running node %s has no stop method", node_id)

        # Includes triggers that are mid-blip and so not marked running
        for node_id, result in list(state.node_results.items()):
            stop = get_stop(result)
            if stop is None:
                continue
            try:
                await stop()
                logger.info("Stopped long-running node %s", node_id)
            except Exception:
                logger.exception("Error stopping node %s", node_id)

        await self.supervisor.cancel_all()

        if was_running or state.node_execution_state or state.node_results:
            state.reset(is_running=False)

        if was_running:
            await self._emit(
                ExecutionEvent(type=EventType.WORKFLOW_STOP, metadata={"run_id": run_id})
            )
            logger.info("Workflow stopped")

    async def wait_idle(self) -> None:
        """Wait for all supervised tasks (sources, background, blips) to finish."""
        await self.supervisor.wait_idle()

    async def __aenter__(self) -> "WorkflowEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Per-node execution
    # ------------------------------------------------------------------

    async def execute(self, node_id: str, input: Any = None) -> Any:
        """Execute one node and propagate its result.

        Args:
            node_id: Node to execute
            input: Value produced upstream, if any

        Returns:
            The adapter's result (or the handle of a long-running node, or
            the unchanged input for a node type without adapter)

        Raises:
            NodeNotFoundError: If ``node_id`` is not in the graph
            NodeExecutionError: If this node or a joined descendant fails
        """
        node = self.store.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        state = self._state
        run_id = state.run_id
        node_type = node.node_type
        logger.info("Executing node '%s' (%s) with ID %s", node.data.label, node_type, node_id)

        state.set_status(node_id, NodeStatus.RUNNING)
        await self._emit_node(EventType.NODE_START, node)

        adapter = self.registry.find(node_type)
        if adapter is None:
            logger.warning(
                "No adapter registered for node type %r; passing input through", node_type
            )
            state.set_result(node_id, input)
            state.set_status(node_id, NodeStatus.SUCCESS)
            await self._emit_node(EventType.NODE_COMPLETE, node, output=input)
            await self._propagate(node, input)
            return input

        try:
            result = await adapter.execute(dict(node.config), input)
        except Exception as e:
            logger.error("Error executing node %s (%s): %s", node_id, node_type, e)
            if state.run_id == run_id:
                state.set_error(node_id, str(e))
                await self._emit_node(EventType.NODE_ERROR, node, error=str(e))
            raise NodeExecutionError(node_id, str(e), e) from e

        if state.run_id != run_id:
            # The run this execution belonged to is gone
            logger.info("Run ended while node %s executed; discarding its result", node_id)
            if is_long_running(result):
                await result.stop()
            return result

        if is_long_running(result):
            return await self._arm(node, result, run_id)

        state.set_result(node_id, result)
        state.set_status(node_id, NodeStatus.SUCCESS)
        await self._emit_node(EventType.NODE_COMPLETE, node, output=result)

        await self._propagate(node, result)
        return result

    async def check_now(self, node_id: str) -> List[Any]:
        """Run one detection cycle of a long-running node immediately.

        Returns:
            Items the detection produced (empty when nothing is new or the
            workflow is not running)

        Raises:
            NodeNotFoundError: If ``node_id`` is not in the graph
        """
        if not self.store.has_node(node_id):
            raise NodeNotFoundError(node_id)
        if not self._state.is_running:
            return []
        handle = self._state.node_results.get(node_id)
        check = getattr(handle, "check_now", None)
        if check is None:
            logger.warning("Node %s has no manual check operation", node_id)
            return []
        return await check()

    # ------------------------------------------------------------------
    # Long-running triggers
    # ------------------------------------------------------------------

    async def _arm(self, node: Node, handle: Any, run_id: int) -> Any:
        state = self._state
        previous = state.node_results.get(node.id)
        stop_previous = get_stop(previous) if previous is not handle else None
        if stop_previous is not None:
            logger.info("Node %s re-armed; stopping its previous listener", node.id)
            try:
                await stop_previous()
            except Exception:
                logger.exception("Error stopping previous listener of node %s", node.id)

        state.set_result(node.id, handle)
        state.set_status(node.id, NodeStatus.RUNNING)
        try:
            handle.start(functools.partial(self._on_item, node.id, run_id))
        except Exception as e:
            logger.error("Error starting listener for node %s: %s", node.id, e)
            state.set_error(node.id, str(e))
            await self._emit_node(EventType.NODE_ERROR, node, error=str(e))
            await handle.stop()
            raise NodeExecutionError(node.id, str(e), e) from e

        logger.info("Node %s is armed and waiting for new items", node.id)
        return handle

    async def _on_item(self, node_id: str, run_id: int, item: Any) -> None:
        """Handle one item emitted by a long-running node.

        The trigger blips to ``success``, notify children are joined and
        background children spawned, then control returns to the poller.
        """
        state = self._state
        if not state.is_current(run_id):
            logger.debug("Ignoring item from node %s of a finished run", node_id)
            return
        node = self.store.find_node(node_id)
        if node is None:
            logger.warning("Trigger node %s no longer exists; ignoring item", node_id)
            return

        state.set_status(node_id, NodeStatus.SUCCESS)
        await self._emit_node(EventType.TRIGGER_FIRED, node, output=item)

        try:
            await self._propagate_tiered(node, item, notify_input=self._notify_input(node, item))
        finally:
            self.supervisor.spawn(
                self._revert_after_blip(node_id, run_id), name=f"blip:{node_id}", run_id=run_id
            )

    async def _revert_after_blip(self, node_id: str, run_id: int) -> None:
        await asyncio.sleep(self.config.blip_seconds)
        state = self._state
        if state.is_current(run_id) and state.get_status(node_id) == NodeStatus.SUCCESS:
            state.set_status(node_id, NodeStatus.RUNNING)

    @staticmethod
    def _notify_input(node: Node, item: Any) -> Any:
        """Mark an item as the "before work started" signal for notify targets."""
        if not isinstance(item, dict):
            return item
        return {
            **item,
            "messageContext": "before",
            "originalMessage": node.config.get("message") or DEFAULT_NOTIFY_MESSAGE,
        }

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def _children(self, node_id: str) -> List[Node]:
        children = []
        for edge in self.store.outgoing_edges(node_id):
            target = self.store.find_node(edge.target)
            if target is None:
                logger.warning("Edge %s points to missing node %s", edge.id, edge.target)
                continue
            children.append(target)
        return children

    async def _run_sequentially(
        self,
        targets: List[Node],
        value: Any,
        errors: List[Tuple[str, BaseException]],
    ) -> None:
        for target in targets:
            try:
                await self.execute(target.id, value)
            except Exception as e:
                errors.append((target.id, e))

    @staticmethod
    def _raise_first(node: Node, errors: List[Tuple[str, BaseException]]) -> None:
        if not errors:
            return
        for failed_id, error in errors[1:]:
            logger.error("Child %s of %s also failed: %s", failed_id, node.id, error)
        raise errors[0][1]

    async def _propagate(self, node: Node, value: Any) -> None:
        """Execute every child of a one-shot node in edge order, each awaited.

        Raises:
            NodeExecutionError: The first child failure, after every child ran
        """
        errors: List[Tuple[str, BaseException]] = []
        await self._run_sequentially(self._children(node.id), value, errors)
        self._raise_first(node, errors)

    async def _propagate_tiered(self, node: Node, value: Any, notify_input: Any = None) -> None:
        """Fan an item emitted by a trigger out to its children by tier.

        Notify children run concurrently and are joined, background children
        are then spawned without being awaited, and the remaining children
        run one after another.

        Args:
            node: Trigger node that emitted ``value``
            value: Input for the children
            notify_input: Input for notify-tier children (defaults to ``value``)

        Raises:
            NodeExecutionError: The first failure among joined children,
                after every child has been dispatched
        """
        tiers: Dict[PropagationTier, List[Node]] = {tier: [] for tier in PropagationTier}
        for target in self._children(node.id):
            tiers[self.registry.tier_of(target.node_type)].append(target)
        errors: List[Tuple[str, BaseException]] = []

        notify = tiers[PropagationTier.NOTIFY]
        if notify:
            batch_input = value if notify_input is None else notify_input
            logger.info("Dispatching %d notify target(s) from %s", len(notify), node.id)
            batch = await self.parallel.execute_batch(
                [(target.id, batch_input) for target in notify], self.execute
            )
            errors.extend(batch.errors)

        for target in tiers[PropagationTier.BACKGROUND]:
            logger.info("Starting background execution of %s from %s", target.id, node.id)
            self.supervisor.spawn(
                self.execute(target.id, value),
                name=f"background:{target.id}",
                run_id=self._state.run_id,
            )

        await self._run_sequentially(tiers[PropagationTier.SEQUENTIAL], value, errors)
        self._raise_first(node, errors)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def _emit_node(
        self,
        event_type: EventType,
        node: Node,
        output: Any = None,
        error: Optional[str] = None,
    ) -> None:
        await self._emit(
            ExecutionEvent(
                type=event_type,
                node_id=node.id,
                node_type=node.node_type,
                output=None if is_long_running(output) else output,
                error=error,
                timestamp=datetime.now(),
            )
        )

    async def _emit(self, event: ExecutionEvent) -> None:
        await self.events.emit(event)

    def __repr__(self) -> str:
        return f"WorkflowEngine(running={self._state.is_running}, store={self.store!r})"
