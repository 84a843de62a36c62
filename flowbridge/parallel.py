"""Fan-out helpers for the execution engine.

- ParallelExecutor: joined, semaphore-limited batch (the notify tier)
- BackgroundSupervisor: single choke point for fire-and-forget work (the
  background tier, source-node fan-out and trigger blip timers)

Example:
    >>> executor = ParallelExecutor(ParallelConfig(max_concurrency=5))
    >>> result = await executor.execute_batch(
    ...     [("notify_1", item), ("notify_2", item)], engine.execute
    ... )
    >>> supervisor = BackgroundSupervisor()
    >>> supervisor.spawn(engine.execute("upload", item), name="upload", run_id=3)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Coroutine, Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ParallelConfig:
    """Configuration for joined batches.

    Attributes:
        max_concurrency: Maximum concurrent branches (default: 10)
    """

    max_concurrency: int = 10

    def __post_init__(self):
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")


@dataclass
class ParallelResult:
    """Result from a joined batch.

    Attributes:
        results: Mapping of node ID to result
        errors: (node ID, exception) for every failed branch, in dispatch order
        completed: Successfully completed node IDs
        failed: Failed node IDs
    """

    results: Dict[str, Any] = field(default_factory=dict)
    errors: List[Tuple[str, BaseException]] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def all_succeeded(self) -> bool:
        return len(self.errors) == 0 and len(self.completed) > 0


class ParallelExecutor:
    """Runs a batch of branches concurrently and waits for all of them.

    A failing branch never cancels its siblings; every failure is collected
    in the returned :class:`ParallelResult`.
    """

    def __init__(self, config: Optional[ParallelConfig] = None):
        """Initialize parallel executor.

        Args:
            config: Parallel execution configuration
        """
        self.config = config or ParallelConfig()

    async def execute_batch(
        self,
        branches: List[Tuple[str, Any]],
        node_executor: Callable[[str, Any], Awaitable[Any]],
    ) -> ParallelResult:
        """Execute every branch concurrently and join.

        Args:
            branches: List of (node_id, input) tuples
            node_executor: Async callable (node_id, input) -> result

        Returns:
            ParallelResult with results and any errors
        """
        if not branches:
            return ParallelResult()

        # Per batch: nested batches must not compete for one shared limit
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def run_branch(node_id: str, input_data: Any) -> Any:
            async with semaphore:
                return await node_executor(node_id, input_data)

        results = await asyncio.gather(
            *(run_branch(node_id, input_data) for node_id, input_data in branches),
            return_exceptions=True,
        )

        parallel_result = ParallelResult()
        for (node_id, _), result in zip(branches, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                parallel_result.errors.append((node_id, result))
                parallel_result.failed.append(node_id)
            else:
                parallel_result.results[node_id] = result
                parallel_result.completed.append(node_id)

        return parallel_result


class BackgroundSupervisor:
    """Tracks fire-and-forget tasks.

    Outcomes are only logged; nothing is propagated to whoever spawned the
    task. Tasks are tagged with the run id they belong to so a run's
    outstanding work can be inspected or cancelled.
    """

    def __init__(self):
        self._tasks: Dict[asyncio.Task, int] = {}

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str,
        run_id: int = 0,
    ) -> asyncio.Task:
        """Schedule ``coro`` as a supervised task.

        Args:
            coro: Coroutine to run
            name: Label for logs
            run_id: Run the task belongs to

        Returns:
            The created task
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks[task] = run_id
        task.add_done_callback(self._on_done)
        logger.debug("Spawned background task %s (run %s)", name, run_id)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.pop(task, None)
        if task.cancelled():
            logger.debug("Background task %s cancelled", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("Background task %s failed: %s", task.get_name(), error)
        else:
            logger.debug("Background task %s completed", task.get_name())

    def outstanding(self, run_id: Optional[int] = None) -> Set[asyncio.Task]:
        """Tasks still running, optionally restricted to one run."""
        return {
            task
            for task, task_run in self._tasks.items()
            if not task.done() and (run_id is None or task_run == run_id)
        }

    async def wait_idle(self) -> None:
        """Wait until no supervised task is running (including newly spawned ones)."""
        while True:
            pending = self.outstanding() - {asyncio.current_task()}
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def cancel_all(self, run_id: Optional[int] = None) -> None:
        """Cancel outstanding tasks and wait for them to finish."""
        pending = self.outstanding(run_id) - {asyncio.current_task()}
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def __len__(self) -> int:
        return len(self.outstanding())
