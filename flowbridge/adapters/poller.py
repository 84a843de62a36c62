"""Per-node polling listener.

A :class:`Poller` is the long-running handle returned by trigger adapters.
It owns the remembered last-seen identifier, the recurring poll task and the
shutdown handshake, so no state is shared with the engine beyond the
callback it is started with.
"""

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from flowbridge.adapters.base import ItemCallback

logger = logging.getLogger(__name__)

FetchItems = Callable[[], Awaitable[List[Dict[str, Any]]]]
Shutdown = Callable[[], Awaitable[Any]]


def _id_sort_key(item: Dict[str, Any]) -> tuple:
    """Order numeric ids numerically and everything else lexically."""
    raw = item.get("id")
    try:
        return (1, int(raw), "")
    except (TypeError, ValueError):
        return (0, 0, str(raw))


def newest_item(items: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the item with the greatest identifier, or None if empty."""
    candidates = [item for item in items if item.get("id") is not None]
    if not candidates:
        return None
    return max(candidates, key=_id_sort_key)


class Poller:
    """Detects new items by comparing the newest identifier to the last one seen.

    Only the single newest item is emitted per detection, even when several
    appeared since the previous check. The read/compare/update sequence runs
    under a lock so a manual check cannot race a timer tick.

    Example:
        >>> poller = Poller(fetch_items=client.recent_files, interval=10)
        >>> poller.start(on_new_file)
        >>> await poller.check_now()
        >>> await poller.stop()
    """

    def __init__(
        self,
        fetch_items: FetchItems,
        interval: float,
        shutdown: Optional[Shutdown] = None,
        name: str = "poller",
        last_seen_id: Optional[str] = None,
    ):
        """Initialize poller.

        Args:
            fetch_items: Coroutine function returning the current items
            interval: Seconds between ticks
            shutdown: Coroutine function called once on stop
            name: Label used in log messages
            last_seen_id: Identifier to treat as already seen
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch_items = fetch_items
        self.interval = interval
        self.name = name
        self.last_seen_id = last_seen_id
        self._shutdown = shutdown
        self._callback: Optional[ItemCallback] = None
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self._stopped = False

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def detect(self) -> Optional[Dict[str, Any]]:
        """Fetch items and return the newest one if it has not been seen.

        Returns:
            The new item, or None when nothing changed
        """
        async with self._lock:
            item = newest_item(await self.fetch_items())
            if item is None:
                return None
            item_id = str(item["id"])
            if item_id == self.last_seen_id:
                return None
            self.last_seen_id = item_id
            return item

    async def check_now(self) -> List[Dict[str, Any]]:
        """Run one detection cycle and deliver a new item to the callback.

        Returns:
            ``[item]`` if a new item was found, otherwise ``[]``
        """
        if self._stopped:
            return []
        item = await self.detect()
        if item is None:
            logger.debug("%s: no new items", self.name)
            return []
        logger.info("%s: new item %s", self.name, item.get("id"))
        if self._callback is not None:
            await self._callback(item)
        return [item]

    def start(self, callback: ItemCallback) -> None:
        """Register ``callback`` and start the recurring poll task."""
        self._callback = callback
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._stopped = False
        self._task = asyncio.create_task(self._run(), name=f"{self.name}-poll")
        logger.info("%s: polling every %ss", self.name, self.interval)

    async def _run(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval)
            if self._stopped:
                break
            try:
                await self.check_now()
            except Exception:
                # Transient failures never end the loop
                logger.exception("%s: error during polling", self.name)

    async def stop(self) -> None:
        """Cancel polling, then run the shutdown handshake."""
        self._stopped = True
        self._callback = None
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._shutdown is not None:
            await self._shutdown()
        logger.info("%s: stopped", self.name)

    def __repr__(self) -> str:
        return f"Poller(name='{self.name}', interval={self.interval}, last_seen_id={self.last_seen_id!r})"
