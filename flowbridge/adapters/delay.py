"""Delay adapter: wait, then pass the input through."""

import asyncio
from typing import Any, Dict

from flowbridge.adapters.base import BaseAdapter, PropagationTier
from flowbridge.utils.errors import ConfigurationError


class DelayAdapter(BaseAdapter):
    """Sleep for ``config["delay"]`` seconds and forward the input unchanged."""

    node_type = "delay"
    tier = PropagationTier.SEQUENTIAL

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> Any:
        raw = config.get("delay", 0)
        try:
            seconds = float(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(self.node_type, "delay", f"'delay' must be a number, got {raw!r}")
        if seconds < 0:
            raise ConfigurationError(self.node_type, "delay", f"'delay' must not be negative, got {raw!r}")

        await asyncio.sleep(seconds)
        return input
