"""Capability adapters for workflow node types."""

from flowbridge.adapters.base import (
    BaseAdapter,
    CapabilityAdapter,
    LongRunningHandle,
    PropagationTier,
    is_long_running,
)
from flowbridge.adapters.poller import Poller
from flowbridge.adapters.telegram import (
    TelegramFileListener,
    TelegramReceiveAdapter,
    TelegramSendAdapter,
)
from flowbridge.adapters.arweave import ArweaveUploadAdapter
from flowbridge.adapters.delay import DelayAdapter

__all__ = [
    "BaseAdapter",
    "CapabilityAdapter",
    "LongRunningHandle",
    "PropagationTier",
    "is_long_running",
    "Poller",
    "TelegramFileListener",
    "TelegramReceiveAdapter",
    "TelegramSendAdapter",
    "ArweaveUploadAdapter",
    "DelayAdapter",
]
