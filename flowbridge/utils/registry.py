"""Adapter registry mapping node-type identifiers to capability adapters.

The engine resolves a node's adapter through this registry once per
execution instead of branching on type strings.
"""

from typing import Dict, List, Optional, TYPE_CHECKING

from flowbridge.adapters.base import CapabilityAdapter, PropagationTier
from flowbridge.utils.errors import UnknownNodeTypeError

if TYPE_CHECKING:
    from flowbridge.clients.ardrive import ArDriveClient
    from flowbridge.clients.telegram import TelegramClient


class AdapterRegistry:
    """Registry for capability adapters.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.register(MyWebhookAdapter())
        >>> registry.get("webhook")
        MyWebhookAdapter(node_type='webhook')
        >>> registry.find("unknown") is None
        True
    """

    def __init__(
        self,
        builtins: bool = True,
        telegram_client: Optional["TelegramClient"] = None,
        ardrive_client: Optional["ArDriveClient"] = None,
    ):
        """Initialize registry.

        Args:
            builtins: Register the built-in adapters
            telegram_client: Client shared by the Telegram adapters
            ardrive_client: Client used by the Arweave adapter
        """
        self._adapters: Dict[str, CapabilityAdapter] = {}

        if builtins:
            self._register_builtin_adapters(telegram_client, ardrive_client)

    def _register_builtin_adapters(self, telegram_client, ardrive_client) -> None:
        """Register built-in adapters."""
        from flowbridge.adapters.arweave import ArweaveUploadAdapter
        from flowbridge.adapters.delay import DelayAdapter
        from flowbridge.adapters.telegram import TelegramReceiveAdapter, TelegramSendAdapter
        from flowbridge.clients.ardrive import ArDriveClient
        from flowbridge.clients.telegram import TelegramClient

        telegram_client = telegram_client or TelegramClient()
        ardrive_client = ardrive_client or ArDriveClient()

        self.register(TelegramReceiveAdapter(telegram_client))
        self.register(TelegramSendAdapter(telegram_client))
        self.register(ArweaveUploadAdapter(ardrive_client))
        self.register(DelayAdapter())

    def register(self, adapter: CapabilityAdapter, node_type: Optional[str] = None) -> None:
        """Register an adapter, replacing any adapter for the same type.

        Args:
            adapter: Adapter instance
            node_type: Override for ``adapter.node_type``
        """
        self._adapters[node_type or adapter.node_type] = adapter

    def unregister(self, node_type: str) -> None:
        self._adapters.pop(node_type, None)

    def find(self, node_type: str) -> Optional[CapabilityAdapter]:
        """Get the adapter for a node type, or None."""
        return self._adapters.get(node_type)

    def get(self, node_type: str) -> CapabilityAdapter:
        """Get the adapter for a node type.

        Raises:
            UnknownNodeTypeError: If no adapter is registered
        """
        if node_type not in self._adapters:
            raise UnknownNodeTypeError(
                f"No adapter registered for node type '{node_type}'. "
                f"Available types: {', '.join(self._adapters.keys())}"
            )
        return self._adapters[node_type]

    def tier_of(self, node_type: str) -> PropagationTier:
        """Propagation tier of a node type; unregistered types are sequential."""
        adapter = self.find(node_type)
        if adapter is None:
            return PropagationTier.SEQUENTIAL
        return getattr(adapter, "tier", PropagationTier.SEQUENTIAL)

    def has(self, node_type: str) -> bool:
        return node_type in self._adapters

    def list_node_types(self) -> List[str]:
        return list(self._adapters.keys())

    def clear(self) -> None:
        self._adapters.clear()

    def __repr__(self) -> str:
        return f"AdapterRegistry(adapters={len(self._adapters)})"
