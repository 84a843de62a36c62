"""Telegram capability adapters.

- ``telegram``: send a message (notify tier, so downstream uploads wait
  until the message is out)
- ``telegram-receive``: long-running trigger that polls the bot's recent
  files and emits the newest unseen one
"""

import logging
from typing import Any, Dict, List, Optional

from flowbridge.adapters.base import BaseAdapter, PropagationTier
from flowbridge.adapters.poller import Poller
from flowbridge.clients.telegram import TelegramClient
from flowbridge.utils.errors import AdapterError, AdapterHandshakeError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = "10"
DEFAULT_MESSAGE_TYPES = "all"
DEFAULT_MAX_FILE_SIZE_MB = "50"


class TelegramSendAdapter(BaseAdapter):
    """Send a Telegram message to ``config["chatId"]``.

    Output format:
        {
            "success": True,
            "sentTo": "<chat id>",
            "message": "<text>",
            "response": <backend response>,
            "inputData": <upstream value>,
        }
    """

    node_type = "telegram"
    tier = PropagationTier.NOTIFY
    required_config = ("chatId", "message")

    def __init__(self, client: Optional[TelegramClient] = None):
        self.client = client or TelegramClient()

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> Dict[str, Any]:
        chat_id = str(config["chatId"])
        message = str(config["message"])

        response = await self.client.send_message(chat_id, message)
        logger.info("Message sent to chat %s", chat_id)

        return {
            "success": True,
            "sentTo": chat_id,
            "message": message,
            "response": response,
            "inputData": input,
        }


class TelegramFileListener(Poller):
    """Long-running handle for a ``telegram-receive`` node.

    Polls the bot's recent files, applies the node's type and size filters,
    and stops the bot on shutdown.
    """

    def __init__(
        self,
        client: TelegramClient,
        interval: float,
        message_types: str = DEFAULT_MESSAGE_TYPES,
        max_file_size_mb: Optional[float] = None,
        name: str = "telegram-receive",
    ):
        self.client = client
        self.message_types = message_types
        self.max_file_size_mb = max_file_size_mb
        super().__init__(
            fetch_items=self.recent_files,
            interval=interval,
            shutdown=self.client.stop,
            name=name,
        )

    def accepts(self, item: Dict[str, Any]) -> bool:
        """Apply the ``messageTypes`` and ``maxFileSizeInMB`` filters."""
        if self.message_types != "all" and item.get("type") not in (None, self.message_types):
            return False
        size = item.get("fileSize")
        if self.max_file_size_mb is not None and isinstance(size, (int, float)):
            if size > self.max_file_size_mb * 1024 * 1024:
                return False
        return True

    async def recent_files(self) -> List[Dict[str, Any]]:
        files = await self.client.get_recent_files()
        return [item for item in files if self.accepts(item)]

    async def process_pending(self) -> List[Dict[str, Any]]:
        """Process pending bot messages and return the files they produced.

        Messages filtered out by ``messageTypes`` are skipped. A message the
        backend fails to process is logged and skipped.
        """
        processed: List[Dict[str, Any]] = []
        for message in await self.client.get_pending_messages():
            if self.message_types != "all" and message.get("type") != self.message_types:
                logger.debug(
                    "Skipping message %s of type %s", message.get("id"), message.get("type")
                )
                continue
            try:
                result = await self.client.process_message(str(message["id"]))
            except AdapterError as e:
                logger.error("Failed to process message %s: %s", message.get("id"), e)
                continue
            if result.get("file"):
                processed.append(result["file"])
        logger.info("Processed %d pending files", len(processed))
        return processed


def _parse_positive(node_type: str, config: Dict[str, Any], key: str, default: str) -> float:
    raw = config.get(key)
    if raw is None or raw == "":
        raw = default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(node_type, key, f"'{key}' must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(node_type, key, f"'{key}' must be positive, got {raw!r}")
    return value


class TelegramReceiveAdapter(BaseAdapter):
    """Arm a Telegram listener.

    Performs the initialize/start handshake and returns a
    :class:`TelegramFileListener`. The engine starts it with its own
    callback and stops it when the workflow stops.
    """

    node_type = "telegram-receive"
    tier = PropagationTier.SEQUENTIAL

    def __init__(self, client: Optional[TelegramClient] = None):
        self.client = client or TelegramClient()

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> TelegramFileListener:
        interval = _parse_positive(self.node_type, config, "checkInterval", DEFAULT_CHECK_INTERVAL)
        max_size = _parse_positive(
            self.node_type, config, "maxFileSizeInMB", DEFAULT_MAX_FILE_SIZE_MB
        )
        message_types = config.get("messageTypes") or DEFAULT_MESSAGE_TYPES

        try:
            init_response = await self.client.initialize()
        except AdapterError as e:
            raise AdapterHandshakeError("initialize", str(e)) from e
        logger.info("Telegram bot initialized: %s", _bot_username(init_response))

        try:
            start_response = await self.client.start()
        except AdapterError as e:
            raise AdapterHandshakeError("start", str(e)) from e
        logger.info("Telegram bot started: %s", _bot_username(start_response))

        return TelegramFileListener(
            client=self.client,
            interval=interval,
            message_types=message_types,
            max_file_size_mb=max_size,
        )


def _bot_username(response: Dict[str, Any]) -> Optional[str]:
    status = response.get("status") or {}
    bot_info = status.get("botInfo") or {}
    return bot_info.get("username")
