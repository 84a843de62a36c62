"""Client for the backend's Telegram bot endpoints."""

import logging
from typing import Any, Dict, List

from flowbridge.clients.base import BackendClient

logger = logging.getLogger(__name__)


class TelegramClient(BackendClient):
    """Telegram bot lifecycle, files and messaging.

    Example:
        >>> client = TelegramClient("http://localhost:3001/api")
        >>> await client.initialize()
        >>> await client.start()
        >>> files = await client.get_recent_files()
    """

    async def initialize(self) -> Dict[str, Any]:
        logger.info("Initializing Telegram bot")
        return await self.request("POST", "/telegram/initialize")

    async def start(self) -> Dict[str, Any]:
        logger.info("Starting Telegram bot")
        return await self.request("POST", "/telegram/start")

    async def stop(self) -> Dict[str, Any]:
        logger.info("Stopping Telegram bot")
        return await self.request("POST", "/telegram/stop")

    async def get_status(self) -> Dict[str, Any]:
        return await self.request("GET", "/telegram/status")

    async def get_pending_messages(self) -> List[Dict[str, Any]]:
        data = await self.request("GET", "/telegram/messages/pending")
        return list(data.get("pendingMessages") or [])

    async def process_message(self, message_id: str) -> Dict[str, Any]:
        return await self.request("POST", f"/telegram/messages/{message_id}/process")

    async def get_recent_files(self) -> List[Dict[str, Any]]:
        """Files most recently received by the bot (unordered)."""
        data = await self.request("GET", "/telegram/files/recent")
        return list(data.get("files") or [])

    async def send_message(self, chat_id: str, message: str) -> Dict[str, Any]:
        logger.info("Sending Telegram message to chat %s", chat_id)
        return await self.request(
            "POST",
            "/proxy/telegram/send",
            json_body={"chatId": chat_id, "message": message},
        )
