"""HTTP clients for the automation backend."""

from flowbridge.clients.base import BackendClient
from flowbridge.clients.telegram import TelegramClient
from flowbridge.clients.ardrive import ArDriveClient

__all__ = [
    "BackendClient",
    "TelegramClient",
    "ArDriveClient",
]
