"""Tests for the HTTP-backed capability adapters."""

import asyncio
import json

import httpx
import pytest

from flowbridge import AdapterRegistry, PropagationTier, UnknownNodeTypeError
from flowbridge.adapters import (
    ArweaveUploadAdapter,
    DelayAdapter,
    TelegramFileListener,
    TelegramReceiveAdapter,
    TelegramSendAdapter,
    is_long_running,
)
from flowbridge.clients import ArDriveClient, BackendClient, TelegramClient
from flowbridge.utils.errors import AdapterError, AdapterHandshakeError, ConfigurationError

BASE_URL = "http://backend.test/api"


class FakeBackend:
    """Routes requests to canned JSON responses and records every call."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        self.requests.append((request.method, path, request.content))
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        if isinstance(route, Exception):
            raise route
        return httpx.Response(200, json=route)

    @property
    def calls(self):
        return [(method, path) for method, path, _ in self.requests]


def telegram_client(backend: FakeBackend) -> TelegramClient:
    return TelegramClient(BASE_URL, transport=httpx.MockTransport(backend))


def ardrive_client(backend: FakeBackend) -> ArDriveClient:
    return ArDriveClient(BASE_URL, transport=httpx.MockTransport(backend))


# =============================================================================
# Backend client
# =============================================================================


@pytest.mark.asyncio
async def test_client_raises_on_backend_failure():
    backend = FakeBackend({("GET", "/telegram/status"): {"success": False, "error": "Bot offline"}})
    client = telegram_client(backend)

    with pytest.raises(AdapterError, match="Bot offline"):
        await client.get_status()


@pytest.mark.asyncio
async def test_client_wraps_transport_errors():
    backend = FakeBackend({("GET", "/telegram/status"): httpx.ConnectError("refused")})
    client = telegram_client(backend)

    with pytest.raises(AdapterError, match="refused"):
        await client.get_status()


@pytest.mark.asyncio
async def test_client_rejects_non_json():
    client = BackendClient(
        BASE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
    )

    with pytest.raises(AdapterError, match="non-JSON"):
        await client.request("GET", "/anything")


# =============================================================================
# Telegram send
# =============================================================================


@pytest.mark.asyncio
async def test_telegram_send_posts_message():
    backend = FakeBackend({("POST", "/proxy/telegram/send"): {"success": True, "messageId": 7}})
    adapter = TelegramSendAdapter(telegram_client(backend))

    result = await adapter.execute({"chatId": "42", "message": "New file"}, input={"id": "1"})

    assert adapter.tier == PropagationTier.NOTIFY
    assert result == {
        "success": True,
        "sentTo": "42",
        "message": "New file",
        "response": {"success": True, "messageId": 7},
        "inputData": {"id": "1"},
    }
    _, _, body = backend.requests[0]
    assert json.loads(body) == {"chatId": "42", "message": "New file"}


@pytest.mark.asyncio
async def test_telegram_send_requires_message():
    backend = FakeBackend({})
    adapter = TelegramSendAdapter(telegram_client(backend))

    with pytest.raises(ConfigurationError) as exc_info:
        await adapter.execute({"chatId": "42", "message": "   "})

    assert exc_info.value.field == "message"
    assert backend.requests == []


# =============================================================================
# Telegram receive
# =============================================================================


HANDSHAKE_OK = {
    ("POST", "/telegram/initialize"): {"success": True, "status": {"botInfo": {"username": "bot"}}},
    ("POST", "/telegram/start"): {"success": True, "status": {"botInfo": {"username": "bot"}}},
    ("POST", "/telegram/stop"): {"success": True},
}


@pytest.mark.asyncio
async def test_telegram_receive_handshake_returns_listener():
    backend = FakeBackend(
        {
            **HANDSHAKE_OK,
            ("GET", "/telegram/files/recent"): {
                "success": True,
                "files": [{"id": 3, "type": "photo"}, {"id": 11, "type": "photo"}],
            },
        }
    )
    adapter = TelegramReceiveAdapter(telegram_client(backend))

    listener = await adapter.execute({"checkInterval": "5", "messageTypes": "all"})

    assert isinstance(listener, TelegramFileListener)
    assert is_long_running(listener)
    assert listener.interval == 5.0
    assert backend.calls == [("POST", "/telegram/initialize"), ("POST", "/telegram/start")]

    received = []

    async def on_item(item):
        received.append(item)

    listener.start(on_item)
    assert await listener.check_now() == [{"id": 11, "type": "photo"}]
    await listener.stop()

    assert received == [{"id": 11, "type": "photo"}]
    assert backend.calls[-1] == ("POST", "/telegram/stop")


@pytest.mark.asyncio
async def test_telegram_receive_initialize_failure():
    backend = FakeBackend(
        {("POST", "/telegram/initialize"): {"success": False, "error": "Invalid token"}}
    )
    adapter = TelegramReceiveAdapter(telegram_client(backend))

    with pytest.raises(AdapterHandshakeError) as exc_info:
        await adapter.execute({})

    assert exc_info.value.phase == "initialize"
    assert "Invalid token" in str(exc_info.value)
    assert ("POST", "/telegram/start") not in backend.calls


@pytest.mark.asyncio
async def test_telegram_receive_start_failure():
    backend = FakeBackend(
        {
            ("POST", "/telegram/initialize"): {"success": True},
            ("POST", "/telegram/start"): {"success": False, "message": "Already polling"},
        }
    )
    adapter = TelegramReceiveAdapter(telegram_client(backend))

    with pytest.raises(AdapterHandshakeError) as exc_info:
        await adapter.execute({})

    assert exc_info.value.phase == "start"


@pytest.mark.asyncio
async def test_telegram_receive_rejects_bad_interval():
    adapter = TelegramReceiveAdapter(telegram_client(FakeBackend(HANDSHAKE_OK)))

    with pytest.raises(ConfigurationError):
        await adapter.execute({"checkInterval": "soon"})


@pytest.mark.asyncio
async def test_listener_filters_type_and_size():
    mb = 1024 * 1024
    backend = FakeBackend(
        {
            ("GET", "/telegram/files/recent"): {
                "success": True,
                "files": [
                    {"id": 1, "type": "photo", "fileSize": 2 * mb},
                    {"id": 2, "type": "document", "fileSize": mb},
                    {"id": 3, "type": "photo", "fileSize": 20 * mb},
                ],
            }
        }
    )
    listener = TelegramFileListener(
        telegram_client(backend), interval=60, message_types="photo", max_file_size_mb=10
    )

    assert [item["id"] for item in await listener.recent_files()] == [1]


@pytest.mark.asyncio
async def test_listener_processes_pending_messages():
    backend = FakeBackend(
        {
            ("GET", "/telegram/messages/pending"): {
                "success": True,
                "pendingMessages": [
                    {"id": 5, "type": "photo"},
                    {"id": 6, "type": "document"},
                    {"id": 7, "type": "photo"},
                ],
            },
            ("POST", "/telegram/messages/5/process"): {"success": True, "file": {"id": 50}},
            ("POST", "/telegram/messages/7/process"): {"success": False, "error": "Too large"},
        }
    )
    listener = TelegramFileListener(telegram_client(backend), interval=60, message_types="photo")

    assert await listener.process_pending() == [{"id": 50}]
    assert ("POST", "/telegram/messages/6/process") not in backend.calls


# =============================================================================
# Arweave upload
# =============================================================================


@pytest.mark.asyncio
async def test_arweave_upload_fetches_cost_then_uploads():
    backend = FakeBackend(
        {
            ("GET", "/telegram/ardrive/files/42/cost"): {"success": True, "cost": "0.0012"},
            ("POST", "/telegram/ardrive/files/42/upload"): {
                "success": True,
                "data": {"transactionId": "tx-1", "url": "https://arweave.net/tx-1"},
            },
        }
    )
    adapter = ArweaveUploadAdapter(ardrive_client(backend))
    item = {"id": "42", "fileName": "photo.jpg"}

    result = await adapter.execute({"tags": "photo, telegram", "permanent": "true"}, input=item)

    assert adapter.tier == PropagationTier.BACKGROUND
    assert backend.calls == [
        ("GET", "/telegram/ardrive/files/42/cost"),
        ("POST", "/telegram/ardrive/files/42/upload"),
    ]
    assert result["transactionId"] == "tx-1"
    assert result["cost"] == "0.0012"
    assert result["tags"] == ["photo", "telegram"]
    assert result["originalFile"] == item


@pytest.mark.asyncio
async def test_arweave_upload_requires_file_id():
    backend = FakeBackend({})
    adapter = ArweaveUploadAdapter(ardrive_client(backend))

    with pytest.raises(AdapterError, match="No valid file data"):
        await adapter.execute({}, input={"fileName": "orphan.jpg"})

    assert backend.requests == []


@pytest.mark.asyncio
async def test_arweave_upload_failure_propagates():
    backend = FakeBackend(
        {
            ("GET", "/telegram/ardrive/files/42/cost"): {"success": True, "cost": "0.1"},
            ("POST", "/telegram/ardrive/files/42/upload"): {
                "success": False,
                "error": "Insufficient balance",
            },
        }
    )
    adapter = ArweaveUploadAdapter(ardrive_client(backend))

    with pytest.raises(AdapterError, match="Insufficient balance"):
        await adapter.execute({}, input={"id": "42"})


# =============================================================================
# Delay and registry
# =============================================================================


@pytest.mark.asyncio
async def test_delay_passes_input_through():
    adapter = DelayAdapter()

    assert await adapter.execute({"delay": 0.01}, input={"id": "1"}) == {"id": "1"}


@pytest.mark.asyncio
async def test_delay_rejects_negative_values():
    with pytest.raises(ConfigurationError):
        await DelayAdapter().execute({"delay": -1})


def test_builtin_registry():
    registry = AdapterRegistry()

    assert set(registry.list_node_types()) == {
        "telegram-receive",
        "telegram",
        "arweave-upload",
        "delay",
    }
    assert registry.tier_of("telegram") == PropagationTier.NOTIFY
    assert registry.tier_of("arweave-upload") == PropagationTier.BACKGROUND
    assert registry.tier_of("telegram-receive") == PropagationTier.SEQUENTIAL
    assert registry.tier_of("mystery") == PropagationTier.SEQUENTIAL


def test_registry_shares_telegram_client():
    client = TelegramClient(BASE_URL)
    registry = AdapterRegistry(telegram_client=client)

    assert registry.get("telegram").client is client
    assert registry.get("telegram-receive").client is client


def test_registry_get_unknown_type():
    registry = AdapterRegistry(builtins=False)

    assert registry.find("delay") is None
    with pytest.raises(UnknownNodeTypeError):
        registry.get("delay")

    registry.register(DelayAdapter())
    assert registry.has("delay")
    registry.unregister("delay")
    assert not registry.has("delay")
