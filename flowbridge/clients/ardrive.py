"""Client for the backend's ArDrive (Arweave) endpoints."""

from typing import Any, Dict

from flowbridge.clients.base import BackendClient


class ArDriveClient(BackendClient):
    """Cost estimates and uploads to Arweave."""

    async def get_upload_cost(self, file_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/telegram/ardrive/files/{file_id}/cost")

    async def upload_file(self, file_id: str) -> Dict[str, Any]:
        return await self.request("POST", f"/telegram/ardrive/files/{file_id}/upload")
