"""Arweave upload adapter.

Uploads a file the backend already holds (identified by the upstream
item's ``id``) to Arweave through ArDrive. Uploads are slow, so the adapter
sits in the background tier: the node that discovered the file never waits
for it.
"""

import json
import logging
from typing import Any, Dict, Optional

from flowbridge.adapters.base import BaseAdapter, PropagationTier
from flowbridge.clients.ardrive import ArDriveClient
from flowbridge.utils.errors import AdapterError

logger = logging.getLogger(__name__)


class ArweaveUploadAdapter(BaseAdapter):
    """Upload the input file to Arweave.

    Output format:
        {
            "transactionId": "...",
            ...backend upload data...,
            "originalFile": <input item>,
            "cost": <estimated cost>,
        }
    """

    node_type = "arweave-upload"
    tier = PropagationTier.BACKGROUND

    def __init__(self, client: Optional[ArDriveClient] = None):
        self.client = client or ArDriveClient()

    async def _execute_impl(self, config: Dict[str, Any], input: Any = None) -> Dict[str, Any]:
        if not isinstance(input, dict) or not input.get("id"):
            raise AdapterError(
                "No valid file data provided to upload. Received: "
                + json.dumps(input, default=str)
            )

        file_id = str(input["id"])

        cost_response = await self.client.get_upload_cost(file_id)
        logger.info("Upload cost for file %s: %s AR", file_id, cost_response.get("cost"))

        upload_response = await self.client.upload_file(file_id)
        data = upload_response.get("data") or {}
        logger.info(
            "File %s uploaded to Arweave, transaction %s", file_id, data.get("transactionId")
        )

        return {
            **data,
            "cost": cost_response.get("cost"),
            "tags": _split_tags(config.get("tags")),
            "originalFile": input,
        }


def _split_tags(raw: Any) -> list:
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(tag).strip() for tag in raw if str(tag).strip()]
    return [tag.strip() for tag in str(raw).split(",") if tag.strip()]
