"""Static catalog of node types offered by the editor sidebar.

Each entry provides the display metadata and default configuration used to
instantiate a new node. The catalog is read-only: lookups always hand out a
fresh copy so callers can mutate the result freely.
"""

import copy
from typing import Any, Dict, List, Optional

from flowbridge.core.graph import NodeData


NODE_TYPES: Dict[str, Dict[str, Any]] = {
    "trigger": {
        "category": "Triggers",
        "items": [
            {
                "type": "telegram-receive",
                "label": "Receive Telegram",
                "icon": "messageCircle",
                "description": "Receive messages and files from Telegram bot",
                "config": {
                    "checkInterval": "10",  # seconds
                    "messageTypes": "all",  # all, photo, document, ...
                    "maxFileSizeInMB": "50",
                },
            },
        ],
    },
    "action": {
        "category": "Actions",
        "items": [
            {
                "type": "telegram",
                "label": "Send Telegram",
                "icon": "messageCircle",
                "description": "Send a Telegram message",
                "config": {"chatId": "", "message": ""},
            },
            {
                "type": "arweave-upload",
                "label": "Upload to Arweave",
                "icon": "upload",
                "description": "Upload files to Arweave permanent storage",
                "config": {
                    "tags": "",  # comma-separated
                    "permanent": "true",
                },
            },
        ],
    },
    "logic": {
        "category": "Logic",
        "items": [
            {
                "type": "delay",
                "label": "Delay",
                "icon": "clock",
                "description": "Add a delay",
                "config": {"delay": 5},
            },
        ],
    },
}


def get_node_data(node_type: str) -> Optional[NodeData]:
    """Look up the default node data for a node type.

    Args:
        node_type: Node-type identifier (e.g. ``"telegram"``)

    Returns:
        A fresh NodeData, or None if the type is not in the catalog
    """
    for category in NODE_TYPES.values():
        for item in category["items"]:
            if item["type"] == node_type:
                return NodeData(**copy.deepcopy(item))
    return None


def has_node_type(node_type: str) -> bool:
    return get_node_data(node_type) is not None


def list_node_types() -> List[str]:
    """List every node-type identifier in catalog order."""
    return [item["type"] for category in NODE_TYPES.values() for item in category["items"]]


def list_categories() -> Dict[str, List[str]]:
    """Map each category key to the node types it contains."""
    return {
        key: [item["type"] for item in category["items"]]
        for key, category in NODE_TYPES.items()
    }
