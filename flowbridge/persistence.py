"""Load and save the graph as a JSON snapshot.

The snapshot is ``{"nodes": [...], "edges": [...]}`` in the canvas' camelCase
shape, written as one text blob under a fixed key. Run state is never
persisted.

Example:
    >>> persistence = WorkflowPersistence(store, SQLiteBackend("workflows.db"))
    >>> await persistence.save()
    >>> await persistence.load()
    True
"""

import logging
from typing import Optional

from pydantic import ValidationError

from flowbridge.backends.base import SnapshotBackend
from flowbridge.backends.memory import MemoryBackend
from flowbridge.core.graph import GraphSnapshot
from flowbridge.core.store import GraphStore
from flowbridge.utils.errors import SnapshotError

logger = logging.getLogger(__name__)

DEFAULT_KEY = "workflow"


def serialize_graph(snapshot: GraphSnapshot) -> str:
    """Serialize a graph snapshot to JSON text (camelCase field names)."""
    return snapshot.model_dump_json(by_alias=True)


def deserialize_graph(blob: str) -> GraphSnapshot:
    """Parse JSON text produced by :func:`serialize_graph`.

    Raises:
        SnapshotError: If the text is not a valid snapshot
    """
    try:
        return GraphSnapshot.model_validate_json(blob)
    except ValidationError as e:
        raise SnapshotError(f"Invalid workflow snapshot: {e}") from e


class WorkflowPersistence:
    """Bridges a :class:`GraphStore` and a snapshot backend."""

    def __init__(
        self,
        store: GraphStore,
        backend: Optional[SnapshotBackend] = None,
        key: str = DEFAULT_KEY,
    ):
        self.store = store
        self.backend = backend if backend is not None else MemoryBackend()
        self.key = key

    async def save(self) -> str:
        """Write the store's current graph to the backend.

        Returns:
            The serialized blob
        """
        blob = serialize_graph(self.store.snapshot())
        await self.backend.save(self.key, blob)
        logger.info(
            "Saved workflow '%s' (%d nodes, %d edges)",
            self.key,
            len(self.store.nodes),
            len(self.store.edges),
        )
        return blob

    async def load(self) -> bool:
        """Replace the store's graph with the stored snapshot.

        Returns:
            False if nothing is stored under the key (store left untouched)

        Raises:
            SnapshotError: If the stored blob is malformed
        """
        blob = await self.backend.load(self.key)
        if blob is None:
            logger.info("No saved workflow under '%s'", self.key)
            return False

        self.store.replace(deserialize_graph(blob))
        logger.info(
            "Loaded workflow '%s' (%d nodes, %d edges)",
            self.key,
            len(self.store.nodes),
            len(self.store.edges),
        )
        return True

    async def clear(self) -> None:
        """Delete the stored snapshot."""
        await self.backend.delete(self.key)

    def __repr__(self) -> str:
        return f"WorkflowPersistence(key='{self.key}', backend={self.backend!r})"
