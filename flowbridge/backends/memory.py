"""In-memory snapshot backend for tests and ephemeral sessions."""

from typing import Dict, List, Optional


class MemoryBackend:
    """Keeps snapshot blobs in a dictionary.

    Contents are lost when the process exits.
    """

    def __init__(self):
        self._storage: Dict[str, str] = {}

    async def save(self, key: str, blob: str) -> None:
        self._storage[key] = blob

    async def load(self, key: str) -> Optional[str]:
        return self._storage.get(key)

    async def delete(self, key: str) -> None:
        self._storage.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._storage

    async def list_keys(self) -> List[str]:
        return list(self._storage.keys())

    def clear_all(self) -> None:
        """Drop every stored snapshot."""
        self._storage.clear()

    def __repr__(self) -> str:
        return f"MemoryBackend(keys={len(self._storage)})"
