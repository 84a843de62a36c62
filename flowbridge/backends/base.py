"""Base protocol for snapshot storage backends.

A backend is a key/value store for serialized workflow snapshots. It knows
nothing about graphs; :mod:`flowbridge.persistence` does the (de)serializing.
"""

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class SnapshotBackend(Protocol):
    """Protocol for snapshot storage backends."""

    async def save(self, key: str, blob: str) -> None:
        """Store ``blob`` under ``key``, replacing any previous value.

        Args:
            key: Storage key
            blob: Serialized snapshot text

        Raises:
            Exception: If the write fails
        """
        ...

    async def load(self, key: str) -> Optional[str]:
        """Read the blob stored under ``key``.

        Returns:
            The stored text or None if the key is absent
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def list_keys(self) -> List[str]:
        """List every stored key."""
        ...
