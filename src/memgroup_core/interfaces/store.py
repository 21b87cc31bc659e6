"""Abstract transport interface for the key-value store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreClient(Protocol):
    """Single-key memcached primitives, as exposed by pymemcache clients.

    Values cross this boundary as already-encoded bytes.
    """

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if absent."""
        ...

    def gets(self, key: str) -> tuple[bytes | None, bytes | None]:
        """Return (value, cas token), or (None, None) if absent."""
        ...

    def set(self, key: str, value: bytes, expire: int = 0, noreply: bool | None = None) -> bool:
        """Store unconditionally."""
        ...

    def add(self, key: str, value: bytes, expire: int = 0, noreply: bool | None = None) -> bool:
        """Store only if absent; True if stored."""
        ...

    def cas(
        self,
        key: str,
        value: bytes,
        cas: bytes | int,
        expire: int = 0,
        noreply: bool = False,
    ) -> bool | None:
        """Store if the cas token matches; None if the key is absent."""
        ...

    def delete(self, key: str, noreply: bool | None = None) -> bool:
        """Delete; True if an entry was removed."""
        ...

    def close(self) -> None:
        """Release connections."""
        ...
