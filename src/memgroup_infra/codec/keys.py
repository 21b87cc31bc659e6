"""Deterministic mapping from application keys to memcached keys."""

from __future__ import annotations

import hashlib

import structlog

logger = structlog.get_logger()


class KeyCodec:
    """Fingerprints arbitrary keys into fixed-length, prefixed store keys.

    The digest is unsalted so every client process maps the same key to
    the same store key.
    """

    def __init__(self, prefix: str) -> None:
        """Initialize with the configured key prefix."""
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def to_store_key(self, raw_key: object) -> str:
        """Return prefix + SHA-1 hex digest of str(raw_key)."""
        if raw_key is None:
            msg = "cache key must not be None"
            raise ValueError(msg)
        fingerprint = hashlib.sha1(str(raw_key).encode("utf-8")).hexdigest()
        store_key = f"{self._prefix}{fingerprint}"
        logger.debug("key_converted", raw_key=str(raw_key), store_key=store_key)
        return store_key

    def group_key(self, group_id: str) -> str:
        """Return the store key of a group's member index."""
        return self.to_store_key(group_id)
