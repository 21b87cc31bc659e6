"""Synchronous facade over memcached's single-key primitives."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from pymemcache.exceptions import MemcacheError

from memgroup_core.constants import MAX_RELATIVE_EXPIRE
from memgroup_core.exceptions import DecodingError, TransportError
from memgroup_core.interfaces.store import StoreClient
from memgroup_core.models.entries import VersionedValue
from memgroup_infra.codec.values import ValueCodec


def to_protocol_expire(
    ttl_seconds: int,
    clock: Callable[[], float] = time.time,
) -> int:
    """Translate a relative TTL into memcached's exptime argument.

    memcached reads exptime values above 30 days as absolute Unix
    timestamps, so longer TTLs are sent as now + ttl. 0 means never expire.
    """
    if ttl_seconds < 0:
        msg = f"ttl must be >= 0, got {ttl_seconds}"
        raise ValueError(msg)
    if ttl_seconds <= MAX_RELATIVE_EXPIRE:
        return ttl_seconds
    return int(clock()) + ttl_seconds


class ObjectStore:
    """Encodes values and forwards get/gets/set/add/cas/delete to the client.

    Values are encoded before the client is called, so an EncodingError
    never leaves a partial write behind. Transport failures surface as
    TransportError.
    """

    def __init__(
        self,
        client: StoreClient,
        default_ttl: int = 0,
        codec: ValueCodec | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize with a store client and the default entry TTL."""
        self._client = client
        self._default_ttl = default_ttl
        self._codec = codec or ValueCodec()
        self._clock = clock

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def get(self, key: str) -> object | None:
        """Return the decoded value, or None if absent.

        Raises:
            DecodingError: If the entry holds bytes this codec cannot read.
        """
        with _translate_errors("get", key):
            payload = self._client.get(key)
        if payload is None:
            return None
        return self._decode(key, payload)

    def get_with_version(self, key: str) -> VersionedValue | None:
        """Return the decoded value with its cas token, or None if absent.

        Raises:
            DecodingError: If the entry is undecodable; carries the cas token.
        """
        with _translate_errors("gets", key):
            result = self._client.gets(key)
        if not isinstance(result, tuple) or len(result) != 2:
            raise TransportError("gets", key, f"unexpected reply {result!r}")
        payload, version = result
        if payload is None or version is None:
            return None
        return VersionedValue(value=self._decode(key, payload, version), version=version)

    def set(self, key: str, value: object, ttl: int | None = None) -> None:
        """Store value unconditionally."""
        payload = self._codec.encode(value)
        expire = self._expire(ttl)
        with _translate_errors("set", key):
            stored = self._client.set(key, payload, expire=expire, noreply=False)
        if not stored:
            raise TransportError("set", key, "value was not stored")

    def add_if_absent(self, key: str, value: object, ttl: int | None = None) -> bool:
        """Store value only if key is absent. True if this call created it."""
        payload = self._codec.encode(value)
        expire = self._expire(ttl)
        with _translate_errors("add", key):
            return bool(self._client.add(key, payload, expire=expire, noreply=False))

    def compare_and_swap(
        self,
        key: str,
        value: object,
        version: bytes | int,
        ttl: int | None = None,
    ) -> bool:
        """Store value if version still matches. False if stale or absent."""
        payload = self._codec.encode(value)
        expire = self._expire(ttl)
        with _translate_errors("cas", key):
            applied = self._client.cas(key, payload, version, expire=expire, noreply=False)
        return applied is True

    def delete(self, key: str) -> bool:
        """Delete key. True if an entry existed and was removed."""
        with _translate_errors("delete", key):
            return bool(self._client.delete(key, noreply=False))

    def _decode(
        self,
        key: str,
        payload: bytes,
        version: bytes | int | None = None,
    ) -> object:
        try:
            return self._codec.decode(payload)
        except DecodingError as exc:
            raise DecodingError(str(exc), key=key, version=version) from exc.__cause__

    def _expire(self, ttl: int | None) -> int:
        return to_protocol_expire(self._default_ttl if ttl is None else ttl, self._clock)


@contextmanager
def _translate_errors(operation: str, key: str) -> Iterator[None]:
    """Re-raise pymemcache and socket failures as TransportError."""
    try:
        yield
    except (MemcacheError, OSError) as exc:
        raise TransportError(operation, key, str(exc) or type(exc).__name__) from exc
