"""Public cache surface: put/get/remove plus group-scoped invalidation."""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING

import structlog

from memgroup_client.group_index import GroupIndex
from memgroup_client.observability.logging import group_log_context
from memgroup_client.observability.tracing import traced_operation
from memgroup_infra.codec.keys import KeyCodec
from memgroup_infra.memcached.object_store import ObjectStore
from memgroup_infra.memcached.transport import MemcachedTransport

if TYPE_CHECKING:
    from memgroup_core.config.settings import Settings

logger = structlog.get_logger()


class CacheFacade:
    """Cache client whose entries can be invalidated a whole group at a time.

    Every put records the entry's store key in its group's index, so
    remove_group() can find and delete the entries later. A facade built with
    from_settings() owns its transport and must be closed.
    """

    def __init__(
        self,
        store: ObjectStore,
        codec: KeyCodec,
        index: GroupIndex,
        transport: MemcachedTransport | None = None,
    ) -> None:
        """Initialize from already-built collaborators.

        Args:
            store: Store for entry reads and writes.
            codec: Maps application keys and group ids to store keys.
            index: Group membership index over the same store.
            transport: Transport to close with the facade, if owned.
        """
        self._store = store
        self._codec = codec
        self._index = index
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> CacheFacade:
        """Open a transport and wire a facade around it."""
        transport = MemcachedTransport(settings)
        store = ObjectStore(transport.client, default_ttl=settings.expiration_seconds)
        index = GroupIndex(store, policy=settings.retry_policy())
        logger.debug(
            "cache_client_created",
            key_prefix=settings.key_prefix,
            expiration_seconds=settings.expiration_seconds,
            max_attempts=settings.max_attempts,
        )
        return cls(store, KeyCodec(settings.key_prefix), index, transport=transport)

    @traced_operation("put")
    def put(self, key: object, value: object, group_id: str) -> None:
        """Store value under key and record key as a member of group_id.

        Raises:
            EncodingError: If value is not encodable; nothing is written.
        """
        store_key = self._codec.to_store_key(key)
        group_key = self._codec.group_key(group_id)
        logger.debug("cache_put", store_key=store_key, group_key=group_key)
        with group_log_context(group_id):
            self._store.set(store_key, value)
            self._index.add_member(group_key, store_key)

    @traced_operation("get")
    def get(self, key: object) -> object | None:
        """Return the cached value for key, or None if absent."""
        store_key = self._codec.to_store_key(key)
        value = self._store.get(store_key)
        logger.debug("cache_get", store_key=store_key, hit=value is not None)
        return value

    @traced_operation("remove")
    def remove(self, key: object) -> object | None:
        """Delete key and return the value it held when read.

        Not atomic: a value written by another client between the read
        and the delete is deleted without being returned.
        """
        store_key = self._codec.to_store_key(key)
        value = self._store.get(store_key)
        if value is not None:
            self._store.delete(store_key)
        logger.debug("cache_remove", store_key=store_key, found=value is not None)
        return value

    @traced_operation("remove_group")
    def remove_group(self, group_id: str) -> int:
        """Delete every entry put under group_id, and the group's index.

        Returns:
            Number of member entries that were deleted.
        """
        with group_log_context(group_id):
            return self._index.remove_group(self._codec.group_key(group_id))

    def members(self, group_id: str) -> frozenset[str]:
        """Return the store keys currently recorded for group_id."""
        return self._index.members(self._codec.group_key(group_id))

    def group(self, group_id: str) -> GroupScopedCache:
        """Return a view that puts every entry into group_id."""
        return GroupScopedCache(self, group_id)

    def close(self) -> None:
        """Release the owned transport, if any."""
        if self._transport is not None:
            self._transport.close()

    def __enter__(self) -> CacheFacade:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class GroupScopedCache:
    """A cache namespace bound to one group id; clear() drops the namespace."""

    def __init__(self, cache: CacheFacade, group_id: str) -> None:
        """Initialize with the backing facade and the group id."""
        self._cache = cache
        self._group_id = group_id

    @property
    def id(self) -> str:
        return self._group_id

    def put(self, key: object, value: object) -> None:
        self._cache.put(key, value, self._group_id)

    def get(self, key: object) -> object | None:
        return self._cache.get(key)

    def remove(self, key: object) -> object | None:
        return self._cache.remove(key)

    def clear(self) -> int:
        """Remove every entry of this group."""
        return self._cache.remove_group(self._group_id)

    def __repr__(self) -> str:
        return f"GroupScopedCache(id={self._group_id!r})"
