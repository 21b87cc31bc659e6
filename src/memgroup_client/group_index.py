"""Group membership index maintained with optimistic compare-and-swap.

Each group has one index entry in memcached holding the set of store keys
written under it. The index is only ever changed by read-modify-write cycles
that end in ``add`` (group absent) or ``cas`` (group present); a rejected
write means another writer got there first and the cycle starts over from a
fresh read. No locks are taken, so the protocol is safe against writers in
other processes, including ones that do not use this client.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)

from memgroup_core.exceptions import (
    ContentionExhaustedError,
    DecodingError,
    GroupLookupError,
    TransportError,
)
from memgroup_core.models.entries import GroupEntry
from memgroup_core.models.retry import RetryPolicy
from memgroup_infra.memcached.object_store import ObjectStore

logger = structlog.get_logger()


class _ConcurrentModification(Exception):
    """A conditional write lost a race; the cycle must restart."""


class GroupIndex:
    """Maintains per-group member sets on top of an ObjectStore."""

    def __init__(
        self,
        store: ObjectStore,
        policy: RetryPolicy | None = None,
        ttl: int | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize with a store, a retry policy and the index entry TTL.

        Args:
            store: Store used for every index read and write.
            policy: Retry bounds and backoff; defaults to RetryPolicy().
            ttl: TTL for index entries; None uses the store default.
            sleep: Override for the backoff sleep (tests).
        """
        self._store = store
        self._policy = policy or RetryPolicy()
        self._ttl = ttl
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def lookup(self, group_key: str) -> GroupEntry | None:
        """Read a group's members and cas token, or None if the group is absent.

        An index entry that cannot be decoded (written by a foreign client) reads
        as an empty group at its current version, so the next update replaces it.

        Raises:
            GroupLookupError: If the store cannot be reached. An unreachable
                store is never reported as an absent group.
        """
        try:
            found = self._store.get_with_version(group_key)
        except DecodingError as exc:
            if exc.version is None:
                raise
            logger.warning("group_index_undecodable", group_key=group_key, error=str(exc))
            return GroupEntry(group_key=group_key, members=frozenset(), version=exc.version)
        except TransportError as exc:
            logger.error("group_lookup_failed", group_key=group_key, error=str(exc))
            raise GroupLookupError("gets", group_key, str(exc)) from exc

        if found is None or found.value is None:
            logger.debug("group_not_found", group_key=group_key)
            return None

        members = found.value
        if not isinstance(members, (set, frozenset)):
            logger.warning(
                "group_index_unexpected_type",
                group_key=group_key,
                value_type=type(members).__name__,
            )
            members = set()
        return GroupEntry(
            group_key=group_key,
            members=frozenset(members),
            version=found.version,
        )

    def members(self, group_key: str) -> frozenset[str]:
        """Return the current member keys of a group (empty if absent)."""
        entry = self.lookup(group_key)
        return entry.members if entry is not None else frozenset()

    def add_member(self, group_key: str, member_key: str) -> None:
        """Add member_key to the group's index, retrying on concurrent changes.

        Raises:
            ContentionExhaustedError: If the retry policy runs out of attempts.
            GroupLookupError: If the index cannot be read.
            TransportError: If a write fails at the transport level.
        """
        attempts = self._run("add_member", group_key, self._try_add_member, group_key, member_key)
        logger.debug(
            "group_member_added",
            group_key=group_key,
            member_key=member_key,
            attempts=attempts,
        )

    def remove_group(self, group_key: str) -> int:
        """Delete every member of a group, then the group index itself.

        Member deletions are best-effort and not retried individually. If the
        index entry is already gone when it is deleted, the group is read again
        and the pass repeats until the group reads as absent or the delete
        succeeds.

        Returns:
            Number of member deletions that removed an existing entry.
        """
        removed: list[int] = []
        attempts = self._run("remove_group", group_key, self._try_remove_group, group_key, removed)
        total = sum(removed)
        logger.info(
            "group_removed",
            group_key=group_key,
            members_deleted=total,
            attempts=attempts,
        )
        return total

    def _try_add_member(self, group_key: str, member_key: str) -> None:
        entry = self.lookup(group_key)

        if entry is None:
            created = self._store.add_if_absent(group_key, {member_key}, ttl=self._ttl)
            if not created:
                raise _ConcurrentModification("group created concurrently")
            return

        if member_key in entry:
            return

        applied = self._store.compare_and_swap(
            group_key,
            entry.with_member(member_key),
            entry.version,
            ttl=self._ttl,
        )
        if not applied:
            raise _ConcurrentModification("stale group version")

    def _try_remove_group(self, group_key: str, removed: list[int]) -> None:
        entry = self.lookup(group_key)
        if entry is None:
            return

        deleted = 0
        for member_key in entry.members:
            try:
                if self._store.delete(member_key):
                    deleted += 1
            except TransportError as exc:
                logger.warning(
                    "group_member_delete_failed",
                    group_key=group_key,
                    member_key=member_key,
                    error=str(exc),
                )
        removed.append(deleted)

        if not self._store.delete(group_key):
            raise _ConcurrentModification("group index deleted concurrently")

    def _run(
        self,
        operation: str,
        group_key: str,
        attempt_fn: Callable[..., None],
        *args: Any,
    ) -> int:
        """Drive attempt_fn through the retry policy; return attempts used."""
        retrying = self._retrying(operation, group_key)
        try:
            for attempt in retrying:
                with attempt:
                    attempt_fn(*args)
        except RetryError as exc:
            attempts = exc.last_attempt.attempt_number
            logger.warning(
                "group_contention_exhausted",
                operation=operation,
                group_key=group_key,
                attempts=attempts,
            )
            raise ContentionExhaustedError(operation, group_key, attempts) from exc
        return int(retrying.statistics.get("attempt_number", 1))

    def _retrying(self, operation: str, group_key: str) -> Retrying:
        policy = self._policy

        def _log_retry(retry_state: RetryCallState) -> None:
            logger.debug(
                "group_retry",
                operation=operation,
                group_key=group_key,
                attempt=retry_state.attempt_number,
            )

        kwargs: dict[str, Any] = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return Retrying(
            stop=(
                stop_never
                if policy.max_attempts is None
                else stop_after_attempt(policy.max_attempts)
            ),
            wait=wait_exponential(
                multiplier=policy.backoff_multiplier,
                min=policy.backoff_min_seconds,
                max=policy.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(_ConcurrentModification),
            before_sleep=_log_retry,
            **kwargs,
        )
