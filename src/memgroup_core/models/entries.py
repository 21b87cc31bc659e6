"""Store read results: versioned values and decoded group index entries."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VersionedValue:
    """A value read together with the store's opaque cas token."""

    value: object
    version: bytes | int


@dataclass(frozen=True)
class GroupEntry:
    """The member set of a group as of one versioned read."""

    group_key: str
    members: frozenset[str]
    version: bytes | int

    def __contains__(self, member_key: object) -> bool:
        return member_key in self.members

    def __len__(self) -> int:
        return len(self.members)

    def with_member(self, member_key: str) -> set[str]:
        """Return a mutable copy of the members with member_key added."""
        updated = set(self.members)
        updated.add(member_key)
        return updated
