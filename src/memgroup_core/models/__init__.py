"""Domain models for memgroup."""

from memgroup_core.models.entries import GroupEntry, VersionedValue
from memgroup_core.models.retry import RetryPolicy

__all__ = [
    "GroupEntry",
    "RetryPolicy",
    "VersionedValue",
]
