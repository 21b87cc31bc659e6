"""memgroup client: memcached cache with group-scoped invalidation."""

from memgroup_client.facade import CacheFacade, GroupScopedCache
from memgroup_client.group_index import GroupIndex

__all__ = [
    "CacheFacade",
    "GroupIndex",
    "GroupScopedCache",
]
