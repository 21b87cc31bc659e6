"""Public interface re-exports for memgroup_core."""

from memgroup_core.interfaces.store import StoreClient

__all__ = [
    "StoreClient",
]
