"""Custom exception hierarchy for memgroup."""

from __future__ import annotations


class MemgroupError(Exception):
    """Base exception for all memgroup errors."""


class ConfigurationError(MemgroupError):
    """Raised when client configuration cannot be turned into a transport."""


class EncodingError(MemgroupError):
    """Raised when a value cannot be encoded for storage."""


class DecodingError(MemgroupError):
    """Raised when stored bytes cannot be decoded, e.g. written by a foreign client."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        version: bytes | int | None = None,
    ) -> None:
        """Initialize with the undecodable entry's key and cas token, if known."""
        self.key = key
        self.version = version
        super().__init__(message if key is None else f"{key!r}: {message}")


class TransportError(MemgroupError):
    """Raised when the memcached transport fails (connectivity or protocol)."""

    def __init__(self, operation: str, key: str | None, message: str) -> None:
        """Initialize with the failing operation and key."""
        self.operation = operation
        self.key = key
        super().__init__(f"{operation}({key!r}) failed: {message}")


class GroupLookupError(TransportError):
    """Raised when a group index cannot be read; never treated as an empty group."""


class ContentionExhaustedError(MemgroupError):
    """Raised when an optimistic retry loop gives up under contention."""

    def __init__(self, operation: str, group_key: str, attempts: int) -> None:
        """Initialize with the contended operation and attempt count."""
        self.operation = operation
        self.group_key = group_key
        self.attempts = attempts
        super().__init__(
            f"{operation} on group {group_key!r} still contended after "
            f"{attempts} attempts, try later"
        )
