"""Shared protocol constants for memgroup."""

from __future__ import annotations

# memcached rejects keys longer than this many bytes
MAX_KEY_LENGTH = 250

# SHA-1 hex digest length used for key fingerprints
FINGERPRINT_LENGTH = 40

DEFAULT_PORT = 11211

# Expirations above this many seconds are read by memcached as Unix timestamps
MAX_RELATIVE_EXPIRE = 60 * 60 * 24 * 30
