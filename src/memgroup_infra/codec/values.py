"""Value encoding for memcached payloads."""

from __future__ import annotations

import pickle

from memgroup_core.exceptions import DecodingError, EncodingError


class ValueCodec:
    """Pickle-based encoder; refuses values that cannot be pickled."""

    def __init__(self, protocol: int = pickle.DEFAULT_PROTOCOL) -> None:
        """Initialize with the pickle protocol version."""
        self._protocol = protocol

    def encode(self, value: object) -> bytes:
        """Encode a value, raising EncodingError if it is not encodable."""
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            msg = (
                f"Object of type {type(value).__name__!r} is not encodable "
                f"and cannot be stored in memcached"
            )
            raise EncodingError(msg) from exc

    def decode(self, payload: bytes) -> object:
        """Decode bytes previously produced by encode().

        Raises:
            DecodingError: If the payload is not a pickle this process can load.
        """
        try:
            return pickle.loads(payload)
        except (
            pickle.UnpicklingError,
            EOFError,
            ValueError,
            TypeError,
            AttributeError,
            ImportError,
            KeyError,
            IndexError,
        ) as exc:
            msg = f"stored payload is not decodable ({type(exc).__name__}: {exc})"
            raise DecodingError(msg) from exc
