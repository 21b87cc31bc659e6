"""Tests for ValueCodec."""

from __future__ import annotations

import pickle
import threading

import pytest

from memgroup_core.exceptions import DecodingError, EncodingError, MemgroupError
from memgroup_infra.codec.values import ValueCodec


@pytest.mark.unit
class TestValueCodec:
    """Test value encoding."""

    def test_encodes_plain_data(self) -> None:
        """Containers of builtins survive encoding."""
        codec = ValueCodec()
        value = {"ids": [1, 2, 3], "name": "x", "tags": {"a", "b"}}
        assert codec.decode(codec.encode(value)) == value

    def test_lock_is_not_encodable(self) -> None:
        """Objects pickle refuses raise EncodingError."""
        with pytest.raises(EncodingError, match="lock"):
            ValueCodec().encode(threading.Lock())

    def test_local_function_is_not_encodable(self) -> None:
        """Local callables raise EncodingError."""

        def local() -> None:
            return None

        with pytest.raises(EncodingError, match="function"):
            ValueCodec().encode(local)

    @pytest.mark.parametrize(
        "payload",
        [b"plain text written by another client", b"k1,k2", b"", pickle.dumps([1, 2])[:-3]],
    )
    def test_foreign_bytes_raise_decoding_error(self, payload: bytes) -> None:
        """Bytes that are not a complete pickle raise DecodingError."""
        with pytest.raises(DecodingError, match="not decodable"):
            ValueCodec().decode(payload)

    def test_decoding_error_is_a_memgroup_error(self) -> None:
        """Decode failures stay inside the library's error hierarchy."""
        with pytest.raises(MemgroupError):
            ValueCodec().decode(b"k1,k2")
