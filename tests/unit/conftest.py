"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from memgroup_client.facade import CacheFacade
from memgroup_client.group_index import GroupIndex
from memgroup_core.models.retry import RetryPolicy
from memgroup_infra.codec.keys import KeyCodec
from memgroup_infra.memcached.object_store import ObjectStore
from tests.mocks.fake_memcache import FakeMemcacheClient
from tests.mocks.mock_settings import make_settings


@pytest.fixture
def mock_settings() -> MagicMock:
    """Return a MagicMock Settings with sensible defaults."""
    return make_settings()


@pytest.fixture
def fake_client() -> FakeMemcacheClient:
    """Return an empty in-memory memcached client."""
    return FakeMemcacheClient()


@pytest.fixture
def store(fake_client: FakeMemcacheClient) -> ObjectStore:
    """Return an ObjectStore over the fake client with no default TTL."""
    return ObjectStore(fake_client, default_ttl=0)


@pytest.fixture
def codec() -> KeyCodec:
    """Return a KeyCodec with a test prefix."""
    return KeyCodec("_test_")


@pytest.fixture
def index(store: ObjectStore) -> GroupIndex:
    """Return a GroupIndex that retries without sleeping."""
    return GroupIndex(store, policy=RetryPolicy.immediate())


@pytest.fixture
def cache(store: ObjectStore, codec: KeyCodec, index: GroupIndex) -> CacheFacade:
    """Return a CacheFacade wired to the fake client."""
    return CacheFacade(store, codec, index)
