"""Integration test fixtures: a real memcached on localhost:11211."""

from __future__ import annotations

import functools
import socket
import time
import uuid
from collections.abc import Generator

import pytest

from memgroup_client.facade import CacheFacade
from memgroup_core.config.settings import Settings
from tests.mocks.mock_settings import make_real_settings

# ---------------------------------------------------------------------------
# Service health checks (with retry for CI container start-up)
# ---------------------------------------------------------------------------


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 5,
    delay: float = 1.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


@functools.cache
def _is_memcached_up() -> bool:
    """Check memcached availability once per session."""
    return _tcp_reachable("localhost", 11211, retries=3, delay=1.0)


require_memcached = pytest.mark.skipif(
    not _is_memcached_up(),
    reason="memcached not reachable on localhost:11211; start one with `docker run -p 11211:11211 memcached`",
)


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memcached_settings() -> Settings:
    """Real settings with a per-test key prefix so tests never share entries."""
    return make_real_settings(key_prefix=f"_it_{uuid.uuid4().hex[:12]}_")


@pytest.fixture
def live_cache(memcached_settings: Settings) -> Generator[CacheFacade, None, None]:
    """A facade over a real pooled connection, closed after the test."""
    with CacheFacade.from_settings(memcached_settings) as cache:
        yield cache
