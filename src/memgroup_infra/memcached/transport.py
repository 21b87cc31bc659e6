"""Explicitly owned memcached connection pool built on pymemcache."""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog
from pymemcache.client.hash import HashClient

from memgroup_core.constants import DEFAULT_PORT
from memgroup_core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from memgroup_core.config.settings import Settings
    from memgroup_core.interfaces.store import StoreClient

logger = structlog.get_logger()


def parse_servers(servers: list[str]) -> list[tuple[str, int]]:
    """Convert host[:port] strings to (host, port) tuples.

    Raises:
        ConfigurationError: If an entry has an empty host or a bad port.
    """
    parsed: list[tuple[str, int]] = []
    for entry in servers:
        host, sep, port_text = entry.rpartition(":")
        if not sep:
            host, port_text = entry, str(DEFAULT_PORT)
        if not host:
            msg = f"invalid memcached server address {entry!r}"
            raise ConfigurationError(msg)
        try:
            port = int(port_text)
        except ValueError as exc:
            msg = f"invalid port in memcached server address {entry!r}"
            raise ConfigurationError(msg) from exc
        if not 0 < port < 65536:
            msg = f"port out of range in memcached server address {entry!r}"
            raise ConfigurationError(msg)
        parsed.append((host, port))
    return parsed


class MemcachedTransport:
    """Owns one pooled pymemcache client for the lifetime of a cache client.

    The pool is opened on construction and released by close() (or by
    leaving the ``with`` block). Nothing is torn down implicitly.

    A server that fails is dropped from the hash ring at once and put back
    after dead_timeout_seconds. HashClient answers commands for a server in
    its retry window with default values instead of raising, so that window
    is disabled: every call either reaches a server or raises.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., Any] = HashClient,
    ) -> None:
        """Build the pooled client from settings."""
        self._servers = parse_servers(settings.server_list)
        self._client: StoreClient | None = client_factory(
            self._servers,
            connect_timeout=settings.connect_timeout_seconds,
            timeout=settings.socket_timeout_seconds,
            no_delay=not settings.nagle,
            use_pooling=True,
            max_pool_size=settings.max_connections,
            pool_idle_timeout=settings.pool_idle_timeout_seconds,
            retry_attempts=0,
            dead_timeout=settings.dead_timeout_seconds,
            ignore_exc=False,
            default_noreply=False,
        )
        logger.info(
            "memcached_transport_opened",
            servers=[f"{host}:{port}" for host, port in self._servers],
            max_connections=settings.max_connections,
        )

    @property
    def servers(self) -> list[tuple[str, int]]:
        return list(self._servers)

    @property
    def closed(self) -> bool:
        return self._client is None

    @property
    def client(self) -> StoreClient:
        """The live store client.

        Raises:
            RuntimeError: If the transport has been closed.
        """
        if self._client is None:
            msg = "memcached transport is closed"
            raise RuntimeError(msg)
        return self._client

    def close(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        if self._client is None:
            return
        client, self._client = self._client, None
        client.close()
        logger.info("memcached_transport_closed")

    def __enter__(self) -> MemcachedTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
