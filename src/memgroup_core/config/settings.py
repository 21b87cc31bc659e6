"""Client settings using pydantic-settings."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from memgroup_core.constants import FINGERPRINT_LENGTH, MAX_KEY_LENGTH
from memgroup_core.models.retry import RetryPolicy

_SERVER_SEPARATOR = re.compile(r"[\s,]+")


class Settings(BaseSettings):
    """Central configuration for the memgroup client.

    Read once at client construction; the client never re-reads it.
    """

    model_config = SettingsConfigDict(env_prefix="MEMGROUP_", env_file=".env")

    # --- Keys & entries ---
    key_prefix: str = Field(
        default="_memgroup_",
        description="Prefix prepended to every key fingerprint",
    )
    expiration_seconds: int = Field(
        default=0,
        description="Default entry TTL in seconds (0 = never expires)",
    )

    # --- Servers & pool ---
    servers: str = Field(
        default="localhost:11211",
        description="Comma or whitespace separated host:port list",
    )
    max_connections: int = Field(
        default=100,
        description="Maximum pooled connections per server",
    )
    pool_idle_timeout_seconds: int = Field(
        default=300,
        description="Idle pooled connections older than this are closed",
    )
    socket_timeout_seconds: float = Field(
        default=3.0,
        description="Socket read/write timeout in seconds",
    )
    connect_timeout_seconds: float = Field(
        default=3.0,
        description="Socket connect timeout in seconds",
    )
    nagle: bool = Field(
        default=False,
        description="Enable Nagle's algorithm on server sockets",
    )

    # --- Failover / failback ---
    dead_timeout_seconds: float = Field(
        default=60.0,
        description="Seconds before a failed server is put back into rotation",
    )

    # --- Optimistic retry ---
    max_attempts: int = Field(
        default=16,
        description="Attempts per group index update (0 = unbounded)",
    )
    backoff_multiplier: float = Field(
        default=0.01,
        description="Exponential backoff multiplier in seconds",
    )
    backoff_min_seconds: float = Field(
        default=0.005,
        description="Minimum wait between retries",
    )
    backoff_max_seconds: float = Field(
        default=0.5,
        description="Maximum wait between retries",
    )

    # --- Observability ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )
    otel_exporter: Literal["none", "console", "otlp"] = Field(
        default="none",
        description="OpenTelemetry span exporter",
    )
    otel_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP collector endpoint",
    )
    otel_service_name: str = Field(
        default="memgroup",
        description="service.name resource attribute",
    )

    @property
    def server_list(self) -> list[str]:
        """Return the configured servers as individual host:port strings."""
        return [s for s in _SERVER_SEPARATOR.split(self.servers) if s]

    def retry_policy(self) -> RetryPolicy:
        """Build the optimistic retry policy from the flat settings."""
        return RetryPolicy(
            max_attempts=self.max_attempts or None,
            backoff_multiplier=self.backoff_multiplier,
            backoff_min_seconds=self.backoff_min_seconds,
            backoff_max_seconds=self.backoff_max_seconds,
        )

    @model_validator(mode="after")
    def validate_servers(self) -> Settings:
        """Require at least one server address."""
        if not self.server_list:
            msg = "at least one memcached server is required"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_keys(self) -> Settings:
        """Keep prefix + fingerprint inside memcached's key limits."""
        if len(self.key_prefix.encode()) + FINGERPRINT_LENGTH > MAX_KEY_LENGTH:
            msg = f"key_prefix too long: store keys must fit in {MAX_KEY_LENGTH} bytes"
            raise ValueError(msg)
        if any(ch.isspace() or ord(ch) < 32 for ch in self.key_prefix):
            msg = "key_prefix must not contain whitespace or control characters"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_timing(self) -> Settings:
        """Reject negative TTLs and inverted backoff bounds."""
        if self.expiration_seconds < 0:
            msg = "expiration_seconds must be >= 0"
            raise ValueError(msg)
        if self.max_attempts < 0:
            msg = "max_attempts must be >= 0"
            raise ValueError(msg)
        if self.backoff_min_seconds > self.backoff_max_seconds:
            msg = "backoff_min_seconds must not exceed backoff_max_seconds"
            raise ValueError(msg)
        return self
