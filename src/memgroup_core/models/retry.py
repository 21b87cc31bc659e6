"""Retry policy for optimistic group index updates."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """Bounds and backoff for read-modify-cas loops.

    ``max_attempts=None`` retries forever, matching a plain
    ``while not done`` loop; any positive value caps the loop.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int | None = Field(default=16, ge=1)
    backoff_multiplier: float = Field(default=0.01, ge=0)
    backoff_min_seconds: float = Field(default=0.005, ge=0)
    backoff_max_seconds: float = Field(default=0.5, ge=0)

    @classmethod
    def unbounded(cls) -> RetryPolicy:
        """Policy that never gives up."""
        return cls(max_attempts=None)

    @classmethod
    def immediate(cls, max_attempts: int | None = 16) -> RetryPolicy:
        """Policy with no waiting between attempts."""
        return cls(
            max_attempts=max_attempts,
            backoff_multiplier=0,
            backoff_min_seconds=0,
            backoff_max_seconds=0,
        )
