"""structlog setup for the memgroup client and CLI.

Library modules only call ``structlog.get_logger()``; an application (or the
CLI) decides once, via configure_logging(), where those events go. Group
operations bind ``group_id`` into contextvars so that the index retries and
deletions they trigger are attributable to the group being worked on.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import (
    bind_contextvars,
    bound_contextvars,
    clear_contextvars,
    merge_contextvars,
)

if TYPE_CHECKING:
    from memgroup_core.config.settings import Settings

# Third-party loggers that report every dead or re-added server at INFO.
_NOISY_LOGGERS = ("pymemcache",)


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib records through one handler on the root logger.

    Uses ``settings.log_format`` ("json" or "console") and
    ``settings.log_level``. Calling it again replaces the previous handler.
    """
    shared_processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.log_format),
            ],
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_client_context(**context: object) -> None:
    """Attach fields such as ``client_id`` to every later log entry of this context."""
    bind_contextvars(**context)


def clear_client_context() -> None:
    """Drop every field bound with bind_client_context() or group_log_context()."""
    clear_contextvars()


@contextmanager
def group_log_context(group_id: str) -> Iterator[None]:
    """Bind ``group_id`` for the duration of one group operation."""
    with bound_contextvars(group_id=group_id):
        yield


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _resolve_level(level_name: str) -> int:
    """Convert a level name string to a logging level int."""
    mapping: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return mapping.get(level_name.upper(), logging.INFO)
