"""Structured logging for the character creation engine.

Services log through structlog with ``character_id`` and ``step_type``
bound for the duration of a step. Console rendering is the default; set
``DND_CHARGEN_LOG_JSON=true`` for one JSON object per line.

Example:
    >>> from dnd_chargen.core.logging import get_logger, step_context
    >>> logger = get_logger(__name__)
    >>> with step_context("c-1", StepType.RACE_SELECTION):
    ...     logger.info("Step applied", selections=1)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


# HTTP client loggers are chatty at INFO when the SRD API source is used.
NOISY_LOGGERS = ("urllib3", "requests")


def render_enum_values(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace enum members (step types, abilities, statuses) with their values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Logging level name.
        json_format: Render JSON lines instead of colored console output.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        render_enum_values,
    ]

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
        processors = [*shared_processors, structlog.processors.format_exc_info, renderer]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        processors = [*shared_processors, renderer]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=numeric_level,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def configure_from_settings() -> None:
    """Configure logging from ``log_level`` and ``log_json``."""
    from dnd_chargen.core.config import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


@contextmanager
def step_context(character_id: str, step_type: Enum | str | None = None, **extra: Any) -> Iterator[None]:
    """Bind the character and step to every log line inside the block.

    Bindings are removed on exit, including when the block raises, so
    a rejected step does not leak its ids into later log lines.
    """
    bindings: dict[str, Any] = {"character_id": character_id, **extra}
    if step_type is not None:
        bindings["step_type"] = step_type
    with structlog.contextvars.bound_contextvars(**bindings):
        yield


def clear_context() -> None:
    """Drop every bound context variable."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "NOISY_LOGGERS",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "render_enum_values",
    "step_context",
    "clear_context",
]
