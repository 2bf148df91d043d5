"""Structured logging configuration for sitecheck."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

# Name of the scenario currently executing, attached to every log line inside it
scenario_ctx: ContextVar[str] = ContextVar("scenario", default="")


def add_scenario(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the current scenario name to the log event if one is running."""
    scenario = scenario_ctx.get()
    if scenario:
        event_dict["scenario"] = scenario
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format; otherwise, console format.
        stream: Output stream (defaults to sys.stderr).
    """
    if stream is None:
        stream = sys.stderr

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        add_scenario,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically module name).

    Returns:
        Configured structlog BoundLogger.
    """
    return structlog.get_logger(logger_name=name)
