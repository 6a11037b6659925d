"""Structured logging configuration for MonteGo.

This module provides structured logging using structlog so that simulation
runs, history writes and CLI errors share one output format.
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, TextIO

import structlog
from structlog.typing import EventDict, Processor

# File opened by the last configure_logging call, if it wrote to a file
_log_stream: Optional[TextIO] = None


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    enable_colors: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ('json' or 'console')
        log_file: Optional log file path; logs go to stdout if omitted
        enable_colors: Whether to enable colored output for console format
    """
    global _log_stream

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    close_log_file()

    if log_file:
        _ensure_log_directory(log_file)
        _log_stream = open(log_file, "a", encoding="utf-8")
        logger_factory = structlog.WriteLoggerFactory(file=_log_stream)
        enable_colors = False
    else:
        # PrintLogger resolves sys.stdout when each logger is created
        logger_factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=_get_processors(log_format, enable_colors),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=logger_factory,
        context_class=dict,
        cache_logger_on_first_use=False,
    )


def _get_processors(log_format: str, enable_colors: bool) -> List[Processor]:
    """Get the appropriate processors for the given format."""
    processors: List[Processor] = [
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_process_info,
    ]

    if log_format.lower() == "json":
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=enable_colors))

    return processors


def _add_process_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add process information to log entries."""
    event_dict["process_id"] = os.getpid()
    return event_dict


def _ensure_log_directory(log_file: str) -> None:
    """Ensure the log file directory exists."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)


def get_logger(name: str, **context: Any) -> structlog.BoundLogger:
    """Get a structured logger with optional context.

    Args:
        name: Logger name (typically __name__)
        **context: Additional context to bind to the logger

    Returns:
        Bound structlog logger with context
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


def close_log_file() -> None:
    """Close the log file opened by configure_logging, if any."""
    global _log_stream
    if _log_stream is not None:
        _log_stream.close()
        _log_stream = None
