"""Structured logging configuration for SCRU64.

This module configures structlog for structured logging with support for
both development (console) and production (JSON) output formats.

Log records go to stderr so that identifiers written to stdout (for
example by the ``scru64`` command) are never interleaved with log lines.

Environment Variables:
    SCRU64_LOG_FORMAT: Set to "json" for JSON output, "console" for colored output
    SCRU64_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR)
    SCRU64_SERVICE_NAME: Service name to include in logs

Example:
    >>> from scru64.observability.logging import get_logger, configure_logging
    >>>
    >>> configure_logging(log_format="json", log_level="DEBUG")
    >>> logger = get_logger("scru64.generator")
    >>> logger.warning("scru64.generator.rollback_reset", new_timestamp=6557084606)
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

# Default configuration
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "scru64"

# Environment variable names
ENV_LOG_FORMAT = "SCRU64_LOG_FORMAT"
ENV_LOG_LEVEL = "SCRU64_LOG_LEVEL"
ENV_SERVICE_NAME = "SCRU64_SERVICE_NAME"

# Module-level flag to track if logging has been configured
_logging_configured = False
_service_name = DEFAULT_SERVICE_NAME


def _get_log_level() -> str:
    """Get log level from environment or use default."""
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    """Get log format from environment or use default."""
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_service_name() -> str:
    return os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)


def _get_shared_processors() -> list[Processor]:
    """Get shared processors for all log formats."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _get_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(default=str)
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the configured service name unless one is bound already."""
    event_dict.setdefault("service", _service_name)
    return event_dict


def _ensure_configured(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    if not _logging_configured:
        configure_logging()
    return event_dict


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the library and the CLI.

    Only the ``scru64`` stdlib logger is touched. The global structlog
    configuration and the caller's context variables are left as they are.
    Loggers from ``get_logger`` call this with the defaults on their first
    record if nothing has configured logging yet.

    Args:
        log_format: Output format - "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "WARNING"
        service_name: Service name added to every record. Defaults to env var or "scru64"
        force: If True, reconfigure even if already configured

    Raises:
        ValueError: If ``log_level`` is not a standard logging level name
    """
    global _logging_configured, _service_name

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = (log_level or _get_log_level()).upper()

    level = logging.getLevelName(log_level)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    _service_name = service_name or _get_service_name()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*_get_shared_processors(), _add_service],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _get_renderer(log_format),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    # the root logger is left to the application
    package_logger = logging.getLogger("scru64")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given name.

    The logger carries its own processor chain, so creating one has no side
    effects. Logging is configured with default settings when the first
    record is emitted, unless ``configure_logging`` ran before.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Bound structlog logger
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            _ensure_configured,
            structlog.stdlib.filter_by_level,
            *_get_shared_processors(),
            _add_service,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_context(**kwargs: Any) -> None:
    """Bind context variables that will be included in all subsequent logs.

    Example:
        >>> bind_context(node_spec="42/8")
        >>> logger.info("event")  # Will include node_spec
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
