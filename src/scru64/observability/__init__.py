"""Observability module for SCRU64.

Provides structlog-based structured logging shared by the generator, the
global generator and the CLI.

Example:
    >>> from scru64.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.debug("scru64.generator.counter_overflow", new_timestamp=6557084607)
"""

from scru64.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
