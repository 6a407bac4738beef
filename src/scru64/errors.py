"""SCRU64 Error Taxonomy.

This module defines the error hierarchy for the SCRU64 library. Every
error carries a stable code, a human-readable message and a details
dict so that callers (and the CLI) can report failures uniformly.

Error kinds:
    InvalidSyntaxError: malformed textual input (ID string, node spec)
    OutOfRangeError: well-formed value outside its valid bounds
    CounterModeError: a counter mode broke its contract (fatal)
    GlobalGeneratorConfigError: global generator used without configuration
"""
from __future__ import annotations

from typing import Any


class Scru64Error(Exception):
    """Base exception for all SCRU64 errors.

    Attributes:
        code: Error code following the scru64:kind/... pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidSyntaxError(Scru64Error, ValueError):
    """Raised when textual input does not conform to the expected syntax.

    This covers identifier strings of the wrong length or with characters
    outside the Base36 alphabet, and node spec strings that do not match
    the node spec grammar.

    Attributes:
        value: The rejected input
    """

    def __init__(self, message: str, value: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="scru64:syntax/invalid",
            message=message,
            details={"value": value, **(details or {})},
        )
        self.value = value


class OutOfRangeError(Scru64Error, ValueError):
    """Raised when a numerically well-formed value is outside its valid range.

    Attributes:
        field: Name of the offending argument or field
        value: The rejected value
    """

    def __init__(
        self,
        field: str,
        value: Any,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="scru64:range/out_of_range",
            message=message or f"`{field}` out of range",
            details={"field": field, "value": repr(value), **(details or {})},
        )
        self.field = field
        self.value = value


class CounterModeError(Scru64Error, RuntimeError):
    """Raised when a counter mode returns a value that does not fit the counter.

    This indicates a broken counter mode implementation, not a transient
    condition; the generator never retries or masks it.

    Attributes:
        counter: The value returned by the counter mode
        counter_size: The counter width in bits the value had to fit in
    """

    def __init__(self, counter: Any, counter_size: int, details: dict[str, Any] | None = None) -> None:
        message = (
            f"Counter mode returned {counter!r}, which does not fit in {counter_size} bits"
        )
        super().__init__(
            code="scru64:internal/counter_mode",
            message=message,
            details={"counter": repr(counter), "counter_size": counter_size, **(details or {})},
        )
        self.counter = counter
        self.counter_size = counter_size


class GlobalGeneratorConfigError(Scru64Error):
    """Raised when the global generator cannot be configured.

    This occurs when the global generator is used before being initialized
    and no valid node spec can be read from the environment.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="scru64:config/global_generator",
            message=message,
            details=details or {},
        )
