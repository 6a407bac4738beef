"""Counter initialization strategies for SCRU64 generators.

Whenever a generator enters a new ``timestamp`` tick it asks its counter
mode for the initial counter value. A counter mode is any object with a
``renew(counter_size, context)`` method returning an integer that fits in
``counter_size`` bits; the generator treats any other return value as a
fatal contract violation.

Example:
    >>> mode = DefaultCounterMode(overflow_guard_size=1)
    >>> 0 <= mode.renew(8, RenewContext(timestamp=0x0123456789, node_id=42)) < 128
    True
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from scru64.errors import OutOfRangeError

__all__ = ["CounterMode", "DefaultCounterMode", "RenewContext"]


@dataclass(frozen=True)
class RenewContext:
    """Information passed to ``CounterMode.renew``.

    Attributes:
        timestamp: The ``timestamp`` tick the new counter is for
        node_id: The ``node_id`` of the generator
    """

    timestamp: int
    node_id: int


@runtime_checkable
class CounterMode(Protocol):
    """Protocol for counter initialization strategies."""

    def renew(self, counter_size: int, context: RenewContext) -> int:
        """Return the initial counter value for a new ``timestamp`` tick.

        Args:
            counter_size: Number of bits available to the counter (1 to 23)
            context: The tick and node the counter is renewed for

        Returns:
            An integer in ``[0, 2**counter_size)``
        """
        ...


class DefaultCounterMode:
    """Initializes the counter with a random number, leaving guard bits zero.

    The ``overflow_guard_size`` most significant counter bits are always
    zero, which reserves headroom for increments within the same tick and
    reduces the chance of a counter overflow advancing the timestamp early.

    When ``overflow_guard_size`` is None the guard size follows the counter
    size: one guard bit for counters of 4 bits or fewer, none otherwise.
    """

    def __init__(self, overflow_guard_size: int | None = None) -> None:
        if overflow_guard_size is not None and overflow_guard_size < 0:
            raise OutOfRangeError("overflow_guard_size", overflow_guard_size)
        self._overflow_guard_size = overflow_guard_size

    @property
    def overflow_guard_size(self) -> int | None:
        return self._overflow_guard_size

    def guard_size_for(self, counter_size: int) -> int:
        """Return the number of guard bits applied to a ``counter_size``-bit counter."""
        if self._overflow_guard_size is not None:
            return self._overflow_guard_size
        return 1 if counter_size <= 4 else 0

    def renew(self, counter_size: int, context: RenewContext) -> int:
        """Return a random integer filling ``counter_size`` bits minus the guard bits."""
        k = max(0, counter_size - self.guard_size_for(counter_size))
        return secrets.randbits(k)

    def __repr__(self) -> str:
        return f"DefaultCounterMode(overflow_guard_size={self._overflow_guard_size!r})"
