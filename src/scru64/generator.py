"""SCRU64 ID generator.

The generator offers six methods to generate a SCRU64 ID:

| Method                     | Timestamp | On big clock rewind |
| -------------------------- | --------- | ------------------- |
| generate                   | Now       | Returns None        |
| generate_or_reset          | Now       | Resets generator    |
| generate_or_sleep          | Now       | Sleeps (blocking)   |
| generate_or_await          | Now       | Sleeps (async)      |
| generate_or_abort_core     | Argument  | Returns None        |
| generate_or_reset_core     | Argument  | Resets generator    |

All of them return monotonically increasing IDs unless a timestamp
provided is significantly (by default, 10 seconds or more) smaller than
the one embedded in the immediately preceding ID. On such a rollback,
(1) ``generate`` aborts and returns None; (2) the ``or_reset`` variants
reset the generator and return a new ID based on the given timestamp,
breaking the monotonic order; and (3) ``generate_or_sleep`` and
``generate_or_await`` wait until the clock catches up. The ``core``
methods take the timestamp and the rollback allowance as arguments.

Note that the waiting variants have no timeout: if the clock never
returns to within the rollback allowance of the last ID, they wait
forever. Cancel the awaiting task to give up.

Thread safety: each generator guards its state with a lock held for the
duration of a single state transition, so one instance may be shared by
multiple threads. The lock is never held across an ``await``.

Example:
    >>> g = Scru64Generator.parse("42/8")
    >>> x = g.generate_or_reset()
    >>> x.node_ctr >> 16
    42
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable

from scru64.counter_mode import CounterMode, DefaultCounterMode, RenewContext
from scru64.errors import CounterModeError, OutOfRangeError
from scru64.identifier import MAX_TIMESTAMP, NODE_CTR_SIZE, Scru64Id
from scru64.node_spec import NodeSpec
from scru64.observability import get_logger

__all__ = [
    "DEFAULT_ROLLBACK_ALLOWANCE",
    "MAX_ROLLBACK_ALLOWANCE",
    "RETRY_DELAY_SECONDS",
    "Scru64Generator",
]

logger = get_logger(__name__)

# Default rollback allowance in milliseconds
DEFAULT_ROLLBACK_ALLOWANCE = 10_000

# Upper bound of the rollback allowance in 256-millisecond units
MAX_ROLLBACK_ALLOWANCE = 0xFF_FFFF_FFFF

# Delay between attempts in generate_or_sleep and generate_or_await
RETRY_DELAY_SECONDS = 0.064

# Size of the `timestamp` unit in milliseconds
_TICK_MS = 256


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _to_ticks(field: str, value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise OutOfRangeError(field, value, message=f"`{field}` must be an integer")
    # truncate toward zero
    return value // _TICK_MS if value >= 0 else -(-value // _TICK_MS)


def _check_allowance(rollback_allowance: int) -> int:
    allowance = _to_ticks("rollback_allowance", rollback_allowance)
    if not 0 <= allowance <= MAX_ROLLBACK_ALLOWANCE:
        raise OutOfRangeError(
            "rollback_allowance",
            rollback_allowance,
            message="`rollback_allowance` out of reasonable range",
        )
    return allowance


class Scru64Generator:
    """Generates monotonically increasing SCRU64 IDs for one node.

    Args:
        node_spec: Node configuration, as a ``NodeSpec`` or a node spec string
            such as ``"42/8"``
        counter_mode: Strategy initializing the counter at each new tick
            (default: ``DefaultCounterMode()``)
        rollback_allowance: Clock rollback in milliseconds tolerated by the
            methods that read the current time (default: 10 000)
        clock: Zero-argument callable returning the current Unix time in
            milliseconds (default: the system clock)

    Raises:
        InvalidSyntaxError: If a node spec string is malformed.
        OutOfRangeError: If the node configuration or the rollback allowance
            is out of its valid range.
    """

    def __init__(
        self,
        node_spec: NodeSpec | str,
        *,
        counter_mode: CounterMode | None = None,
        rollback_allowance: int = DEFAULT_ROLLBACK_ALLOWANCE,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if isinstance(node_spec, str):
            node_spec = NodeSpec.parse(node_spec)
        _check_allowance(rollback_allowance)

        self._counter_size = NODE_CTR_SIZE - node_spec.node_id_size
        if node_spec.node_prev is not None:
            self._prev_timestamp = node_spec.node_prev.timestamp
            self._prev_node_ctr = node_spec.node_prev.node_ctr
        else:
            self._prev_timestamp = 0
            self._prev_node_ctr = node_spec.node_id << self._counter_size
        self._seeded_by_prev = node_spec.node_prev is not None

        self._counter_mode: CounterMode = counter_mode or DefaultCounterMode()
        self._rollback_allowance = rollback_allowance
        self._clock = clock or _now_ms
        self._lock = threading.Lock()

    @classmethod
    def parse(
        cls,
        node_spec: str,
        *,
        counter_mode: CounterMode | None = None,
        rollback_allowance: int = DEFAULT_ROLLBACK_ALLOWANCE,
        clock: Callable[[], int] | None = None,
    ) -> Scru64Generator:
        """Create a generator from a node spec string (e.g. ``"42/8"``)."""
        return cls(
            NodeSpec.parse(node_spec),
            counter_mode=counter_mode,
            rollback_allowance=rollback_allowance,
            clock=clock,
        )

    # --- Introspection ---

    @property
    def node_id(self) -> int:
        return self._prev_node_ctr >> self._counter_size

    @property
    def node_id_size(self) -> int:
        return NODE_CTR_SIZE - self._counter_size

    @property
    def node_spec(self) -> NodeSpec:
        """The node configuration in its canonical form.

        A generator configured with a previous ID reports the most recently
        generated ID in place of the original one.
        """
        with self._lock:
            if self._seeded_by_prev:
                node_prev = Scru64Id.from_parts(self._prev_timestamp, self._prev_node_ctr)
                return NodeSpec.of_node_prev(node_prev, self.node_id_size)
            return NodeSpec.of_node_id(self.node_id, self.node_id_size)

    @property
    def counter_mode(self) -> CounterMode:
        return self._counter_mode

    @property
    def rollback_allowance(self) -> int:
        return self._rollback_allowance

    def __repr__(self) -> str:
        return f"Scru64Generator('{self.node_id}/{self.node_id_size}')"

    # --- Counter renewal ---

    def _renew_node_ctr(self, timestamp: int) -> int:
        """Calculate the combined ``node_ctr`` value for a new ``timestamp`` tick."""
        node_id = self.node_id
        context = RenewContext(timestamp=timestamp, node_id=node_id)
        counter = self._counter_mode.renew(self._counter_size, context)
        if (
            not isinstance(counter, int)
            or isinstance(counter, bool)
            or not 0 <= counter < (1 << self._counter_size)
        ):
            raise CounterModeError(counter, self._counter_size)
        return (node_id << self._counter_size) | counter

    # --- Current-time methods ---

    def generate(self) -> Scru64Id | None:
        """Generate a new ID from the current time, or return None upon
        significant clock rollback."""
        return self.generate_or_abort_core(self._clock(), self._rollback_allowance)

    def generate_or_reset(self) -> Scru64Id:
        """Generate a new ID from the current time, or reset the generator upon
        significant clock rollback."""
        return self.generate_or_reset_core(self._clock(), self._rollback_allowance)

    def generate_or_sleep(self) -> Scru64Id:
        """Return a new ID, or block and retry until one is available.

        Sleeps the calling thread between attempts; prefer
        ``generate_or_await`` in asynchronous code.
        """
        while True:
            value = self.generate()
            if value is not None:
                return value
            time.sleep(RETRY_DELAY_SECONDS)

    async def generate_or_await(self) -> Scru64Id:
        """Return a new ID, or asynchronously wait and retry until one is available.

        The event loop stays free between attempts. There is no retry limit;
        cancel the awaiting task to stop waiting.
        """
        while True:
            value = self.generate()
            if value is not None:
                return value
            await asyncio.sleep(RETRY_DELAY_SECONDS)

    # --- Core methods ---

    def generate_or_reset_core(self, unix_ts_ms: int, rollback_allowance: int) -> Scru64Id:
        """Generate a new ID from a Unix timestamp in milliseconds, or reset the
        generator upon significant clock rollback.

        The ID returned after a reset is smaller than the previously
        generated ones.

        Args:
            unix_ts_ms: Unix timestamp in milliseconds
            rollback_allowance: Amount of ``unix_ts_ms`` rollback in
                milliseconds that is not considered significant. A suggested
                value is 10 000.

        Raises:
            OutOfRangeError: If an argument is out of its valid range.
        """
        with self._lock:
            value = self._advance(unix_ts_ms, rollback_allowance)
            if value is not None:
                return value

            # reset state and resume
            prev_timestamp = self._prev_timestamp
            timestamp = _to_ticks("unix_ts_ms", unix_ts_ms)
            node_ctr = self._renew_node_ctr(timestamp)
            self._prev_timestamp, self._prev_node_ctr = timestamp, node_ctr
            logger.warning(
                "scru64.generator.rollback_reset",
                node_id=self.node_id,
                prev_timestamp=prev_timestamp,
                new_timestamp=timestamp,
            )
            return Scru64Id.from_parts(timestamp, node_ctr)

    def generate_or_abort_core(
        self, unix_ts_ms: int, rollback_allowance: int
    ) -> Scru64Id | None:
        """Generate a new ID from a Unix timestamp in milliseconds, or return
        None upon significant clock rollback.

        A rollback is significant when the timestamp is smaller than the one
        embedded in the last ID by more than ``rollback_allowance``; a
        rollback of exactly ``rollback_allowance`` is still tolerated. The
        generator state is left untouched when None is returned.

        Args:
            unix_ts_ms: Unix timestamp in milliseconds
            rollback_allowance: Amount of ``unix_ts_ms`` rollback in
                milliseconds that is not considered significant. A suggested
                value is 10 000.

        Raises:
            OutOfRangeError: If an argument is out of its valid range.
        """
        with self._lock:
            return self._advance(unix_ts_ms, rollback_allowance)

    def _advance(self, unix_ts_ms: int, rollback_allowance: int) -> Scru64Id | None:
        timestamp = _to_ticks("unix_ts_ms", unix_ts_ms)
        allowance = _check_allowance(rollback_allowance)
        if not 0 < timestamp <= MAX_TIMESTAMP:
            raise OutOfRangeError("timestamp", timestamp)

        # state is assigned only after every check below has passed
        if timestamp > self._prev_timestamp:
            node_ctr = self._renew_node_ctr(timestamp)
        elif timestamp + allowance >= self._prev_timestamp:
            # go on with previous timestamp if new one is not much smaller
            counter_mask = (1 << self._counter_size) - 1
            if (self._prev_node_ctr & counter_mask) < counter_mask:
                timestamp = self._prev_timestamp
                node_ctr = self._prev_node_ctr + 1
            else:
                # increment timestamp at counter overflow
                timestamp = self._prev_timestamp + 1
                if timestamp > MAX_TIMESTAMP:
                    raise OutOfRangeError("timestamp", timestamp)
                node_ctr = self._renew_node_ctr(timestamp)
                logger.debug(
                    "scru64.generator.counter_overflow",
                    node_id=self.node_id,
                    new_timestamp=timestamp,
                )
        else:
            # abort if clock went backwards to unbearable extent
            logger.debug(
                "scru64.generator.rollback_abort",
                node_id=self.node_id,
                prev_timestamp=self._prev_timestamp,
                new_timestamp=timestamp,
            )
            return None

        self._prev_timestamp, self._prev_node_ctr = timestamp, node_ctr
        return Scru64Id.from_parts(timestamp, node_ctr)
