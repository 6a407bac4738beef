"""SCRU64: Sortable, Clock-based, Realm-specifically Unique identifier.

A SCRU64 ID is a 64-bit, time-ordered identifier encoded as a 12-digit
Base36 string. Generators produce monotonically increasing IDs for a node
identified by a fixed-width node ID.

Example:
    >>> from scru64 import Scru64Generator
    >>> g = Scru64Generator.parse("42/8")
    >>> x = g.generate_or_sleep()
    >>> len(str(x))
    12
"""

from scru64.counter_mode import CounterMode, DefaultCounterMode, RenewContext
from scru64.errors import (
    CounterModeError,
    GlobalGeneratorConfigError,
    InvalidSyntaxError,
    OutOfRangeError,
    Scru64Error,
)
from scru64.generator import Scru64Generator
from scru64.global_generator import (
    GlobalGenerator,
    global_generator,
    scru64,
    scru64_async,
    scru64_string,
    scru64_string_async,
)
from scru64.identifier import Scru64Id
from scru64.node_spec import NodeSpec

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "CounterMode",
    "CounterModeError",
    "DefaultCounterMode",
    "GlobalGenerator",
    "GlobalGeneratorConfigError",
    "InvalidSyntaxError",
    "NodeSpec",
    "OutOfRangeError",
    "RenewContext",
    "Scru64Error",
    "Scru64Generator",
    "Scru64Id",
    "global_generator",
    "scru64",
    "scru64_async",
    "scru64_string",
    "scru64_string_async",
]
