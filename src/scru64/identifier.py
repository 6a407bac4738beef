"""SCRU64 ID value type and its Base36 codec.

A SCRU64 ID is a 64-bit unsigned integer in the range ``[0, 36**12 - 1]``,
laid out as:

- 40 bits: ``timestamp`` (Unix time in units of 256 milliseconds)
- 24 bits: ``node_ctr`` (node ID in the high bits, counter in the low bits)

The canonical textual form is a 12-digit Base36 string (lowercase on
output, case-insensitive on input) whose lexicographic order matches the
numeric order. The canonical binary form is an 8-byte big-endian buffer.

Example:
    >>> x = Scru64Id.from_parts(6557084606, 2777946)
    >>> str(x)
    '0u375nxqh5cq'
    >>> x.to_hex()
    '0x0186d52bbe2a635a'
    >>> Scru64Id.from_str("0U375NXQH5CQ") == x
    True
"""

from __future__ import annotations

import functools
from typing import Any

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from scru64.errors import InvalidSyntaxError, OutOfRangeError

__all__ = [
    "DIGITS",
    "MAX_NODE_CTR",
    "MAX_SCRU64_BYTES",
    "MAX_SCRU64_INT",
    "MAX_TIMESTAMP",
    "NODE_CTR_SIZE",
    "Scru64Id",
]

# The maximum valid value (i.e., `zzzzzzzzzzzz`)
MAX_SCRU64_INT = 36**12 - 1

MAX_SCRU64_BYTES = bytes((0x41, 0xC2, 0x1C, 0xB8, 0xE0, 0xFF, 0xFF, 0xFF))

# Total size in bits of the `node_id` and `counter` fields
NODE_CTR_SIZE = 24

MAX_TIMESTAMP = MAX_SCRU64_INT >> NODE_CTR_SIZE  # 282_429_536_480

MAX_NODE_CTR = (1 << NODE_CTR_SIZE) - 1

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_STRING_LENGTH = 12
_BYTES_LENGTH = 8

# O(1) map from digit characters (both cases) to Base36 digit values
_DECODE_MAP: dict[str, int] = {
    **{c: i for i, c in enumerate(DIGITS)},
    **{c.upper(): i for i, c in enumerate(DIGITS) if c.isalpha()},
}


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@functools.total_ordering
class Scru64Id:
    """An immutable SCRU64 ID.

    Instances are created through the ``from_*`` factories and never change
    afterwards. Equality, hashing and ordering follow the unsigned 64-bit
    integer value, which is also the order of the 8-byte big-endian buffer
    and of the 12-digit string.
    """

    __slots__ = ("_bytes",)

    _bytes: bytes

    def __init__(self, value: bytes | bytearray | memoryview) -> None:
        """Create an ID from an 8-byte big-endian buffer (same as ``from_bytes``)."""
        object.__setattr__(self, "_bytes", self._validate_bytes(value))

    @classmethod
    def _of_trusted(cls, value: bytes) -> Scru64Id:
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_bytes", value)
        return obj

    @staticmethod
    def _validate_bytes(value: bytes | bytearray | memoryview) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"expected a bytes-like object, got {type(value).__name__}")
        # always copy into an immutable buffer; callers may keep mutating theirs
        raw = bytes(value)
        if len(raw) != _BYTES_LENGTH:
            raise OutOfRangeError(
                "bytes", raw, message=f"invalid length: {len(raw)}", details={"length": len(raw)}
            )
        if raw > MAX_SCRU64_BYTES:
            raise OutOfRangeError("bytes", raw, message="integer out of valid value range")
        return raw

    # --- Factories ---

    @classmethod
    def from_bytes(cls, value: bytes | bytearray | memoryview) -> Scru64Id:
        """Create an ID from an 8-byte big-endian buffer.

        The buffer is copied, so mutating a ``bytearray`` afterwards does not
        affect the created ID.

        Raises:
            OutOfRangeError: If the length is not 8 or the value exceeds
                ``36**12 - 1``.
        """
        return cls._of_trusted(cls._validate_bytes(value))

    @classmethod
    def from_str(cls, value: str) -> Scru64Id:
        """Create an ID from a 12-digit Base36 string (case-insensitive).

        Raises:
            InvalidSyntaxError: If the string is not exactly 12 Base36 digits.
        """
        if len(value) != _STRING_LENGTH:
            raise InvalidSyntaxError(f"invalid length: {len(value)}", value)

        n = 0
        for c in value:
            digit = _DECODE_MAP.get(c)
            if digit is None:
                raise InvalidSyntaxError(f"invalid digit {c!r}", value)
            n = n * 36 + digit

        # 12 Base36 digits never exceed MAX_SCRU64_INT
        return cls._of_trusted(n.to_bytes(_BYTES_LENGTH, "big"))

    @classmethod
    def from_int(cls, value: int) -> Scru64Id:
        """Create an ID from its unsigned integer value.

        Raises:
            OutOfRangeError: If the value is not an integer in ``[0, 36**12 - 1]``.
        """
        if not _is_int(value) or not 0 <= value <= MAX_SCRU64_INT:
            raise OutOfRangeError("value", value, message="integer out of valid value range")
        return cls._of_trusted(value.to_bytes(_BYTES_LENGTH, "big"))

    @classmethod
    def from_parts(cls, timestamp: int, node_ctr: int) -> Scru64Id:
        """Create an ID from the ``timestamp`` and combined ``node_ctr`` fields.

        Args:
            timestamp: Unix time in 256-millisecond units, ``[0, 282429536480]``
            node_ctr: Node ID and counter combined, ``[0, 16777215]``

        Raises:
            OutOfRangeError: If any argument is out of its valid range.
        """
        if not _is_int(timestamp) or not 0 <= timestamp <= MAX_TIMESTAMP:
            raise OutOfRangeError("timestamp", timestamp)
        if not _is_int(node_ctr) or not 0 <= node_ctr <= MAX_NODE_CTR:
            raise OutOfRangeError("node_ctr", node_ctr)
        n = (timestamp << NODE_CTR_SIZE) | node_ctr
        return cls._of_trusted(n.to_bytes(_BYTES_LENGTH, "big"))

    # --- Field accessors ---

    @property
    def bytes(self) -> bytes:
        """The 8-byte big-endian representation."""
        return self._bytes

    @property
    def timestamp(self) -> int:
        """The ``timestamp`` field value (top 40 bits)."""
        return int.from_bytes(self._bytes[:5], "big")

    @property
    def node_ctr(self) -> int:
        """The ``node_id`` and ``counter`` field values combined (low 24 bits)."""
        return int.from_bytes(self._bytes[5:], "big")

    # --- Conversions ---

    def to_int(self) -> int:
        return int.from_bytes(self._bytes, "big")

    def to_hex(self) -> str:
        """Return the value as ``0x`` followed by 16 lowercase hex digits."""
        return "0x" + self._bytes.hex()

    def to_json(self) -> str:
        """Return the JSON representation: the 12-digit canonical string."""
        return str(self)

    def clone(self) -> Scru64Id:
        """Return an independent ID equal to this one."""
        return self._of_trusted(bytes(self._bytes))

    def compare_to(self, other: Scru64Id) -> int:
        """Return -1, 0 or 1 if ``self`` is less than, equal to or greater than ``other``."""
        return (self._bytes > other._bytes) - (self._bytes < other._bytes)

    def __str__(self) -> str:
        n = int.from_bytes(self._bytes, "big")
        buf = [""] * _STRING_LENGTH
        for i in range(_STRING_LENGTH - 1, -1, -1):
            n, rem = divmod(n, 36)
            buf[i] = DIGITS[rem]
        return "".join(buf)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    def __int__(self) -> int:
        return self.to_int()

    def __bytes__(self) -> bytes:
        return self._bytes

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scru64Id):
            return NotImplemented
        return self._bytes == other._bytes

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Scru64Id):
            return NotImplemented
        return self._bytes < other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    # --- Immutability ---

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __copy__(self) -> Scru64Id:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Scru64Id:
        return self

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self._bytes,))

    # --- Pydantic integration ---

    @classmethod
    def _coerce(cls, value: Any) -> Scru64Id:
        if isinstance(value, Scru64Id):
            return value
        if isinstance(value, str):
            return cls.from_str(value)
        if _is_int(value):
            return cls.from_int(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(value)
        raise ValueError(f"cannot convert {type(value).__name__} to Scru64Id")

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {
            "type": "string",
            "pattern": "^[0-9A-Za-z]{12}$",
            "description": "SCRU64 ID in the 12-digit Base36 canonical form",
        }
