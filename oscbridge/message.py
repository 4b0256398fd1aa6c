"""In-memory model of one OSC message: an address and an ordered list of typed values."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Any, ClassVar, List, Union

import numpy as np

from oscbridge.platform.logging import create_logger

_INT32 = np.iinfo(np.int32)

logger = create_logger(__name__)


@dataclass(frozen=True)
class Int32:
    value: int
    tag: ClassVar[str] = "i"

    def __post_init__(self) -> None:
        value = int(self.value)
        if not _INT32.min <= value <= _INT32.max:
            raise ValueError(f"{value} does not fit into a signed 32-bit integer")
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Float32:
    """
    Single precision float; the stored value is already rounded to float32.

    Equality compares the big-endian bit patterns, so NaN equals itself and
    ``0.0`` differs from ``-0.0``, exactly as the wire sees them.
    """

    value: float
    tag: ClassVar[str] = "f"

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(np.float32(self.value)))

    def _bits(self) -> bytes:
        return struct.pack(">f", self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Float32):
            return NotImplemented
        return self._bits() == other._bits()

    def __hash__(self) -> int:
        return hash(self._bits())

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class String:
    value: str
    tag: ClassVar[str] = "s"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String value must be str, got {type(self.value).__name__}")
        if "\0" in self.value:
            raise ValueError("String values cannot contain NUL characters")

    def __str__(self) -> str:
        if _needs_quotes(self.value):
            return f'"{self.value}"'
        return self.value


def _needs_quotes(text: str) -> bool:
    # Quoted so that str(message) parses back into the same value types.
    if not text or text.startswith('"') or any(ch.isspace() for ch in text):
        return True
    try:
        float(text)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class Unsupported:
    """Placeholder for a value whose wire type is not understood."""

    tag: ClassVar[str] = "?"

    @property
    def value(self) -> None:
        return None

    def __str__(self) -> str:
        return "?"


Value = Union[Int32, Float32, String, Unsupported]
VALUE_TYPES = (Int32, Float32, String, Unsupported)


def coerce_value(obj: Any) -> Value:
    """Map a plain Python (or numpy) value onto one of the value variants."""
    if isinstance(obj, VALUE_TYPES):
        return obj
    if isinstance(obj, (bool, np.bool_)):
        raise TypeError("Booleans have no OSC value type here; send an int instead")
    if isinstance(obj, (int, np.integer)):
        return Int32(int(obj))
    if isinstance(obj, (float, np.floating)):
        return Float32(float(obj))
    if isinstance(obj, str):
        return String(obj)
    return Unsupported()


class Message:
    """
    An OSC address plus ordered values.

    Plain Python values are coerced on the way in, so ``Message("/foo", 1, 2.0, "x")``
    holds ``Int32(1)``, ``Float32(2.0)`` and ``String("x")``.
    """

    def __init__(self, address: str, *values: Any) -> None:
        if not isinstance(address, str) or not address:
            raise ValueError("Message address must be a non-empty string")
        if "\0" in address:
            raise ValueError("Message address cannot contain NUL characters")
        self.address = address
        self.values: List[Value] = [coerce_value(value) for value in values]

    def append(self, value: Any) -> None:
        self.values.append(coerce_value(value))

    @property
    def type_tags(self) -> str:
        return "," + "".join(value.tag for value in self.values)

    @property
    def arguments(self) -> List[Any]:
        return [value.value for value in self.values]

    def get_int(self, index: int) -> int:
        value = self.values[index]
        if isinstance(value, (Int32, Float32)) and math.isfinite(value.value):
            return int(value.value)
        logger.warning("Wrong type at index %d of %s: %r", index, self.address, value)
        return 0

    def get_float(self, index: int) -> float:
        value = self.values[index]
        if isinstance(value, (Int32, Float32)) and not math.isnan(value.value):
            return float(value.value)
        logger.warning("Wrong type at index %d of %s: %r", index, self.address, value)
        return 0.0

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self.address == other.address and self.values == other.values

    def __repr__(self) -> str:
        args = [repr(self.address)] + [repr(value) for value in self.values]
        return f"Message({', '.join(args)})"

    def __str__(self) -> str:
        return " ".join([self.address] + [str(value) for value in self.values])


__all__ = [
    "Int32",
    "Float32",
    "String",
    "Unsupported",
    "Value",
    "VALUE_TYPES",
    "coerce_value",
    "Message",
]
