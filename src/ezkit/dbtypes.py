"""Bounds-checked wrappers for column values.

Each wrapper validates on every assignment: integers and reals against their
bit width, strings against their character length. They carry no query or
schema behavior; callers unwrap ``.value`` before handing it to a driver.
"""

from __future__ import annotations

import math
from typing import Any, ClassVar

from .errors import ValueBoundsError


class DbType:
    """Common value holder; subclasses implement :meth:`set_value` validation."""

    _value: Any

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set_value(value)

    def get_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DbType):
            return type(self) is type(other) and self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


# ---------------------------------------------------------------------------
# Numeric
# ---------------------------------------------------------------------------


def bit_length(value: int | float) -> int:
    """Number of bits needed for the magnitude of ``value`` (fraction dropped)."""

    return int(abs(value)).bit_length()


class Numeric(DbType):
    def __init__(self, bits: int, value: int | float = 0) -> None:
        self.bits = bits
        self.set_value(value)

    def set_value(self, value: int | float) -> None:
        bits = bit_length(value)
        if bits > self.bits:
            raise ValueBoundsError(
                f"Value {value} is {bits} bits long, which is more than the specified limit {self.bits}"
            )
        self._value = value


class Integer(Numeric):
    BITS: ClassVar[int] = 0

    def __init__(self, value: int = 0, signed: bool = True, *, bits: int | None = None) -> None:
        # ``signed`` must be known before the first validation.
        self.signed = signed
        super().__init__(bits if bits is not None else self.BITS, int(value))

    def set_value(self, value: int) -> None:
        if not self.signed and value < 0:
            raise ValueBoundsError(f"Cannot assign value {value} to an unsigned {type(self).__name__}")
        super().set_value(int(value))


class BIT(Integer):
    BITS = 1

    def __init__(self, value: int | bool = 0) -> None:
        super().__init__(int(value), signed=False)

    def inverse(self) -> None:
        self.set_value(0 if self._value else 1)


class TINYINT(Integer):
    BITS = 1 * 8


class SMALLINT(Integer):
    BITS = 2 * 8


class MEDIUMINT(Integer):
    BITS = 3 * 8


class INT(Integer):
    BITS = 4 * 8


class BIGINT(Integer):
    BITS = 8 * 8


class Real(Numeric):
    BITS: ClassVar[int] = 0

    def __init__(self, value: float = 0.0, *, bits: int | None = None) -> None:
        super().__init__(bits if bits is not None else self.BITS, float(value))

    def set_value(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value):
            raise ValueBoundsError(f"Cannot assign non-finite value {value} to a {type(self).__name__}")
        super().set_value(value)


class FLOAT(Real):
    BITS = 4 * 8


class DOUBLE(Real):
    BITS = 8 * 8


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------


class DbString(DbType):
    MAX_CHARS: ClassVar[int | None] = None

    def __init__(self, chars: int, value: str | None = None) -> None:
        limit = type(self).MAX_CHARS
        if limit is not None and chars > limit:
            raise ValueBoundsError(
                f"{type(self).__name__} type instance cannot have a length of {chars} chars, "
                f"limit is {limit} chars"
            )
        self.chars = chars
        self.set_value(value)

    def set_value(self, value: str | None) -> None:
        text = value or ""
        if len(text) > self.chars:
            raise ValueBoundsError(
                f"Value {text!r} is {len(text)} characters long, which is more than the "
                f"specified limit {self.chars}"
            )
        self._value = text


class CHAR(DbString):
    """Fixed-width string, right-padded with spaces to ``chars``."""

    MAX_CHARS = 255

    def set_value(self, value: str | None) -> None:
        text = value or ""
        super().set_value(text.ljust(self.chars) if len(text) <= self.chars else text)


class VARCHAR(DbString):
    MAX_CHARS = 65535


class _FixedText(DbString):
    CHARS: ClassVar[int] = 0

    def __init__(self, value: str | None = None) -> None:
        super().__init__(type(self).CHARS, value)


class TEXT(_FixedText):
    CHARS = 65535


class MEDIUMTEXT(_FixedText):
    CHARS = 16777215


class LONGTEXT(_FixedText):
    CHARS = 4294967295


__all__ = [
    "BIGINT",
    "BIT",
    "CHAR",
    "DOUBLE",
    "DbString",
    "DbType",
    "FLOAT",
    "INT",
    "Integer",
    "LONGTEXT",
    "MEDIUMINT",
    "MEDIUMTEXT",
    "Numeric",
    "Real",
    "SMALLINT",
    "TEXT",
    "TINYINT",
    "VARCHAR",
    "bit_length",
]
