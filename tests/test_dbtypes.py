from __future__ import annotations

import pytest

from ezkit.dbtypes import (
    BIGINT,
    BIT,
    CHAR,
    DOUBLE,
    FLOAT,
    INT,
    MEDIUMINT,
    SMALLINT,
    TEXT,
    TINYINT,
    VARCHAR,
    bit_length,
)
from ezkit.errors import ValueBoundsError


def test_bit_length_uses_magnitude() -> None:
    assert bit_length(0) == 0
    assert bit_length(255) == 8
    assert bit_length(-256) == 9
    assert bit_length(3.9) == 2


@pytest.mark.parametrize(
    ("cls", "largest"),
    [
        (TINYINT, 2**8 - 1),
        (SMALLINT, 2**16 - 1),
        (MEDIUMINT, 2**24 - 1),
        (INT, 2**32 - 1),
        (BIGINT, 2**64 - 1),
    ],
)
def test_integer_widths(cls, largest: int) -> None:
    assert cls(largest).value == largest
    with pytest.raises(ValueBoundsError):
        cls(largest + 1)


def test_unsigned_integer_rejects_negatives() -> None:
    assert INT(-5).value == -5
    with pytest.raises(ValueBoundsError):
        INT(-5, signed=False)

    value = SMALLINT(3, signed=False)
    with pytest.raises(ValueBoundsError):
        value.value = -1
    assert value.value == 3


def test_failed_assignment_keeps_previous_value() -> None:
    value = TINYINT(7)

    with pytest.raises(ValueBoundsError):
        value.set_value(1000)

    assert value.get_value() == 7


def test_bit_inverse() -> None:
    flag = BIT(True)
    assert flag.value == 1

    flag.inverse()
    assert flag.value == 0

    with pytest.raises(ValueBoundsError):
        BIT(2)


def test_reals() -> None:
    assert FLOAT(2.5).value == 2.5
    assert DOUBLE().value == 0.0
    with pytest.raises(ValueBoundsError):
        FLOAT(float(2**32))


@pytest.mark.parametrize("cls", [FLOAT, DOUBLE])
@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_reals_reject_non_finite_values(cls, value: float) -> None:
    with pytest.raises(ValueBoundsError) as excinfo:
        cls(value)

    assert "non-finite" in str(excinfo.value)


def test_non_finite_assignment_keeps_previous_value() -> None:
    price = DOUBLE(4.5)

    with pytest.raises(ValueBoundsError):
        price.value = float("nan")

    assert price.value == 4.5


def test_char_pads_to_width() -> None:
    code = CHAR(5, "ab")

    assert code.value == "ab   "
    assert CHAR(3).value == "   "
    with pytest.raises(ValueBoundsError):
        CHAR(3, "abcd")
    with pytest.raises(ValueBoundsError):
        CHAR(256)


def test_varchar_and_text_limits() -> None:
    assert VARCHAR(10, "menu").value == "menu"
    assert VARCHAR(10).value == ""
    with pytest.raises(ValueBoundsError):
        VARCHAR(3, "menu")
    with pytest.raises(ValueBoundsError):
        VARCHAR(70000)

    assert TEXT("x" * 65535).chars == 65535
    with pytest.raises(ValueBoundsError):
        TEXT("x" * 65536)


def test_equality_and_repr() -> None:
    assert INT(5) == INT(5)
    assert INT(5) != BIGINT(5)
    assert repr(VARCHAR(4, "soup")) == "VARCHAR('soup')"
