from decimal import Decimal

import pytest

from mixinkit.mixinnet.number import (
    ZERO,
    Integer,
    integer_from_decimal,
    integer_from_string,
    new_integer,
)


def test_string_format():
    assert str(new_integer(1)) == "1.00000000"
    assert str(integer_from_string("0.001")) == "0.00100000"
    assert str(ZERO) == "0.00000000"


def test_string_round_trip():
    for text in ["12.5", "0.00000001", "100", "3.14159265"]:
        value = integer_from_string(text)
        assert Decimal(str(value)) == Decimal(text)
        assert integer_from_string(str(value)) == value


def test_decimal_and_string_agree():
    assert integer_from_decimal(Decimal("7.25")) == integer_from_string("7.25")


def test_rounding_half_up():
    assert integer_from_decimal(Decimal("0.000000005")) == Integer(1)
    assert integer_from_decimal(Decimal("0.000000004")) == ZERO


@pytest.mark.parametrize("bad", ["0", "-1", "abc", "NaN"])
def test_string_rejects_invalid(bad):
    with pytest.raises(ValueError):
        integer_from_string(bad)


def test_decimal_rejects_non_positive():
    with pytest.raises(ValueError):
        integer_from_decimal(Decimal("0"))


def test_add_and_sub_are_inverse():
    a = integer_from_string("1.5")
    b = integer_from_string("0.25")
    assert a.add(b).sub(b) == a
    assert a.add(b) == integer_from_string("1.75")


def test_add_requires_positive_operand():
    with pytest.raises(ValueError):
        new_integer(1).add(ZERO)


def test_sub_rejects_larger():
    with pytest.raises(ValueError):
        new_integer(1).sub(new_integer(2))


def test_mul_and_div():
    a = integer_from_string("2.5")
    assert a.mul(4) == new_integer(10)
    assert new_integer(10).div(4) == a
    with pytest.raises(ValueError):
        a.mul(0)
    with pytest.raises(ValueError):
        a.div(-1)


def test_count():
    step = integer_from_string("0.5")
    assert new_integer(3).count(step) == new_integer(3).div(1).value // step.value
    assert new_integer(2).count(new_integer(2)) == 1
    with pytest.raises(ValueError):
        step.count(new_integer(1))


def test_ordering_and_sign():
    assert new_integer(1) < new_integer(2)
    assert ZERO.sign() == 0
    assert new_integer(1).sign() == 1


def test_bytes_round_trip():
    value = integer_from_string("123.456")
    assert Integer.from_bytes(value.to_bytes()) == value
    assert ZERO.to_bytes() == b""


def test_negative_rejected():
    with pytest.raises(ValueError):
        Integer(-5)
    with pytest.raises(ValueError):
        new_integer(-1)