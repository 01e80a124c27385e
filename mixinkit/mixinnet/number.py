"""Fixed-point amounts with eight decimal places."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

PRECISION = 8
_SCALE = 10 ** PRECISION

DecimalLike = Union[Decimal, int, str]


@dataclass(frozen=True, order=True)
class Integer:
    """An amount stored as an integer count of 10^-8 units."""

    value: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError("Integer value must be an int")
        if self.value < 0:
            raise ValueError(f"negative amount {self.value}")

    def add(self, y: "Integer") -> "Integer":
        if self.sign() < 0 or y.sign() <= 0:
            raise ValueError(f"invalid add {self} {y}")
        return Integer(self.value + y.value)

    def sub(self, y: "Integer") -> "Integer":
        if self.sign() < 0 or y.sign() <= 0 or self.value < y.value:
            raise ValueError(f"invalid sub {self} {y}")
        return Integer(self.value - y.value)

    def mul(self, y: int) -> "Integer":
        if self.sign() < 0 or y <= 0:
            raise ValueError(f"invalid mul {self} {y}")
        return Integer(self.value * y)

    def div(self, y: int) -> "Integer":
        if self.sign() < 0 or y <= 0:
            raise ValueError(f"invalid div {self} {y}")
        return Integer(self.value // y)

    def count(self, y: "Integer") -> int:
        """How many whole ``y`` fit into this amount."""
        if self.sign() <= 0 or y.sign() <= 0 or self.value < y.value:
            raise ValueError(f"invalid count {self} {y}")
        c = self.value // y.value
        if c >= 1 << 64:
            raise ValueError(f"count overflow {self} {y}")
        return c

    def sign(self) -> int:
        return (self.value > 0) - (self.value < 0)

    def to_bytes(self) -> bytes:
        """Minimal big-endian bytes of the raw value (empty for zero)."""
        return self.value.to_bytes((self.value.bit_length() + 7) // 8, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Integer":
        return cls(int.from_bytes(bytes(data), "big"))

    def __str__(self) -> str:
        s = str(self.value)
        p = len(s) - PRECISION
        if p > 0:
            return f"{s[:p]}.{s[p:]}"
        return "0." + "0" * (-p) + s


ZERO = Integer(0)


def _to_decimal(d: DecimalLike) -> Decimal:
    if isinstance(d, Decimal):
        value = d
    else:
        try:
            value = Decimal(d)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise ValueError(f"invalid decimal {d!r}") from exc
    if not value.is_finite():
        raise ValueError(f"invalid decimal {d!r}")
    return value


def _scaled(d: Decimal) -> int:
    with localcontext() as ctx:
        ctx.prec = len(d.as_tuple().digits) + PRECISION + 10
        ctx.Emax = max(ctx.Emax, 10 ** 6)
        return int((d * _SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def new_integer(x: int) -> Integer:
    """An amount of ``x`` whole units."""
    if x < 0:
        raise ValueError(f"negative amount {x}")
    return Integer(x * _SCALE)


def integer_from_decimal(d: DecimalLike) -> Integer:
    """Convert a positive decimal, rounding to eight places."""
    value = _to_decimal(d)
    if value <= 0:
        raise ValueError(f"amount must be positive: {d}")
    return Integer(_scaled(value))


def integer_from_string(x: str) -> Integer:
    """Parse a positive decimal string, rounding to eight places."""
    value = _to_decimal(x)
    if value <= 0:
        raise ValueError(f"amount must be positive: {x}")
    return Integer(_scaled(value))