"""Ed25519 group arithmetic: points in extended coordinates and scalars mod L."""

from __future__ import annotations

from dataclasses import dataclass

P = 2 ** 255 - 19
GROUP_ORDER = 2 ** 252 + 27742317777372353535851937790883648493
_D = -121665 * pow(121666, P - 2, P) % P
_D2 = 2 * _D % P
_SQRT_M1 = pow(2, (P - 1) // 4, P)


def _sqrt_ratio(u: int, v: int) -> int | None:
    v3 = v * v % P * v % P
    v7 = v3 * v3 % P * v % P
    x = u * v3 % P * pow(u * v7 % P, (P - 5) // 8, P) % P
    vxx = v * x % P * x % P
    if vxx == u % P:
        return x
    if vxx == (-u) % P:
        return x * _SQRT_M1 % P
    return None


@dataclass(frozen=True, eq=False)
class Point:
    """A curve point in extended twisted Edwards coordinates."""

    x: int
    y: int
    z: int
    t: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "Point":
        """Decode a 32-byte encoding; non-canonical y values are accepted."""
        data = bytes(data)
        if len(data) != 32:
            raise ValueError(f"invalid point encoding length {len(data)}")
        raw = int.from_bytes(data, "little")
        sign = raw >> 255
        y = (raw & ((1 << 255) - 1)) % P
        yy = y * y % P
        x = _sqrt_ratio((yy - 1) % P, (_D * yy + 1) % P)
        if x is None:
            raise ValueError("invalid point encoding")
        if x & 1:
            x = P - x
        if sign:
            x = (P - x) % P
        return cls(x, y, 1, x * y % P)

    def to_bytes(self) -> bytes:
        zinv = pow(self.z, P - 2, P)
        x = self.x * zinv % P
        y = self.y * zinv % P
        return (y | ((x & 1) << 255)).to_bytes(32, "little")

    def add(self, other: "Point") -> "Point":
        a = (self.y - self.x) * (other.y - other.x) % P
        b = (self.y + self.x) * (other.y + other.x) % P
        c = self.t * _D2 % P * other.t % P
        d = 2 * self.z * other.z % P
        e, f, g, h = b - a, d - c, d + c, b + a
        return Point(e * f % P, g * h % P, f * g % P, e * h % P)

    def _double(self) -> "Point":
        a = self.x * self.x % P
        b = self.y * self.y % P
        c = 2 * self.z * self.z % P
        h = a + b
        e = h - (self.x + self.y) * (self.x + self.y)
        g = a - b
        f = c + g
        return Point(e * f % P, g * h % P, f * g % P, e * h % P)

    def neg(self) -> "Point":
        return Point((-self.x) % P, self.y, self.z, (-self.t) % P)

    def sub(self, other: "Point") -> "Point":
        return self.add(other.neg())

    def mul(self, scalar: int) -> "Point":
        """Multiply by a scalar, reduced modulo the group order."""
        if not isinstance(scalar, int):
            raise TypeError("scalar must be an int")
        k = scalar % GROUP_ORDER
        result = IDENTITY
        addend = self
        while k:
            if k & 1:
                result = result.add(addend)
            addend = addend._double()
            k >>= 1
        return result

    def __add__(self, other: "Point") -> "Point":
        return self.add(other)

    def __sub__(self, other: "Point") -> "Point":
        return self.sub(other)

    def __neg__(self) -> "Point":
        return self.neg()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return (self.x * other.z - other.x * self.z) % P == 0 and (
            self.y * other.z - other.y * self.z
        ) % P == 0

    def __hash__(self) -> int:
        return hash(self.to_bytes())


IDENTITY = Point(0, 1, 1, 0)
BASE = Point.from_bytes(bytes.fromhex("58" + "66" * 31))


def base_mult(scalar: int) -> Point:
    """The base point multiplied by ``scalar``."""
    return BASE.mul(scalar)


def scalar_from_uniform_bytes(data: bytes) -> int:
    """Reduce a 64-byte little-endian value modulo the group order."""
    data = bytes(data)
    if len(data) != 64:
        raise ValueError(f"invalid uniform scalar length {len(data)}")
    return int.from_bytes(data, "little") % GROUP_ORDER


def scalar_from_canonical_bytes(data: bytes) -> int:
    """Parse a 32-byte scalar that must already be below the group order."""
    data = bytes(data)
    if len(data) != 32:
        raise ValueError(f"invalid scalar length {len(data)}")
    value = int.from_bytes(data, "little")
    if value >= GROUP_ORDER:
        raise ValueError("invalid scalar encoding")
    return value


def scalar_to_bytes(scalar: int) -> bytes:
    """32-byte little-endian form of a scalar modulo the group order."""
    return (scalar % GROUP_ORDER).to_bytes(32, "little")