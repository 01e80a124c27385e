"""Private and public keys, Schnorr-style signatures and ghost key derivation."""

from __future__ import annotations

import binascii
import hashlib
import os
from typing import Callable

from .edwards import (
    Point,
    base_mult,
    scalar_from_canonical_bytes,
    scalar_from_uniform_bytes,
    scalar_to_bytes,
)
from .hashing import Hash, new_blake3_hash, new_hash

KEY_SIZE = 32
SIGNATURE_SIZE = 64

# Transactions from this version on derive ghost keys with BLAKE3.
_HASH_SIGNATURE_VERSION = 0x05

RandomSource = Callable[[int], bytes]


def _unhex(text: str) -> bytes:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise ValueError(f"invalid hex string {text!r}") from exc


class Signature(bytes):
    """A 64-byte signature; ``str()`` gives its hex form."""

    def __new__(cls, data: bytes = bytes(SIGNATURE_SIZE)) -> "Signature":
        data = bytes(data)
        if len(data) != SIGNATURE_SIZE:
            raise ValueError(f"invalid signature length {len(data)}")
        return super().__new__(cls, data)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Signature.fromhex({self.hex()!r})"


class Key(bytes):
    """A 32-byte key: a scalar for private keys, a point for public ones."""

    def __new__(cls, data: bytes = bytes(KEY_SIZE)) -> "Key":
        data = bytes(data)
        if len(data) != KEY_SIZE:
            raise ValueError(f"invalid key size {len(data)}")
        return super().__new__(cls, data)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Key.fromhex({self.hex()!r})"

    def check_key(self) -> bool:
        """True if the bytes decode to a curve point."""
        try:
            Point.from_bytes(self)
        except ValueError:
            return False
        return True

    def public(self) -> "Key":
        """Public key of this private key; the zero key if it is not canonical."""
        try:
            x = scalar_from_canonical_bytes(self)
        except ValueError:
            return Key()
        return Key(base_mult(x).to_bytes())

    def to_scalar(self) -> int:
        return scalar_from_canonical_bytes(self)

    def to_point(self) -> Point:
        return Point.from_bytes(self)

    def has_value(self) -> bool:
        return any(self)

    def deterministic_hash_derive(self) -> "Key":
        """A private key derived from the SHA3-256 of this key."""
        seed = new_hash(self)
        return key_from_bytes(seed + seed)

    def sign(self, message: bytes) -> Signature:
        """Sign ``message`` with this private key."""
        message = bytes(message)
        y = scalar_from_canonical_bytes(self)
        digest = hashlib.sha512(bytes(self)).digest()
        z = scalar_from_uniform_bytes(hashlib.sha512(digest[32:] + message).digest())
        r_point = base_mult(z).to_bytes()
        pub = self.public()
        x = scalar_from_uniform_bytes(hashlib.sha512(r_point + pub + message).digest())
        s = scalar_to_bytes(x * y + z)
        return Signature(r_point + s)

    def sign_hash(self, h: bytes) -> Signature:
        return self.sign(Hash(h))

    def _verify_with_challenge(self, sig: Signature, challenge: int) -> bool:
        try:
            point = Point.from_bytes(self)
        except ValueError:
            return False
        try:
            b = scalar_from_canonical_bytes(sig[32:])
        except ValueError:
            return False
        r_point = point.neg().mul(challenge).add(base_mult(b))
        return sig[:32] == r_point.to_bytes()

    def verify(self, message: bytes, sig: bytes) -> bool:
        """Check ``sig`` over ``message`` against this public key."""
        sig = Signature(sig)
        digest = hashlib.sha512(sig[:32] + bytes(self) + bytes(message)).digest()
        return self._verify_with_challenge(sig, scalar_from_uniform_bytes(digest))

    def verify_hash(self, h: bytes, sig: bytes) -> bool:
        return self.verify(Hash(h), sig)


def _key_from_seed_bytes(seed: bytes) -> Key:
    seed = bytes(seed)
    if len(seed) < 32:
        raise ValueError(f"invalid seed size {len(seed)}")
    h = hashlib.sha512(seed[:32]).digest()
    wide = bytearray(h[:32]) + bytearray(32)
    wide[0] &= 248
    wide[31] &= 63
    wide[31] |= 64
    return Key(scalar_to_bytes(scalar_from_uniform_bytes(bytes(wide))))


def generate_key(rng: RandomSource = os.urandom) -> Key:
    """A new private key from 32 bytes drawn from ``rng(n)``."""
    seed = b""
    while len(seed) < 32:
        seed += bytes(rng(32 - len(seed)))
    return _key_from_seed_bytes(seed[:32])


def generate_ed25519_key() -> bytes:
    """A new 64-byte Ed25519 private key: seed followed by public key."""
    seed = os.urandom(32)
    return seed + _key_from_seed_bytes(seed).public()


def key_from_seed(seed: str) -> Key:
    """Private key from a hex-encoded Ed25519 seed."""
    return _key_from_seed_bytes(_unhex(seed))


def key_from_bytes(data: bytes) -> Key:
    """Private key from 64 bytes reduced modulo the group order."""
    return Key(scalar_to_bytes(scalar_from_uniform_bytes(data)))


def key_from_string(s: str) -> Key:
    """Parse a hex key: 32 raw bytes, or a 64-byte Ed25519 private key."""
    data = _unhex(s)
    if len(data) == 32:
        return Key(data)
    if len(data) == 64:
        return _key_from_seed_bytes(data[:32])
    raise ValueError(f"invalid key size {len(data)}")


def parse_key_with_pub(s: str, pub: str) -> Key:
    """Parse ``s`` as a key or seed whose public key is ``pub``."""
    for parse in (key_from_string, key_from_seed):
        try:
            key = parse(s)
        except ValueError:
            continue
        if str(key.public()) == pub:
            return key
    raise ValueError("invalid key")


def signature_from_string(s: str) -> Signature:
    return Signature(_unhex(s))


def key_mult_pub_priv(pub: bytes, priv: bytes) -> Point:
    """The point ``priv * pub``."""
    try:
        point = Point.from_bytes(pub)
    except ValueError as exc:
        raise ValueError(f"invalid public key {bytes(pub).hex()}") from exc
    try:
        x = scalar_from_canonical_bytes(priv)
    except ValueError as exc:
        raise ValueError(f"invalid private key {bytes(priv).hex()}") from exc
    return point.mul(x)


def _uvarint(n: int) -> bytes:
    out = bytearray()
    while n >= 0x80:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)


def hash_scalar(tx_ver: int, point: Point, output_index: int) -> int:
    """The scalar a shared point and output index hash to."""
    if not 0 <= output_index <= 0xFF:
        raise ValueError(f"invalid output index {output_index}")
    hash_func = new_blake3_hash if tx_ver >= _HASH_SIGNATURE_VERSION else new_hash
    first = hash_func(point.to_bytes() + _uvarint(output_index))
    s = scalar_from_uniform_bytes(first + hash_func(first))
    second = hash_func(scalar_to_bytes(s))
    return scalar_from_uniform_bytes(second + hash_func(second))


def derive_ghost_public_key(tx_ver: int, r: bytes, a: bytes, b: bytes, output_index: int) -> Key:
    """One-time output key for public view ``a`` and spend ``b`` using secret ``r``."""
    x = hash_scalar(tx_ver, key_mult_pub_priv(a, r), output_index)
    try:
        spend = Point.from_bytes(b)
    except ValueError as exc:
        raise ValueError(f"invalid public key {bytes(b).hex()}") from exc
    return Key(spend.add(base_mult(x)).to_bytes())


def derive_ghost_private_key(tx_ver: int, r: bytes, a: bytes, b: bytes, output_index: int) -> Key:
    """Private key of an output with mask ``r``, private view ``a`` and spend ``b``."""
    x = hash_scalar(tx_ver, key_mult_pub_priv(r, a), output_index)
    try:
        y = scalar_from_canonical_bytes(b)
    except ValueError as exc:
        raise ValueError(f"invalid private key {bytes(b).hex()}") from exc
    return Key(scalar_to_bytes(x + y))


def view_ghost_output_key(tx_ver: int, p: bytes, a: bytes, r: bytes, output_index: int) -> Key:
    """Recover the public spend key behind output key ``p`` using private view ``a``."""
    x = hash_scalar(tx_ver, key_mult_pub_priv(r, a), output_index)
    try:
        output = Point.from_bytes(p)
    except ValueError as exc:
        raise ValueError(f"invalid public key {bytes(p).hex()}") from exc
    return Key(output.sub(base_mult(x)).to_bytes())