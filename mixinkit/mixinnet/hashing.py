"""Transaction hashes: SHA3-256, BLAKE3 and the 32-byte Hash value."""

from __future__ import annotations

import binascii
import hashlib
import struct
from typing import Iterable

HASH_SIZE = 32

_IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)
_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)
_MASK = 0xFFFFFFFF
_BLOCK_LEN = 64
_CHUNK_LEN = 1024
_CHUNK_START = 1
_CHUNK_END = 2
_PARENT = 4
_ROOT = 8


class Hash(bytes):
    """A 32-byte hash; ``str()`` gives its lower-case hex form."""

    def __new__(cls, data: bytes = bytes(HASH_SIZE)) -> "Hash":
        data = bytes(data)
        if len(data) != HASH_SIZE:
            raise ValueError(f"invalid hash length {len(data)}")
        return super().__new__(cls, data)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Hash.fromhex({self.hex()!r})"

    def has_value(self) -> bool:
        """True unless every byte is zero."""
        return any(self)


def new_hash(data: bytes) -> Hash:
    """SHA3-256 of ``data``."""
    return Hash(hashlib.sha3_256(bytes(data)).digest())


def new_blake3_hash(data: bytes) -> Hash:
    """BLAKE3 (32-byte output) of ``data``."""
    return Hash(blake3_256(data))


def hash_from_string(src: str) -> Hash:
    """Parse a 64-character hex string into a Hash."""
    try:
        data = binascii.unhexlify(src)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise ValueError(f"invalid hash string {src!r}") from exc
    return Hash(data)


def hash_members(ids: Iterable[str]) -> str:
    """Hex SHA3-256 of the sorted, concatenated member ids."""
    return str(new_hash("".join(sorted(ids)).encode()))


def _g(s: list[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    s[a] = (s[a] + s[b] + mx) & _MASK
    x = s[d] ^ s[a]
    s[d] = ((x >> 16) | (x << 16)) & _MASK
    s[c] = (s[c] + s[d]) & _MASK
    x = s[b] ^ s[c]
    s[b] = ((x >> 12) | (x << 20)) & _MASK
    s[a] = (s[a] + s[b] + my) & _MASK
    x = s[d] ^ s[a]
    s[d] = ((x >> 8) | (x << 24)) & _MASK
    s[c] = (s[c] + s[d]) & _MASK
    x = s[b] ^ s[c]
    s[b] = ((x >> 7) | (x << 25)) & _MASK


def _compress(cv, words, counter: int, block_len: int, flags: int) -> list[int]:
    s = [*cv, *_IV[:4], counter & _MASK, (counter >> 32) & _MASK, block_len, flags]
    m = list(words)
    for _ in range(7):
        _g(s, 0, 4, 8, 12, m[0], m[1])
        _g(s, 1, 5, 9, 13, m[2], m[3])
        _g(s, 2, 6, 10, 14, m[4], m[5])
        _g(s, 3, 7, 11, 15, m[6], m[7])
        _g(s, 0, 5, 10, 15, m[8], m[9])
        _g(s, 1, 6, 11, 12, m[10], m[11])
        _g(s, 2, 7, 8, 13, m[12], m[13])
        _g(s, 3, 4, 9, 14, m[14], m[15])
        m = [m[i] for i in _PERMUTATION]
    low = [x ^ y for x, y in zip(s[:8], s[8:])]
    high = [x ^ y for x, y in zip(s[8:], cv)]
    return low + high


def _words(block: bytes) -> tuple[int, ...]:
    return struct.unpack("<16I", block.ljust(_BLOCK_LEN, b"\0"))


def _chunk_output(chunk: bytes, counter: int):
    blocks = [chunk[i:i + _BLOCK_LEN] for i in range(0, len(chunk), _BLOCK_LEN)] or [b""]
    cv = list(_IV)
    flags = _CHUNK_START
    for block in blocks[:-1]:
        cv = _compress(cv, _words(block), counter, _BLOCK_LEN, flags)[:8]
        flags = 0
    last = blocks[-1]
    return cv, _words(last), counter, len(last), flags | _CHUNK_END


def _chaining_value(output) -> list[int]:
    return _compress(*output)[:8]


def _parent_output(left: list[int], right: list[int]):
    return list(_IV), (*left, *right), 0, _BLOCK_LEN, _PARENT


def blake3_256(data: bytes) -> bytes:
    """Raw 32-byte BLAKE3 digest of ``data`` in the default hashing mode."""
    data = bytes(data)
    chunks = [data[i:i + _CHUNK_LEN] for i in range(0, len(data), _CHUNK_LEN)] or [b""]
    stack: list[list[int]] = []
    for counter, chunk in enumerate(chunks[:-1]):
        cv = _chaining_value(_chunk_output(chunk, counter))
        total = counter + 1
        while total & 1 == 0:
            cv = _chaining_value(_parent_output(stack.pop(), cv))
            total >>= 1
        stack.append(cv)

    output = _chunk_output(chunks[-1], len(chunks) - 1)
    while stack:
        output = _parent_output(stack.pop(), _chaining_value(output))

    cv, words, _, block_len, flags = output
    root = _compress(cv, words, 0, block_len, flags | _ROOT)
    return struct.pack("<8I", *root[:8])