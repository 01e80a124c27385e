"""NFO memos that mint collectibles."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

PREFIX = "NFO"
VERSION = 0x00

MINT_ASSET_ID = "c94ac88f-4671-3976-b60a-09064f1811e8"
MINT_MINIMUM_COST = Decimal("0.001")

GROUP_MEMBERS = [
    "4b188942-9fb0-4b99-b4be-e741a06d1ebf",
    "dd655520-c919-4349-822f-af92fabdbdf4",
    "047061e6-496d-4c35-b06b-b0424a8a400d",
    "acf65344-c778-41ee-bacb-eb546bacfb9f",
    "a51006d0-146b-4b32-a2ce-7defbf0d7735",
    "cf4abd9c-2cfa-4b5a-b1bd-e2b61a83fabd",
    "50115496-7247-4e2c-857b-ec8680756bee",
]
GROUP_THRESHOLD = 5

NIL_UUID = uuid.UUID(int=0)
DEFAULT_COLLECTION_ID = str(NIL_UUID)
DEFAULT_CHAIN = uuid.UUID("43d61dcd-e413-450d-80b8-101d5e903357")
DEFAULT_CLASS = bytes.fromhex("3c8c161a18ae2c8b14fda1216fff7da88c419b5d")


def _uuid_or_nil(text: str) -> uuid.UUID:
    try:
        return uuid.UUID(text)
    except (ValueError, TypeError, AttributeError):
        return NIL_UUID


def _token_bytes(token: int) -> bytes:
    n = abs(token)
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


def _token_bytes_strip(data: bytes) -> bytes:
    return _token_bytes(int.from_bytes(data, "big")) or b"\x00"


@dataclass
class NFOMemo:
    prefix: str = PREFIX
    version: int = VERSION
    mask: int = 0
    chain: uuid.UUID = NIL_UUID
    class_: bytes = b""
    collection: uuid.UUID = NIL_UUID
    token: bytes = b""
    extra: bytes = field(default=b"")

    def mark(self, indexes: Iterable[int]) -> None:
        """Toggle the mask bits at ``indexes``."""
        for i in indexes:
            if not 0 <= i < 64:
                raise ValueError(f"invalid NFO memo index {i}")
            self.mask ^= 1 << i

    def indexes(self) -> list[int]:
        return [i for i in range(64) if self.mask >> i & 1]

    def will_mint(self) -> bool:
        return self.mask != 0

    def encode(self) -> bytes:
        out = bytearray(self.prefix.encode())
        out.append(self.version)
        if self.mask != 0:
            out.append(1)
            out += self.mask.to_bytes(8, "big")
            out += self.chain.bytes
            _write_slice(out, self.class_)
            _write_slice(out, self.collection.bytes)
            _write_slice(out, self.token)
            if bytes(self.token) != _token_bytes_strip(self.token):
                raise ValueError(f"invalid token format {bytes(self.token).hex()}")
        else:
            out.append(0)
        _write_slice(out, self.extra)
        return bytes(out)


def _write_slice(out: bytearray, data: bytes) -> None:
    data = bytes(data or b"")
    if len(data) >= 128:
        raise ValueError(f"slice too long {len(data)}")
    out.append(len(data))
    out += data


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self, n: int) -> bytes:
        if self._pos >= len(self._data):
            raise ValueError("unexpected end of data")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += len(chunk)
        if len(chunk) != n:
            raise ValueError(f"data short {len(chunk)} {n}")
        return chunk

    def read_byte(self) -> int:
        return self.read(1)[0]

    def read_uint64(self) -> int:
        return int.from_bytes(self.read(8), "big")

    def read_uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.read(16))

    def read_bytes(self) -> bytes:
        n = self.read_byte()
        return self.read(n) if n else b""


def build_mint_nfo(collection: str, token: int, meta_hash: bytes) -> bytes:
    """Encoded memo minting ``token`` of ``collection`` with content hash ``meta_hash``."""
    memo = NFOMemo(
        chain=DEFAULT_CHAIN,
        class_=DEFAULT_CLASS,
        collection=_uuid_or_nil(collection),
        token=_token_bytes(token),
        extra=bytes(meta_hash),
    )
    memo.mark([0])
    return memo.encode()


def build_token_id(collection: str, token: int) -> bytes:
    """Chain, class, collection and token bytes joined together."""
    return (
        DEFAULT_CHAIN.bytes
        + DEFAULT_CLASS
        + _uuid_or_nil(collection).bytes
        + _token_bytes(token)
    )


def decode_nfo_memo(data: bytes) -> NFOMemo:
    """Parse an encoded memo; raises ValueError on any format problem."""
    data = bytes(data)
    if len(data) < 4:
        raise ValueError(f"NFO length {len(data)}")
    if data[:3] != PREFIX.encode():
        raise ValueError(f"NFO prefix {list(data[:3])}")
    if data[3] != VERSION:
        raise ValueError(f"NFO version {data[3]}")

    reader = _Reader(data[4:])
    memo = NFOMemo()
    hint = reader.read_byte()
    if hint == 1:
        memo.mask = reader.read_uint64()
        if memo.mask != 1:
            raise ValueError(f"invalid mask {memo.indexes()}")
        memo.chain = reader.read_uuid()
        if memo.chain != DEFAULT_CHAIN:
            raise ValueError(f"invalid chain {memo.chain}")
        memo.class_ = reader.read_bytes()
        if memo.class_ != DEFAULT_CLASS:
            raise ValueError(f"invalid class {memo.class_.hex()}")
        collection = reader.read_bytes()
        if len(collection) != 16:
            raise ValueError(f"invalid collection length {len(collection)}")
        memo.collection = uuid.UUID(bytes=collection)
        memo.token = reader.read_bytes()
        if memo.token != _token_bytes_strip(memo.token):
            raise ValueError(f"invalid token format {memo.token.hex()}")
    memo.extra = reader.read_bytes()
    return memo