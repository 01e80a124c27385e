"""Main network addresses built from public spend and view keys."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from .hashing import Hash, new_hash
from .keys import Key, RandomSource, derive_ghost_public_key, generate_key
from .number import integer_from_decimal
from .script import new_threshold_script
from .types import Output

MAIN_NETWORK_ID = "XIN"

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {c: i for i, c in enumerate(_ALPHABET)}


def b58encode(data: bytes) -> str:
    """Base58 with the Bitcoin alphabet."""
    data = bytes(data)
    n = int.from_bytes(data, "big")
    digits = []
    while n:
        n, rem = divmod(n, 58)
        digits.append(_ALPHABET[rem])
    pad = len(data) - len(data.lstrip(b"\0"))
    return "1" * pad + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode Bitcoin-alphabet base58; raises ValueError on a bad character."""
    n = 0
    for c in text:
        try:
            n = n * 58 + _INDEX[c]
        except KeyError:
            raise ValueError(f"invalid base58 character {c!r}") from None
    body = n.to_bytes((n.bit_length() + 7) // 8, "big")
    pad = len(text) - len(text.lstrip("1"))
    return b"\0" * pad + body


@dataclass
class Address:
    private_spend_key: Key = field(default_factory=Key)
    private_view_key: Key = field(default_factory=Key)
    public_spend_key: Key = field(default_factory=Key)
    public_view_key: Key = field(default_factory=Key)

    def _public_bytes(self) -> bytes:
        return bytes(self.public_spend_key) + bytes(self.public_view_key)

    def __str__(self) -> str:
        data = self._public_bytes()
        checksum = new_hash(MAIN_NETWORK_ID.encode() + data)
        return MAIN_NETWORK_ID + b58encode(data + checksum[:4])

    def hash(self) -> Hash:
        return new_hash(self._public_bytes())

    def create_utxo(
        self, tx_ver: int, output_index: int, amount: Union[Decimal, int, str]
    ) -> Output:
        """A single-key output paying ``amount`` to this address."""
        r = generate_key()
        ghost = derive_ghost_public_key(
            tx_ver, r, self.public_view_key, self.public_spend_key, output_index
        )
        return Output(
            type=0,
            script=new_threshold_script(1),
            amount=integer_from_decimal(amount),
            mask=r.public(),
            keys=[ghost],
        )


def generate_address(rng: RandomSource = os.urandom, public: bool = False) -> Address:
    """A new address; a public one derives its view key from the spend key."""
    spend = generate_key(rng)
    addr = Address(private_spend_key=spend, public_spend_key=spend.public())
    if public:
        addr.private_view_key = addr.public_spend_key.deterministic_hash_derive()
    else:
        addr.private_view_key = generate_key(rng)
    addr.public_view_key = addr.private_view_key.public()
    return addr


def address_from_string(s: str) -> Address:
    """Parse an address string; only the public keys are filled in."""
    if not s.startswith(MAIN_NETWORK_ID):
        raise ValueError("invalid address network")
    try:
        data = b58decode(s[len(MAIN_NETWORK_ID):])
    except ValueError:
        data = b""
    if len(data) != 68:
        raise ValueError("invalid address format")
    checksum = new_hash(MAIN_NETWORK_ID.encode() + data[:64])
    if checksum[:4] != data[64:]:
        raise ValueError("invalid address checksum")
    return Address(public_spend_key=Key(data[:32]), public_view_key=Key(data[32:64]))


def address_from_public_spend(public_spend: bytes) -> Address:
    """The public address whose view key is derived from ``public_spend``."""
    spend = Key(public_spend)
    view = spend.deterministic_hash_derive()
    return Address(public_spend_key=spend, private_view_key=view, public_view_key=view.public())