"""Building blocks of a kernel transaction: inputs, outputs and signatures."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from .hashing import Hash, hash_from_string
from .keys import Key, Signature, key_from_string, signature_from_string
from .number import ZERO, Integer, integer_from_string
from .script import Script

TX_VERSION_COMMON_ENCODING = 0x02
TX_VERSION_BLAKE3_HASH = 0x03
TX_VERSION_REFERENCES = 0x04
TX_VERSION_HASH_SIGNATURE = 0x05

TX_VERSION_LEGACY = TX_VERSION_REFERENCES
TX_VERSION = TX_VERSION_HASH_SIGNATURE

TRANSACTION_TYPE_SCRIPT = 0x00
TRANSACTION_TYPE_MINT = 0x01
TRANSACTION_TYPE_DEPOSIT = 0x02
TRANSACTION_TYPE_WITHDRAWAL_SUBMIT = 0x03
TRANSACTION_TYPE_WITHDRAWAL_FUEL = 0x04
TRANSACTION_TYPE_WITHDRAWAL_CLAIM = 0x05
TRANSACTION_TYPE_NODE_PLEDGE = 0x06
TRANSACTION_TYPE_NODE_ACCEPT = 0x07
TRANSACTION_TYPE_NODE_RESIGN = 0x08
TRANSACTION_TYPE_NODE_REMOVE = 0x09
TRANSACTION_TYPE_DOMAIN_ACCEPT = 0x10
TRANSACTION_TYPE_DOMAIN_REMOVE = 0x11
TRANSACTION_TYPE_NODE_CANCEL = 0x12
TRANSACTION_TYPE_CUSTODIAN_UPDATE_NODES = 0x13
TRANSACTION_TYPE_CUSTODIAN_SLASH_NODES = 0x14
TRANSACTION_TYPE_UNKNOWN = 0xFF


def _amount(data: dict[str, Any], name: str) -> Integer:
    value = data.get(name)
    return ZERO if value is None else integer_from_string(value)


def _hash(value: str | None) -> Hash:
    return Hash() if value is None else hash_from_string(value)


@dataclass
class MintData:
    group: str = ""
    batch: int = 0
    amount: Integer = ZERO

    def to_json(self) -> dict[str, Any]:
        return {"group": self.group, "batch": self.batch, "amount": str(self.amount)}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "MintData":
        return cls(
            group=data.get("group", ""),
            batch=int(data.get("batch", 0)),
            amount=_amount(data, "amount"),
        )


@dataclass
class DepositData:
    chain: Hash = field(default_factory=Hash)
    asset_key: str = ""
    transaction: str = ""
    index: int = 0
    amount: Integer = ZERO

    def to_json(self) -> dict[str, Any]:
        return {
            "chain": str(self.chain),
            "asset": self.asset_key,
            "transaction": self.transaction,
            "index": self.index,
            "amount": str(self.amount),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "DepositData":
        return cls(
            chain=_hash(data.get("chain")),
            asset_key=data.get("asset", ""),
            transaction=data.get("transaction", ""),
            index=int(data.get("index", 0)),
            amount=_amount(data, "amount"),
        )


@dataclass
class WithdrawalData:
    """Withdrawal target; ``chain`` and ``asset_key`` are only used before version 5."""

    address: str = ""
    tag: str = ""
    chain: Hash = field(default_factory=Hash)
    asset_key: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "tag": self.tag,
            "chain": str(self.chain),
            "asset": self.asset_key,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "WithdrawalData":
        return cls(
            address=data.get("address", ""),
            tag=data.get("tag", ""),
            chain=_hash(data.get("chain")),
            asset_key=data.get("asset", ""),
        )


@dataclass
class Input:
    hash: Hash | None = None
    index: int = 0
    genesis: bytes = b""
    deposit: DepositData | None = None
    mint: MintData | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.hash is not None:
            data["hash"] = str(self.hash)
        if self.index:
            data["index"] = self.index
        if self.genesis:
            data["genesis"] = base64.b64encode(self.genesis).decode("ascii")
        if self.deposit is not None:
            data["deposit"] = self.deposit.to_json()
        if self.mint is not None:
            data["mint"] = self.mint.to_json()
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Input":
        raw_hash = data.get("hash")
        genesis = data.get("genesis") or ""
        try:
            genesis_bytes = base64.b64decode(genesis, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid genesis {genesis!r}") from exc
        deposit = data.get("deposit")
        mint = data.get("mint")
        return cls(
            hash=None if raw_hash is None else hash_from_string(raw_hash),
            index=int(data.get("index", 0)),
            genesis=genesis_bytes,
            deposit=None if deposit is None else DepositData.from_json(deposit),
            mint=None if mint is None else MintData.from_json(mint),
        )


@dataclass
class Output:
    type: int = 0
    amount: Integer = ZERO
    keys: list[Key] = field(default_factory=list)
    withdrawal: WithdrawalData | None = None
    script: Script = field(default_factory=Script)
    mask: Key = field(default_factory=Key)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "amount": str(self.amount)}
        if self.keys:
            data["keys"] = [str(k) for k in self.keys]
        if self.withdrawal is not None:
            data["withdrawal"] = self.withdrawal.to_json()
        data["script"] = str(Script(self.script))
        data["mask"] = str(self.mask)
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Output":
        withdrawal = data.get("withdrawal")
        mask = data.get("mask")
        try:
            script = Script(binascii.unhexlify(data.get("script") or ""))
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid script {data.get('script')!r}") from exc
        return cls(
            type=int(data.get("type", 0)),
            amount=_amount(data, "amount"),
            keys=[key_from_string(k) for k in data.get("keys") or []],
            withdrawal=None if withdrawal is None else WithdrawalData.from_json(withdrawal),
            script=script,
            mask=Key() if mask is None else key_from_string(mask),
        )


@dataclass
class AggregatedSignature:
    signers: list[int] = field(default_factory=list)
    signature: Signature | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "signers": list(self.signers),
            "signature": None if self.signature is None else str(self.signature),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "AggregatedSignature":
        sig = data.get("signature")
        return cls(
            signers=[int(s) for s in data.get("signers") or []],
            signature=None if sig is None else signature_from_string(sig),
        )