"""Kernel transactions: binary and msgpack forms, hashes and extra size limits."""

from __future__ import annotations

import binascii
import dataclasses
from dataclasses import dataclass, field
from typing import Any

import msgpack

from .encoding import (
    AGGREGATED_SIGNATURE_ORDINARY_MASK,
    AGGREGATED_SIGNATURE_PREFIX,
    AGGREGATED_SIGNATURE_SPARSE_MASK,
    EXTRA_SIZE_STORAGE_CAPACITY,
    MAGIC,
    MAXIMUM_ENCODING_INT,
    MINIMUM_ENCODING_VERSION,
    NULL,
    SUPPORTED_VERSIONS,
    Encoder,
)
from .hashing import Hash, hash_from_string, new_blake3_hash, new_hash
from .keys import Key, Signature, signature_from_string
from .number import ZERO, Integer, integer_from_string
from .script import OUTPUT_TYPE_SCRIPT, Script, extra_to_string, parse_extra
from .types import (
    TX_VERSION,
    TX_VERSION_BLAKE3_HASH,
    TX_VERSION_COMMON_ENCODING,
    TX_VERSION_HASH_SIGNATURE,
    TX_VERSION_REFERENCES,
    AggregatedSignature,
    DepositData,
    Input,
    MintData,
    Output,
    WithdrawalData,
)

EXTRA_SIZE_GENERAL_LIMIT = 256
EXTRA_SIZE_STORAGE_STEP = 1024
EXTRA_STORAGE_PRICE_STEP = "0.001"
SLICE_COUNT_LIMIT = 256
REFERENCES_COUNT_LIMIT = 2

XIN_ASSET_ID = new_hash(b"c94ac88f-4671-3976-b60a-09064f1811e8")

_INTEGER_EXT = 0


class DecodeError(ValueError):
    """Raised when bytes do not hold a well-formed transaction."""


def check_tx_version(data: bytes) -> int:
    """The common-encoding version ``data`` starts with, or 0."""
    data = bytes(data)
    for version in SUPPORTED_VERSIONS:
        if data.startswith(MAGIC + bytes([0x00, version])):
            return version
    return 0


class Decoder:
    """Reads the binary transaction encoding from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def decode_transaction(self) -> "Transaction":
        header = self.read(4)
        version = check_tx_version(header)
        if version < TX_VERSION_COMMON_ENCODING:
            raise DecodeError(f"invalid version {header.hex()}")

        tx = Transaction(version=version, asset=Hash(self.read(32)))
        tx.inputs = [self.read_input() for _ in range(self.read_int())]
        tx.outputs = [self.read_output(version) for _ in range(self.read_int())]

        if version >= TX_VERSION_REFERENCES:
            tx.references = [Hash(self.read(32)) for _ in range(self.read_int())]
            size = self.read_uint32()
            tx.extra = self.read(size) if size > 0 else b""
        else:
            tx.extra = self.read_bytes()

        count = self.read_int()
        if count == MAXIMUM_ENCODING_INT:
            prefix = self.read_int()
            if prefix != AGGREGATED_SIGNATURE_PREFIX:
                raise DecodeError(f"invalid prefix {prefix}")
            tx.aggregated_signature = self.read_aggregated_signature()
        else:
            tx.signatures = [self.read_signatures() for _ in range(count)]

        if self._pos < len(self._data):
            raise DecodeError(f"unexpected ending {self._data[self._pos]}")
        return tx

    def read_input(self) -> Input:
        inp = Input(hash=Hash(self.read(32)))
        inp.index = self.read_int() & 0xFF
        inp.genesis = self.read_bytes()

        if self.read_magic():
            deposit = DepositData(chain=Hash(self.read(32)))
            deposit.asset_key = _text(self.read_bytes())
            deposit.transaction = _text(self.read_bytes())
            deposit.index = self.read_uint64()
            deposit.amount = self.read_integer()
            inp.deposit = deposit

        if self.read_magic():
            mint = MintData(group=_text(self.read_bytes()))
            mint.batch = self.read_uint64()
            mint.amount = self.read_integer()
            inp.mint = mint

        return inp

    def read_output(self, version: int) -> Output:
        kind = self.read(2)
        if kind[0] != 0:
            raise DecodeError(f"invalid output type {list(kind)}")
        out = Output(type=kind[1])
        out.amount = self.read_integer()
        out.keys = [Key(self.read(32)) for _ in range(self.read_int())]
        out.mask = Key(self.read(32))
        out.script = Script(self.read_bytes())

        if self.read_magic():
            withdrawal = WithdrawalData()
            if version < TX_VERSION_HASH_SIGNATURE:
                withdrawal.chain = Hash(self.read(32))
                withdrawal.asset_key = _text(self.read_bytes())
            withdrawal.address = _text(self.read_bytes())
            withdrawal.tag = _text(self.read_bytes())
            out.withdrawal = withdrawal

        return out

    def read_signatures(self) -> dict[int, Signature]:
        count = self.read_int()
        sigs: dict[int, Signature] = {}
        for _ in range(count):
            index = self.read_uint16()
            sigs[index] = Signature(self.read(64))
        if len(sigs) != count:
            raise DecodeError(f"signatures count {count} {sorted(sigs)}")
        return sigs

    def read(self, n: int) -> bytes:
        """Exactly ``n`` bytes; reading at the end of data is an error."""
        if self._pos >= len(self._data):
            raise DecodeError("unexpected end of data")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += len(chunk)
        if len(chunk) != n:
            raise DecodeError(f"data short {len(chunk)} {n}")
        return chunk

    def read_int(self) -> int:
        return self.read_uint16()

    def read_uint16(self) -> int:
        return int.from_bytes(self.read(2), "big")

    def read_uint32(self) -> int:
        return int.from_bytes(self.read(4), "big")

    def read_uint64(self) -> int:
        return int.from_bytes(self.read(8), "big")

    def read_integer(self) -> Integer:
        size = self.read_int()
        return Integer.from_bytes(self.read(size))

    def read_byte(self) -> int:
        return self.read(1)[0]

    def read_bytes(self) -> bytes:
        size = self.read_int()
        if size == 0:
            return b""
        return self.read(size)

    def read_magic(self) -> bool:
        marker = self.read(2)
        if marker == MAGIC:
            return True
        if marker == NULL:
            return False
        raise DecodeError(f"malformed {list(marker)}")

    def read_aggregated_signature(self) -> AggregatedSignature:
        sig = AggregatedSignature(signature=Signature(self.read(64)))
        kind = self.read_byte()
        if kind == AGGREGATED_SIGNATURE_SPARSE_MASK:
            sig.signers = [self.read_int() for _ in range(self.read_int())]
        elif kind == AGGREGATED_SIGNATURE_ORDINARY_MASK:
            masks = self.read_bytes()
            sig.signers = [
                i * 8 + j
                for i, byte in enumerate(masks)
                for j in range(8)
                if byte >> j & 1
            ]
        else:
            raise DecodeError(f"invalid mask type {kind}")
        return sig


def new_minimum_decoder(data: bytes) -> Decoder:
    """A decoder for data that starts with the minimum encoding version header."""
    data = bytes(data)
    if len(data) < 4 or data[:4] != MAGIC + bytes([0x00, MINIMUM_ENCODING_VERSION]):
        raise DecodeError(f"invalid encoding version {data.hex()}")
    return Decoder(data[4:])


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


@dataclass
class Transaction:
    version: int = TX_VERSION
    asset: Hash = field(default_factory=Hash)
    inputs: list[Input] = field(default_factory=list)
    outputs: list[Output] = field(default_factory=list)
    references: list[Hash] = field(default_factory=list)
    extra: bytes = b""
    hash: Hash | None = None
    snapshot: Hash | None = None
    signatures: list[dict[int, Signature]] = field(default_factory=list)
    aggregated_signature: AggregatedSignature | None = None

    @classmethod
    def from_raw(cls, raw: str) -> "Transaction":
        """Decode a hex-encoded transaction."""
        try:
            data = binascii.unhexlify(raw)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise DecodeError(f"invalid hex transaction: {exc}") from exc
        return cls.from_data(data)

    @classmethod
    def from_data(cls, data: bytes) -> "Transaction":
        """Decode binary data in either the common or the msgpack encoding."""
        data = bytes(data)
        if check_tx_version(data) < TX_VERSION_COMMON_ENCODING:
            return _v1_from_data(data)
        return Decoder(data).decode_transaction()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Transaction":
        """Build from the JSON object a kernel node returns."""
        def optional_hash(value: str | None) -> Hash | None:
            return None if value is None else hash_from_string(value)

        asset = data.get("asset")
        extra = data.get("extra")
        aggregated = data.get("aggregated_signature")
        references = data.get("References") or data.get("references") or []
        return cls(
            version=int(data.get("version", 0)),
            asset=Hash() if asset is None else hash_from_string(asset),
            inputs=[Input.from_json(i) for i in data.get("inputs") or []],
            outputs=[Output.from_json(o) for o in data.get("outputs") or []],
            references=[hash_from_string(r) for r in references],
            extra=parse_extra(extra) if extra else b"",
            hash=optional_hash(data.get("hash")),
            snapshot=optional_hash(data.get("snapshot")),
            signatures=[
                {int(k): signature_from_string(v) for k, v in (group or {}).items() if v is not None}
                for group in data.get("signatures") or []
            ],
            aggregated_signature=(
                None if aggregated is None else AggregatedSignature.from_json(aggregated)
            ),
        )

    def to_json(self) -> dict[str, Any]:
        """The JSON object form, as a kernel node writes it."""
        data: dict[str, Any] = {}
        if self.hash is not None:
            data["hash"] = str(self.hash)
        if self.snapshot is not None:
            data["snapshot"] = str(self.snapshot)
        if self.signatures:
            data["signatures"] = [
                {str(k): str(Signature(v)) for k, v in sorted(group.items())}
                for group in self.signatures
            ]
        if self.aggregated_signature is not None:
            data["aggregated_signature"] = self.aggregated_signature.to_json()
        data["version"] = self.version
        data["asset"] = str(Hash(self.asset))
        data["inputs"] = [i.to_json() for i in self.inputs]
        data["outputs"] = [o.to_json() for o in self.outputs]
        data["References"] = [str(Hash(r)) for r in self.references] or None
        if self.extra:
            data["extra"] = extra_to_string(self.extra)
        return data

    def dump_data(self) -> bytes:
        """Binary form: msgpack for versions 0 and 1, the common encoding otherwise."""
        if self.version in (0, 1):
            return _v1_dump(self)
        if self.version in SUPPORTED_VERSIONS:
            return Encoder().encode_transaction(self)
        raise ValueError("unknown tx version")

    def dump(self) -> str:
        return self.dump_data().hex()

    def dump_payload(self) -> bytes:
        """Binary form without any signatures."""
        unsigned = dataclasses.replace(self, signatures=[], aggregated_signature=None)
        return unsigned.dump_data()

    def transaction_hash(self) -> Hash:
        """Hash of the unsigned payload, computed once and kept in ``hash``."""
        if self.hash is None:
            raw = self.dump_payload()
            if self.version >= TX_VERSION_BLAKE3_HASH:
                self.hash = new_blake3_hash(raw)
            else:
                self.hash = new_hash(raw)
        return self.hash

    def extra_limit(self) -> int:
        """Largest extra allowed; storage transactions may buy more space."""
        if self.version < TX_VERSION_REFERENCES:
            return EXTRA_SIZE_GENERAL_LIMIT
        if bytes(self.asset) != XIN_ASSET_ID:
            return EXTRA_SIZE_GENERAL_LIMIT
        if not self.outputs:
            return EXTRA_SIZE_GENERAL_LIMIT
        out = self.outputs[0]
        if len(out.keys) != 1:
            return EXTRA_SIZE_GENERAL_LIMIT
        if out.type != OUTPUT_TYPE_SCRIPT:
            return EXTRA_SIZE_GENERAL_LIMIT
        if str(Script(out.script)) != "fffe40":
            return EXTRA_SIZE_GENERAL_LIMIT
        step = integer_from_string(EXTRA_STORAGE_PRICE_STEP)
        if out.amount.value < step.value:
            return EXTRA_SIZE_GENERAL_LIMIT
        limit = out.amount.count(step) * EXTRA_SIZE_STORAGE_STEP
        return min(limit, EXTRA_SIZE_STORAGE_CAPACITY)


def _amount_ext(amount: Integer) -> msgpack.ExtType:
    return msgpack.ExtType(_INTEGER_EXT, amount.to_bytes())


def _v1_input(inp: Input) -> dict[str, Any]:
    deposit = inp.deposit
    mint = inp.mint
    return {
        "Hash": None if inp.hash is None else bytes(inp.hash),
        "Index": inp.index,
        "Genesis": bytes(inp.genesis) if inp.genesis else None,
        "Deposit": None if deposit is None else {
            "Chain": bytes(deposit.chain),
            "AssetKey": deposit.asset_key,
            "Transaction": deposit.transaction,
            "Index": deposit.index,
            "Amount": _amount_ext(deposit.amount),
        },
        "Mint": None if mint is None else {
            "Group": mint.group,
            "Batch": mint.batch,
            "Amount": _amount_ext(mint.amount),
        },
    }


def _v1_output(out: Output) -> dict[str, Any]:
    data: dict[str, Any] = {
        "Type": out.type,
        "Amount": _amount_ext(out.amount),
        "Keys": [bytes(k) for k in out.keys] or None,
    }
    if out.withdrawal is not None:
        w = out.withdrawal
        data["Withdrawal"] = {
            "Address": w.address,
            "Tag": w.tag,
            "Chain": bytes(w.chain),
            "AssetKey": w.asset_key,
        }
    data["Script"] = bytes(out.script)
    data["Mask"] = bytes(out.mask)
    return data


def _v1_dump(tx: Transaction) -> bytes:
    body: dict[str, Any] = {
        "Version": tx.version,
        "Asset": bytes(tx.asset),
        "Inputs": [_v1_input(i) for i in tx.inputs] or None,
        "Outputs": [_v1_output(o) for o in tx.outputs] or None,
        "Extra": bytes(tx.extra),
    }
    if tx.signatures:
        groups = []
        for sigs in tx.signatures:
            try:
                groups.append([bytes(sigs[k]) for k in range(len(sigs))])
            except KeyError as exc:
                raise ValueError(f"signature index out of range {sorted(sigs)}") from exc
        body["Signatures"] = groups
    return msgpack.packb(body, use_bin_type=True)


def _ext_hook(code: int, data: bytes) -> Any:
    if code == _INTEGER_EXT:
        return Integer.from_bytes(data)
    return msgpack.ExtType(code, data)


def _v1_amount(value: Any) -> Integer:
    if value is None:
        return ZERO
    if not isinstance(value, Integer):
        raise DecodeError(f"invalid amount {value!r}")
    return value


def _v1_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, bytes):
        raise DecodeError(f"invalid bytes {value!r}")
    return value


def _v1_input_from(obj: dict[str, Any]) -> Input:
    raw_hash = obj.get("Hash")
    deposit = obj.get("Deposit")
    mint = obj.get("Mint")
    return Input(
        hash=None if raw_hash is None else Hash(raw_hash),
        index=int(obj.get("Index") or 0),
        genesis=_v1_bytes(obj.get("Genesis")),
        deposit=None if deposit is None else DepositData(
            chain=Hash(_v1_bytes(deposit.get("Chain")) or bytes(32)),
            asset_key=deposit.get("AssetKey") or "",
            transaction=deposit.get("Transaction") or "",
            index=int(deposit.get("Index") or 0),
            amount=_v1_amount(deposit.get("Amount")),
        ),
        mint=None if mint is None else MintData(
            group=mint.get("Group") or "",
            batch=int(mint.get("Batch") or 0),
            amount=_v1_amount(mint.get("Amount")),
        ),
    )


def _v1_output_from(obj: dict[str, Any]) -> Output:
    withdrawal = obj.get("Withdrawal")
    mask = _v1_bytes(obj.get("Mask"))
    return Output(
        type=int(obj.get("Type") or 0),
        amount=_v1_amount(obj.get("Amount")),
        keys=[Key(k) for k in obj.get("Keys") or []],
        withdrawal=None if withdrawal is None else WithdrawalData(
            address=withdrawal.get("Address") or "",
            tag=withdrawal.get("Tag") or "",
            chain=Hash(_v1_bytes(withdrawal.get("Chain")) or bytes(32)),
            asset_key=withdrawal.get("AssetKey") or "",
        ),
        script=Script(_v1_bytes(obj.get("Script"))),
        mask=Key(mask) if mask else Key(),
    )


def _v1_from_data(data: bytes) -> Transaction:
    try:
        obj = msgpack.unpackb(data, raw=False, strict_map_key=False, ext_hook=_ext_hook)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as exc:
        raise DecodeError(f"invalid msgpack transaction: {exc}") from exc
    if not isinstance(obj, dict):
        raise DecodeError("invalid msgpack transaction")
    try:
        signatures = [
            {i: Signature(sig) for i, sig in enumerate(group or []) if sig is not None}
            for group in obj.get("Signatures") or []
        ]
        asset = _v1_bytes(obj.get("Asset"))
        return Transaction(
            version=int(obj.get("Version") or 0),
            asset=Hash(asset) if asset else Hash(),
            inputs=[_v1_input_from(i) for i in obj.get("Inputs") or []],
            outputs=[_v1_output_from(o) for o in obj.get("Outputs") or []],
            extra=_v1_bytes(obj.get("Extra")),
            signatures=signatures,
        )
    except DecodeError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DecodeError(f"invalid msgpack transaction: {exc}") from exc