"""Binary encoding of kernel transactions (common encoding, versions 2 to 5)."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

from .number import Integer
from .types import (
    TX_VERSION_BLAKE3_HASH,
    TX_VERSION_COMMON_ENCODING,
    TX_VERSION_HASH_SIGNATURE,
    TX_VERSION_REFERENCES,
    AggregatedSignature,
    Input,
    Output,
)

MINIMUM_ENCODING_VERSION = 0x01
MAXIMUM_ENCODING_INT = 0xFFFF

AGGREGATED_SIGNATURE_PREFIX = 0xFF01
AGGREGATED_SIGNATURE_SPARSE_MASK = 0x01
AGGREGATED_SIGNATURE_ORDINARY_MASK = 0x00

EXTRA_SIZE_STORAGE_CAPACITY = 1024 * 1024 * 4

MAGIC = b"\x77\x77"
NULL = b"\x00\x00"

SUPPORTED_VERSIONS = (
    TX_VERSION_COMMON_ENCODING,
    TX_VERSION_BLAKE3_HASH,
    TX_VERSION_REFERENCES,
    TX_VERSION_HASH_SIGNATURE,
)


class TransactionLike(Protocol):
    version: int
    asset: bytes
    inputs: Sequence[Input]
    outputs: Sequence[Output]
    references: Sequence[bytes]
    extra: bytes
    signatures: Sequence[Mapping[int, bytes]]
    aggregated_signature: AggregatedSignature | None


class Encoder:
    """Accumulates the wire form of a transaction or its parts."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def encode_transaction(self, tx: TransactionLike) -> bytes:
        """Write ``tx`` and return all bytes written."""
        version = tx.version
        if version not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported transaction version {version}")

        self.write(MAGIC)
        self.write(bytes([0x00, version]))
        self.write(tx.asset)

        inputs = list(tx.inputs or [])
        self.write_int(len(inputs))
        for inp in inputs:
            self.encode_input(inp)

        outputs = list(tx.outputs or [])
        self.write_int(len(outputs))
        for out in outputs:
            self.encode_output(out, version)

        extra = bytes(tx.extra or b"")
        if version >= TX_VERSION_REFERENCES:
            references = list(tx.references or [])
            self.write_int(len(references))
            for ref in references:
                self.write(ref)
            if len(extra) > EXTRA_SIZE_STORAGE_CAPACITY:
                raise ValueError(f"extra too large {len(extra)}")
            self.write_uint32(len(extra))
            self.write(extra)
        else:
            self.write_int(len(extra))
            self.write(extra)

        if tx.aggregated_signature is not None:
            self.encode_aggregated_signature(tx.aggregated_signature)
        else:
            signatures = list(tx.signatures or [])
            if len(signatures) == MAXIMUM_ENCODING_INT:
                raise ValueError(f"too many signature groups {len(signatures)}")
            self.write_int(len(signatures))
            for sigs in signatures:
                self.encode_signatures(sigs or {})

        return self.getvalue()

    def encode_input(self, inp: Input) -> None:
        if inp.hash is None:
            raise ValueError("input without hash")
        self.write(inp.hash)
        self.write_uint16(inp.index)

        genesis = bytes(inp.genesis or b"")
        self.write_int(len(genesis))
        self.write(genesis)

        deposit = inp.deposit
        if deposit is None:
            self.write(NULL)
        else:
            self.write(MAGIC)
            self.write(deposit.chain)
            self._write_text(deposit.asset_key)
            self._write_text(deposit.transaction)
            self.write_uint64(deposit.index)
            self.write_integer(deposit.amount)

        mint = inp.mint
        if mint is None:
            self.write(NULL)
        else:
            self.write(MAGIC)
            self._write_text(mint.group)
            self.write_uint64(mint.batch)
            self.write_integer(mint.amount)

    def encode_output(self, out: Output, version: int) -> None:
        self.write(bytes([0x00, out.type]))
        self.write_integer(out.amount)
        self.write_int(len(out.keys))
        for key in out.keys:
            self.write(key)

        self.write(out.mask)
        script = bytes(out.script or b"")
        self.write_int(len(script))
        self.write(script)

        withdrawal = out.withdrawal
        if withdrawal is None:
            self.write(NULL)
            return
        self.write(MAGIC)
        if version < TX_VERSION_HASH_SIGNATURE:
            self.write(withdrawal.chain)
            self._write_text(withdrawal.asset_key)
        self._write_text(withdrawal.address)
        self._write_text(withdrawal.tag)

    def encode_signatures(self, sigs: Mapping[int, bytes]) -> None:
        """Write a signature map ordered by signer index."""
        ordered = sorted(sigs.items())
        self.write_int(len(ordered))
        for index, sig in ordered:
            self.write_uint16(index)
            self.write(sig)

    def encode_aggregated_signature(self, sig: AggregatedSignature) -> None:
        if sig.signature is None:
            raise ValueError("aggregated signature without signature")
        self.write_int(MAXIMUM_ENCODING_INT)
        self.write_int(AGGREGATED_SIGNATURE_PREFIX)
        self.write(sig.signature)

        signers = list(sig.signers)
        if not signers:
            self.write_byte(AGGREGATED_SIGNATURE_ORDINARY_MASK)
            self.write_int(0)
            return
        for previous, current in zip(signers, signers[1:]):
            if current <= previous:
                raise ValueError(f"signers not strictly increasing {signers}")
        if any(m < 0 or m > MAXIMUM_ENCODING_INT for m in signers):
            raise ValueError(f"signer out of range {signers}")

        highest = signers[-1]
        if highest // 8 + 1 > len(signers) * 2:
            self.write_byte(AGGREGATED_SIGNATURE_SPARSE_MASK)
            self.write_int(len(signers))
            for m in signers:
                self.write_int(m)
            return

        masks = bytearray(highest // 8 + 1)
        for m in signers:
            masks[m // 8] ^= 1 << (m % 8)
        self.write_byte(AGGREGATED_SIGNATURE_ORDINARY_MASK)
        self.write_int(len(masks))
        self.write(bytes(masks))

    def write(self, data: bytes) -> None:
        self._buf += bytes(data)

    def write_byte(self, b: int) -> None:
        if not 0 <= b <= 0xFF:
            raise ValueError(f"invalid byte {b}")
        self._buf.append(b)

    def write_int(self, d: int) -> None:
        if not 0 <= d <= MAXIMUM_ENCODING_INT:
            raise ValueError(f"int out of range {d}")
        self.write(d.to_bytes(2, "big"))

    def write_uint16(self, d: int) -> None:
        if not 0 <= d <= MAXIMUM_ENCODING_INT:
            raise ValueError(f"uint16 out of range {d}")
        self.write(d.to_bytes(2, "big"))

    def write_uint32(self, d: int) -> None:
        if not 0 <= d < 1 << 32:
            raise ValueError(f"uint32 out of range {d}")
        self.write(d.to_bytes(4, "big"))

    def write_uint64(self, d: int) -> None:
        if not 0 <= d < 1 << 64:
            raise ValueError(f"uint64 out of range {d}")
        self.write(d.to_bytes(8, "big"))

    def write_integer(self, d: Integer) -> None:
        raw = d.to_bytes()
        self.write_int(len(raw))
        self.write(raw)

    def _write_text(self, text: Any) -> None:
        raw = text.encode() if isinstance(text, str) else bytes(text)
        self.write_int(len(raw))
        self.write(raw)


def new_minimum_encoder() -> Encoder:
    """An encoder that starts with the minimum encoding version header."""
    enc = Encoder()
    enc.write(MAGIC)
    enc.write(bytes([0x00, MINIMUM_ENCODING_VERSION]))
    return enc