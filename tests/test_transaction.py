import pytest

from mixinkit.mixinnet.hashing import Hash, hash_from_string, new_blake3_hash, new_hash
from mixinkit.mixinnet.keys import Key, Signature
from mixinkit.mixinnet.number import integer_from_string
from mixinkit.mixinnet.script import new_threshold_script
from mixinkit.mixinnet.transaction import (
    EXTRA_SIZE_GENERAL_LIMIT,
    XIN_ASSET_ID,
    DecodeError,
    Decoder,
    Transaction,
    check_tx_version,
    new_minimum_decoder,
)
from mixinkit.mixinnet.types import (
    AggregatedSignature,
    DepositData,
    Input,
    MintData,
    Output,
    WithdrawalData,
)

LEGACY_RAW = (
    "77770003a99c2e0e2b1da4d648755ef19bd95139acbbe6564cfb06dec7cd34931ca72cdc000100b5127275c76409d54e8e56b1"
    "7308ee1e7686fbdd624ec31beb5f897adba6e80000000000000000000100a300060138e6ae9f00000000000000000000000000"
    "00000000000000000000000000000000000000000000000000000040d1da563f64423cdd7544d9dadb0ffc5af1c403c7f900c0"
    "d9c4e627c6d03ca8bfb27b4a84b6627c77a57074db780d16968e902614a99f02dbc5267ddfaaf38935ffffff017cd3a768b3c5"
    "6c35ff0b1c3ba88ff389d21fc8ed491d2962288c02efa17a29b730a6f3f06cbd7b96f5f512f639f837941f4da22bedd7e3ce39"
    "33a8a520b3f40d00000101"
)
LEGACY_HASH = "abadfce0377eae4e0057289ddcd067068171f034814c476a0d2c4a7807f222a7"

SAFE_RAW = (
    "77770005a99c2e0e2b1da4d648755ef19bd95139acbbe6564cfb06dec7cd34931ca72cdc00015365637a68a57c8f2ef391f760"
    "a0ac262af95c52edc305f9201fb55997aabcaa0000000000000000000100a300060138e6ae9f0000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000040b77f9f5f35c70cdfb7800e9d3ffcc48d4b2f0698"
    "06054b0f57d004633d53f3aafafd4e3b1d1c91330d22bc4a0b57594d88bab7f132ffe9417bad92c8ba3b7bcbffffff019ea442f3"
    "e17c2def22aa0c742270d07dc1f866613dfb57175263ddf975e6b33187acaa9918dbf1867c5bb3c5fda5a7c8319b0dd4dc08a46c"
    "b9161d304f689f0400000101"
)
SAFE_HASH = "97734eaedd70ab91a23f84dbef398538d7829da51a43cfcb8df81d4f010d7688"


def _sample_tx(version=5):
    return Transaction(
        version=version,
        asset=new_hash(b"asset"),
        inputs=[Input(hash=new_hash(b"prev"), index=1)],
        outputs=[
            Output(
                type=0,
                amount=integer_from_string("1.5"),
                keys=[Key(new_hash(b"key"))],
                script=new_threshold_script(1),
                mask=Key(new_hash(b"mask")),
            )
        ],
        references=[new_hash(b"ref")] if version >= 4 else [],
        extra=b"memo",
    )


def test_legacy_raw_transaction_hash():
    tx = Transaction.from_raw(LEGACY_RAW)
    assert tx.version == 3
    assert str(tx.outputs[0].amount) == "13439.00000000"
    assert tx.outputs[0].type == 0xA3
    assert tx.aggregated_signature.signers == [0]
    assert str(tx.transaction_hash()) == LEGACY_HASH
    assert tx.dump() == LEGACY_RAW


def test_safe_raw_transaction_hash():
    tx = Transaction.from_raw(SAFE_RAW)
    assert tx.version == 5
    assert tx.references == []
    assert len(tx.extra) == 64
    assert tx.transaction_hash() == hash_from_string(SAFE_HASH)
    assert tx.dump() == SAFE_RAW


@pytest.mark.parametrize("version", [2, 3, 4, 5])
def test_common_encoding_round_trip(version):
    tx = _sample_tx(version)
    decoded = Transaction.from_raw(tx.dump())
    assert decoded == tx


def test_round_trip_with_deposit_mint_and_withdrawal():
    tx = _sample_tx(4)
    tx.inputs[0].deposit = DepositData(
        chain=new_hash(b"chain"), asset_key="0xabc", transaction="0xdef", index=7,
        amount=integer_from_string("2"),
    )
    tx.inputs[0].mint = MintData(group="UNIVERSAL", batch=9, amount=integer_from_string("3"))
    tx.outputs[0].withdrawal = WithdrawalData(
        address="addr", tag="tag", chain=new_hash(b"c"), asset_key="k"
    )
    assert Transaction.from_data(tx.dump_data()) == tx


def test_signatures_round_trip_and_payload():
    tx = _sample_tx()
    tx.signatures = [{1: Signature(b"\x01" * 64), 0: Signature(b"\x02" * 64)}]
    decoded = Transaction.from_data(tx.dump_data())
    assert decoded.signatures == tx.signatures
    unsigned = Transaction.from_data(tx.dump_payload())
    assert unsigned.signatures == []
    assert tx.signatures != []


@pytest.mark.parametrize("signers", [[0, 40], [0, 1, 2, 9], []])
def test_aggregated_signature_round_trip(signers):
    tx = _sample_tx()
    tx.aggregated_signature = AggregatedSignature(signers=signers, signature=Signature(b"\x05" * 64))
    decoded = Transaction.from_data(tx.dump_data())
    assert decoded.aggregated_signature == tx.aggregated_signature


def test_hash_ignores_signatures_and_is_cached():
    tx = _sample_tx()
    unsigned_hash = tx.transaction_hash()
    assert unsigned_hash == new_blake3_hash(tx.dump_payload())
    signed = _sample_tx()
    signed.signatures = [{0: Signature(b"\x09" * 64)}]
    assert signed.transaction_hash() == unsigned_hash
    preset = _sample_tx()
    preset.hash = Hash(b"\x07" * 32)
    assert preset.transaction_hash() == Hash(b"\x07" * 32)


def test_version_two_uses_sha3():
    tx = _sample_tx(2)
    assert tx.transaction_hash() == new_hash(tx.dump_payload())


def test_msgpack_version_one_round_trip():
    tx = _sample_tx(1)
    tx.inputs[0].deposit = DepositData(
        chain=new_hash(b"chain"), asset_key="a", transaction="t", index=3,
        amount=integer_from_string("0.5"),
    )
    tx.signatures = [{0: Signature(b"\x01" * 64), 1: Signature(b"\x02" * 64)}]
    data = tx.dump_data()
    assert check_tx_version(data) == 0
    assert Transaction.from_data(data) == tx


def test_msgpack_signatures_must_be_contiguous():
    tx = _sample_tx(1)
    tx.signatures = [{2: Signature(b"\x01" * 64)}]
    with pytest.raises(ValueError):
        tx.dump_data()


def test_unknown_version_cannot_be_dumped():
    with pytest.raises(ValueError, match="unknown tx version"):
        _sample_tx(9).dump_data()


def test_trailing_byte_rejected():
    data = _sample_tx().dump_data() + b"\x00"
    with pytest.raises(DecodeError, match="unexpected ending"):
        Transaction.from_data(data)


def test_truncated_data_rejected():
    data = _sample_tx().dump_data()
    with pytest.raises(DecodeError):
        Transaction.from_data(data[:-10])


def test_invalid_version_in_decoder():
    with pytest.raises(DecodeError, match="invalid version"):
        Decoder(b"\x77\x77\x00\x01" + bytes(40)).decode_transaction()


def test_bad_hex_rejected():
    with pytest.raises(DecodeError):
        Transaction.from_raw("zz")


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x77\x77\x00\x02", 2),
        (b"\x77\x77\x00\x05rest", 5),
        (b"\x77\x77\x00\x01", 0),
        (b"\x86", 0),
    ],
)
def test_check_tx_version(data, expected):
    assert check_tx_version(data) == expected


def test_minimum_decoder():
    dec = new_minimum_decoder(b"\x77\x77\x00\x01\x00\x2a")
    assert dec.read_int() == 42
    with pytest.raises(DecodeError):
        new_minimum_decoder(b"\x77\x77\x00\x02\x00")
    with pytest.raises(DecodeError):
        new_minimum_decoder(b"\x77")


def test_decoder_primitives():
    dec = Decoder(
        b"\x01\x02" + b"\x00\x00\x00\x05" + (7).to_bytes(8, "big") + b"\x00\x02\x01\x00"
        + b"\x00\x03abc" + b"\x77\x77" + b"\x00\x00" + b"\x09"
    )
    assert dec.read_uint16() == 0x0102
    assert dec.read_uint32() == 5
    assert dec.read_uint64() == 7
    assert str(dec.read_integer()) == "0.00000256"
    assert dec.read_bytes() == b"abc"
    assert dec.read_magic() is True
    assert dec.read_magic() is False
    assert dec.read_byte() == 9
    with pytest.raises(DecodeError):
        dec.read_byte()


def test_malformed_magic():
    with pytest.raises(DecodeError, match="malformed"):
        Decoder(b"\x12\x34").read_magic()


def test_invalid_output_type():
    with pytest.raises(DecodeError, match="invalid output type"):
        Decoder(b"\x01\x00").read_output(5)


def test_duplicate_signature_index():
    sig = b"\x03" * 64
    data = b"\x00\x02" + b"\x00\x01" + sig + b"\x00\x01" + sig
    with pytest.raises(DecodeError, match="signatures count"):
        Decoder(data).read_signatures()


def test_invalid_aggregated_mask_type():
    with pytest.raises(DecodeError, match="invalid mask type"):
        Decoder(b"\x00" * 64 + b"\x07").read_aggregated_signature()


def test_ordinary_mask_signers():
    sig = Decoder(b"\x00" * 64 + b"\x00" + b"\x00\x02" + b"\x05\x80").read_aggregated_signature()
    assert sig.signers == [0, 2, 15]


def _storage_tx(amount, script=0x40):
    return Transaction(
        version=5,
        asset=XIN_ASSET_ID,
        outputs=[
            Output(
                type=0,
                amount=integer_from_string(amount),
                keys=[Key(new_hash(b"k"))],
                script=new_threshold_script(script),
            )
        ],
    )


@pytest.mark.parametrize(
    "amount, expected",
    [("0.001", 1024), ("1", 1024000), ("10000", 4 * 1024 * 1024), ("0.0005", 256)],
)
def test_extra_limit_storage(amount, expected):
    assert _storage_tx(amount).extra_limit() == expected


def test_extra_limit_general_cases():
    assert _storage_tx("1", script=1).extra_limit() == EXTRA_SIZE_GENERAL_LIMIT
    other_asset = _storage_tx("1")
    other_asset.asset = new_hash(b"other")
    assert other_asset.extra_limit() == EXTRA_SIZE_GENERAL_LIMIT
    old = _storage_tx("1")
    old.version = 3
    assert old.extra_limit() == EXTRA_SIZE_GENERAL_LIMIT


def test_json_round_trip():
    tx = _sample_tx()
    tx.hash = tx.transaction_hash()
    tx.signatures = [{0: Signature(b"\x04" * 64)}]
    assert Transaction.from_json(tx.to_json()) == tx


def test_from_json_hex_extra():
    tx = Transaction.from_json(
        {"version": 5, "asset": str(XIN_ASSET_ID), "inputs": [], "outputs": [], "extra": "6869"}
    )
    assert tx.extra == b"hi"
    assert tx.asset == XIN_ASSET_ID
    assert tx.hash is None