import pytest

from mixinkit.mixinnet.hashing import (
    Hash,
    blake3_256,
    hash_from_string,
    hash_members,
    new_blake3_hash,
    new_hash,
)


def test_sha3_empty_vector():
    assert str(new_hash(b"")) == "a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a"


def test_blake3_empty_vector():
    assert blake3_256(b"").hex() == "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"


def test_blake3_hash_wraps_raw_digest():
    data = b"mixin" * 50
    h = new_blake3_hash(data)
    assert isinstance(h, Hash)
    assert bytes(h) == blake3_256(data)


@pytest.mark.parametrize("size", [63, 64, 65, 1023, 1024, 1025, 2048, 2049, 4097])
def test_blake3_lengths_are_deterministic(size):
    data = bytes(i % 251 for i in range(size))
    first = blake3_256(data)
    assert len(first) == 32
    assert blake3_256(data) == first
    assert blake3_256(data + b"\0") != first


def test_blake3_distinct_across_chunk_boundaries():
    digests = {blake3_256(bytes(n)) for n in (1023, 1024, 1025, 2048, 3072, 3073)}
    assert len(digests) == 6


def test_blake3_differs_from_sha3():
    assert bytes(new_blake3_hash(b"abc")) != bytes(new_hash(b"abc"))


def test_hash_from_string_round_trip():
    h = new_hash(b"round trip")
    parsed = hash_from_string(str(h))
    assert parsed == h
    assert isinstance(parsed, Hash)


def test_hash_from_string_rejects_wrong_length():
    with pytest.raises(ValueError, match="invalid hash length 2"):
        hash_from_string("abcd")


def test_hash_from_string_rejects_non_hex():
    with pytest.raises(ValueError):
        hash_from_string("zz" * 32)


def test_hash_constructor_checks_length():
    with pytest.raises(ValueError):
        Hash(b"short")
    assert Hash() == bytes(32)


def test_has_value():
    assert not Hash().has_value()
    assert new_hash(b"x").has_value()


def test_hash_members_order_independent():
    ids = ["b-member", "a-member", "c-member"]
    original = list(ids)
    assert hash_members(ids) == hash_members(sorted(ids, reverse=True))
    assert hash_members(ids) == str(new_hash(b"a-memberb-memberc-member"))
    assert ids == original