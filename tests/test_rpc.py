import json
from decimal import Decimal

import pytest

from mixinkit.mixinnet.address import generate_address
from mixinkit.mixinnet.errors import INVALID_OUTPUT_KEY, INVALID_SIGNATURE, MixinNetError
from mixinkit.mixinnet.hashing import new_hash
from mixinkit.mixinnet.keys import generate_key
from mixinkit.mixinnet.number import integer_from_string
from mixinkit.mixinnet.rpc import (
    LEGACY_HOSTS,
    SAFE_HOSTS,
    Client,
    Config,
    decode_response,
)
from mixinkit.mixinnet.script import new_threshold_script
from mixinkit.mixinnet.transaction import Transaction
from mixinkit.mixinnet.types import TX_VERSION, Input, Output


class FakeNode:
    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def __call__(self, url, body, timeout):
        request = json.loads(body)
        self.calls.append((url, request))
        reply = self.handler(request["method"], request["params"])
        return 200, "OK", json.dumps(reply).encode()

    def methods(self):
        return [req["method"] for _, req in self.calls]


def _sample_tx(asset=b"asset"):
    tx = Transaction(
        version=TX_VERSION,
        asset=new_hash(asset),
        inputs=[Input(hash=new_hash(b"in"), index=0)],
        outputs=[
            Output(
                amount=integer_from_string("1"),
                keys=[generate_key().public()],
                script=new_threshold_script(1),
                mask=generate_key().public(),
            )
        ],
    )
    tx.transaction_hash()
    return tx


def test_decode_response_data():
    assert decode_response(200, "OK", b'{"data": {"a": 1}}') == {"a": 1}


def test_decode_response_known_error():
    with pytest.raises(MixinNetError) as info:
        decode_response(200, "OK", b'{"error": "invalid output key abc"}')
    assert info.value.code == INVALID_OUTPUT_KEY
    assert info.value.status == 202


def test_decode_response_signature_error():
    with pytest.raises(MixinNetError) as info:
        decode_response(200, "OK", b'{"error": "invalid signature keys 1 2"}')
    assert info.value.code == INVALID_SIGNATURE


def test_decode_response_bad_body_with_error_status():
    with pytest.raises(MixinNetError) as info:
        decode_response(500, "Internal Server Error", b"<html>")
    assert info.value.code == 500
    assert info.value.description == "500 Internal Server Error"


def test_decode_response_bad_body_with_ok_status():
    with pytest.raises(MixinNetError) as info:
        decode_response(200, "OK", b"not json")
    assert info.value.status == 200


def test_default_hosts():
    assert Client(Config()).hosts == list(LEGACY_HOSTS)
    assert Client(Config(safe=True)).hosts == list(SAFE_HOSTS)
    client = Client(Config(hosts=["http://localhost:1"]))
    assert client.random_host() == "http://localhost:1"


def test_call_payload_and_host():
    node = FakeNode(lambda method, params: {"data": {"type": 0, "amount": "2", "hash": params[0]}})
    client = Client(Config(hosts=["http://localhost:1"]), transport=node)
    h = new_hash(b"x")
    utxo = client.get_utxo(h, 3, host="http://localhost:2")
    url, request = node.calls[0]
    assert url == "http://localhost:2"
    assert request == {"method": "getutxo", "params": [str(h), 3]}
    assert utxo.hash == h
    assert utxo.amount == Decimal("2")


def test_read_consensus_info():
    node = FakeNode(lambda method, params: {"data": {"graph": {"topology": 12}}})
    info = Client(transport=node).read_consensus_info()
    assert node.methods() == ["getinfo"]
    assert info.graph.topology == 12


def test_get_transaction_round_trip():
    tx = _sample_tx()
    node = FakeNode(lambda method, params: {"data": tx.to_json()})
    got = Client(transport=node).get_transaction(tx.hash)
    assert got.hash == tx.hash
    assert got.dump() == tx.dump()


def test_send_raw_transaction():
    tx = _sample_tx()

    def handler(method, params):
        if method == "sendrawtransaction":
            return {"data": {"hash": str(tx.hash)}}
        return {"data": tx.to_json()}

    node = FakeNode(handler)
    got = Client(transport=node).send_raw_transaction(tx.dump())
    assert node.methods() == ["sendrawtransaction", "gettransaction"]
    assert node.calls[1][1]["params"] == [str(tx.hash)]
    assert got.dump() == tx.dump()


def test_send_raw_transaction_nil_hash():
    node = FakeNode(lambda method, params: {"data": {}})
    with pytest.raises(ValueError, match="nil transaction hash"):
        Client(transport=node).send_raw_transaction(_sample_tx().dump())


def test_send_raw_transaction_already_sent():
    tx = _sample_tx()

    def handler(method, params):
        if method == "sendrawtransaction":
            return {"error": "invalid output key x"}
        assert params == [str(tx.hash)]
        return {"data": tx.to_json()}

    got = Client(transport=FakeNode(handler)).send_raw_transaction(tx.dump())
    assert got.hash == tx.hash


def test_send_raw_transaction_unknown_keeps_error():
    def handler(method, params):
        if method == "sendrawtransaction":
            return {"error": "invalid output key x"}
        return {"data": None}

    with pytest.raises(MixinNetError) as info:
        Client(transport=FakeNode(handler)).send_raw_transaction(_sample_tx().dump())
    assert info.value.code == INVALID_OUTPUT_KEY


def test_send_raw_transaction_other_error_no_lookup():
    node = FakeNode(lambda method, params: {"error": "input locked for transaction y"})
    with pytest.raises(MixinNetError):
        Client(transport=node).send_raw_transaction(_sample_tx().dump())
    assert node.methods() == ["sendrawtransaction"]


def _verify_setup(addr):
    previous = Transaction(
        version=TX_VERSION,
        asset=new_hash(b"asset"),
        inputs=[Input(hash=new_hash(b"origin"), index=0)],
        outputs=[addr.create_utxo(TX_VERSION, 0, Decimal("1"))],
    )
    previous.transaction_hash()
    spend = Transaction(
        version=TX_VERSION,
        asset=new_hash(b"asset"),
        inputs=[Input(hash=previous.hash, index=0)],
        outputs=[],
    )
    spend.transaction_hash()
    txs = {str(previous.hash): previous, str(spend.hash): spend}
    node = FakeNode(lambda method, params: {"data": txs[params[0]].to_json()})
    return Client(transport=node), spend


def test_verify_transaction_true_for_owner():
    addr = generate_address()
    client, spend = _verify_setup(addr)
    assert client.verify_transaction(addr, spend.hash) is True


def test_verify_transaction_false_for_other_address():
    client, spend = _verify_setup(generate_address())
    assert client.verify_transaction(generate_address(), spend.hash) is False


def test_verify_transaction_requires_view_key():
    addr = generate_address()
    client, spend = _verify_setup(addr)
    addr.private_view_key = type(addr.private_view_key)()
    with pytest.raises(ValueError, match="invalid address"):
        client.verify_transaction(addr, spend.hash)


def test_verify_transaction_missing_tx():
    node = FakeNode(lambda method, params: {"data": None})
    with pytest.raises(ValueError, match="GetTransaction failed"):
        Client(transport=node).verify_transaction(generate_address(), new_hash(b"none"))