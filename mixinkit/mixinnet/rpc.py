"""JSON-RPC client for kernel nodes."""

from __future__ import annotations

import json
import random
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Callable

from .address import Address
from .errors import INVALID_OUTPUT_KEY, MixinNetError, is_error_codes, parse_error
from .hashing import Hash, hash_from_string
from .keys import view_ghost_output_key
from .rpc_info import UTXO, ConsensusInfo
from .transaction import Transaction

TX_METHOD_SEND = "sendrawtransaction"
TX_METHOD_GET = "gettransaction"
TX_METHOD_GET_UTXO = "getutxo"

SAFE_HOSTS = ("https://kernel.mixin.dev",)

LEGACY_HOSTS = (
    "http://node-42.f1ex.io:8239",
    "http://node-fes.f1ex.io:8239",
    "http://mixin-node-01.b.watch:8239",
    "http://mixin-node-02.b.watch:8239",
    "http://mixin-node-03.b.watch:8239",
    "http://mixin-node-04.b.watch:8239",
    "http://lehigh.hotot.org:8239",
    "http://lehigh-2.hotot.org:8239",
    "http://node-okashi.mixin.fan:8239",
)

DEFAULT_TIMEOUT = 10.0

Transport = Callable[[str, bytes, float], "tuple[int, str, bytes]"]


@dataclass
class Config:
    safe: bool = False
    hosts: list[str] = field(default_factory=list)


DEFAULT_LEGACY_CONFIG = Config(safe=False, hosts=list(LEGACY_HOSTS))
DEFAULT_SAFE_CONFIG = Config(safe=True, hosts=list(SAFE_HOSTS))


def _urllib_transport(url: str, body: bytes, timeout: float) -> tuple[int, str, bytes]:
    request = urllib.request.Request(
        url, data=body, headers={"Content-Type": "application/json"}, method="POST"
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            return resp.status, resp.reason, resp.read()
    except urllib.error.HTTPError as err:
        return err.code, str(err.reason), err.read()


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    raise TypeError(f"cannot encode {type(value).__name__}")


def decode_response(status: int, reason: str, body: bytes | str) -> Any:
    """The ``data`` of a node reply; raises MixinNetError for errors."""
    try:
        parsed = json.loads(body)
        if not isinstance(parsed, dict):
            raise ValueError("reply is not an object")
        message = parsed.get("error") or ""
        if not isinstance(message, str):
            raise ValueError("error is not a string")
    except ValueError as exc:
        if not 200 <= status < 300:
            raise MixinNetError(status, status, f"{status} {reason}") from exc
        raise MixinNetError(status, status, str(exc)) from exc

    if message:
        raise parse_error(message)
    return parsed.get("data")


class Client:
    """Calls kernel nodes, picking a random host unless one is given."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        config = config or Config()
        hosts = list(config.hosts)
        if not hosts:
            hosts = list(SAFE_HOSTS if config.safe else LEGACY_HOSTS)
        self.safe = config.safe
        self.hosts = hosts
        self.timeout = timeout
        self._transport = transport or _urllib_transport

    def random_host(self) -> str:
        return random.choice(self.hosts)

    def call(self, method: str, *args: Any, host: str | None = None) -> Any:
        """Invoke ``method`` with ``args`` and return the reply's data."""
        body = json.dumps({"method": method, "params": list(args)}, default=_json_default)
        status, reason, reply = self._transport(
            host or self.random_host(), body.encode(), self.timeout
        )
        return decode_response(status, reason, reply)

    def read_consensus_info(self, host: str | None = None) -> ConsensusInfo:
        return ConsensusInfo.from_dict(self.call("getinfo", host=host) or {})

    def send_raw_transaction(self, raw: str, host: str | None = None) -> Transaction:
        """Submit a hex transaction and return it as the node records it."""
        try:
            data = self.call(TX_METHOD_SEND, raw, host=host)
        except MixinNetError as err:
            if is_error_codes(err, INVALID_OUTPUT_KEY):
                existing = self._lookup_sent(raw, host)
                if existing is not None:
                    return existing
            raise

        tx_hash = (data or {}).get("hash") if isinstance(data, dict) else None
        if not tx_hash:
            raise ValueError("nil transaction hash")
        return self.get_transaction(hash_from_string(tx_hash), host=host)

    def _lookup_sent(self, raw: str, host: str | None) -> Transaction | None:
        try:
            tx_hash = Transaction.from_raw(raw).transaction_hash()
            tx = self.get_transaction(tx_hash, host=host)
        except (MixinNetError, OSError, ValueError):
            return None
        return tx if tx.asset.has_value() else None

    def get_transaction(self, tx_hash: bytes, host: str | None = None) -> Transaction:
        data = self.call(TX_METHOD_GET, Hash(tx_hash), host=host)
        return Transaction.from_json(data or {})

    def get_utxo(self, tx_hash: bytes, output_index: int, host: str | None = None) -> UTXO:
        data = self.call(TX_METHOD_GET_UTXO, Hash(tx_hash), output_index, host=host)
        return UTXO.from_dict(data or {})

    def verify_transaction(self, addr: Address, tx_hash: bytes, host: str | None = None) -> bool:
        """True if every input of the transaction was a single-key output of ``addr``."""
        if not addr.private_view_key.has_value() or not addr.public_spend_key.has_value():
            raise ValueError(
                "invalid address: must contains both private view key and public spend key"
            )

        tx = self.get_transaction(tx_hash, host=host)
        if not tx.asset.has_value():
            raise ValueError("GetTransaction failed")

        for inp in tx.inputs:
            if inp.hash is None:
                raise ValueError("input without hash")
            previous = self.get_transaction(inp.hash, host=host)
            if not previous.asset.has_value():
                raise ValueError("GetTransaction failed")
            if inp.index >= len(previous.outputs):
                raise ValueError("invalid output index")

            output = previous.outputs[inp.index]
            if len(output.keys) != 1:
                return False
            key = view_ghost_output_key(
                tx.version, output.keys[0], addr.private_view_key, output.mask, inp.index
            )
            if bytes(key) != bytes(addr.public_spend_key):
                return False

        return True