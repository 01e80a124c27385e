"""Results of the kernel RPC calls: consensus info and unspent outputs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from .address import Address, address_from_string
from .hashing import Hash, hash_from_string

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def parse_time(text: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp; fractions below a microsecond are dropped."""
    if not text:
        return None
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"invalid time {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _hash(value: str | None) -> Hash:
    return Hash() if not value else hash_from_string(value)


def _decimal(value: Any) -> Decimal:
    return Decimal(0) if value is None else Decimal(str(value))


def _address(value: str | None) -> Address:
    return Address() if not value else address_from_string(value)


@dataclass
class UTXO:
    type: int = 0
    amount: Decimal = Decimal(0)
    hash: Hash = field(default_factory=Hash)
    index: int = 0
    lock: Hash | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UTXO":
        lock = data.get("lock")
        return cls(
            type=int(data.get("type") or 0),
            amount=_decimal(data.get("amount")),
            hash=_hash(data.get("hash")),
            index=int(data.get("index") or 0),
            lock=None if lock is None else hash_from_string(lock),
        )


@dataclass
class Mint:
    pool: Decimal = Decimal(0)
    pledge: Decimal = Decimal(0)
    batch: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Mint":
        return cls(
            pool=_decimal(data.get("pool")),
            pledge=_decimal(data.get("pledge")),
            batch=int(data.get("batch") or 0),
        )


@dataclass
class Queue:
    finals: int = 0
    caches: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Queue":
        return cls(finals=int(data.get("finals") or 0), caches=int(data.get("caches") or 0))


@dataclass
class ConsensusNode:
    node: Hash = field(default_factory=Hash)
    signer: Address = field(default_factory=Address)
    payee: Address = field(default_factory=Address)
    state: str = ""
    timestamp: int = 0
    transaction: Hash = field(default_factory=Hash)
    aggregator: int = 0
    works: tuple[int, int] = (0, 0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsensusNode":
        works = list(data.get("works") or [0, 0])
        if len(works) != 2:
            raise ValueError(f"invalid works {works}")
        return cls(
            node=_hash(data.get("node")),
            signer=_address(data.get("signer")),
            payee=_address(data.get("payee")),
            state=data.get("state") or "",
            timestamp=int(data.get("timestamp") or 0),
            transaction=_hash(data.get("transaction")),
            aggregator=int(data.get("aggregator") or 0),
            works=(int(works[0]), int(works[1])),
        )


@dataclass
class GraphReferences:
    external: Hash = field(default_factory=Hash)
    self: Hash = field(default_factory=Hash)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "GraphReferences":
        data = data or {}
        return cls(external=_hash(data.get("external")), self=_hash(data.get("self")))


@dataclass
class GraphSnapshot:
    node: Hash = field(default_factory=Hash)
    hash: Hash = field(default_factory=Hash)
    references: GraphReferences = field(default_factory=GraphReferences)
    round: int = 0
    timestamp: int = 0
    transaction: Hash = field(default_factory=Hash)
    signature: str = ""
    version: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphSnapshot":
        return cls(
            node=_hash(data.get("node")),
            hash=_hash(data.get("hash")),
            references=GraphReferences.from_dict(data.get("references")),
            round=int(data.get("round") or 0),
            timestamp=int(data.get("timestamp") or 0),
            transaction=_hash(data.get("transaction")),
            signature=data.get("signature") or "",
            version=int(data.get("version") or 0),
        )


@dataclass
class GraphCache:
    node: Hash = field(default_factory=Hash)
    references: GraphReferences = field(default_factory=GraphReferences)
    timestamp: int = 0
    round: int = 0
    snapshots: list[GraphSnapshot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphCache":
        return cls(
            node=_hash(data.get("node")),
            references=GraphReferences.from_dict(data.get("references")),
            timestamp=int(data.get("timestamp") or 0),
            round=int(data.get("round") or 0),
            snapshots=[GraphSnapshot.from_dict(s) for s in data.get("snapshots") or []],
        )


@dataclass
class GraphFinal:
    node: Hash = field(default_factory=Hash)
    hash: Hash = field(default_factory=Hash)
    start: int = 0
    end: int = 0
    round: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GraphFinal":
        return cls(
            node=_hash(data.get("node")),
            hash=_hash(data.get("hash")),
            start=int(data.get("start") or 0),
            end=int(data.get("end") or 0),
            round=int(data.get("round") or 0),
        )


@dataclass
class Graph:
    sps: float = 0.0
    topology: int = 0
    consensus: list[ConsensusNode] = field(default_factory=list)
    final: dict[str, GraphFinal] = field(default_factory=dict)
    cache: dict[str, GraphCache] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Graph":
        data = data or {}
        return cls(
            sps=float(data.get("sps") or 0.0),
            topology=int(data.get("topology") or 0),
            consensus=[ConsensusNode.from_dict(n) for n in data.get("consensus") or []],
            final={k: GraphFinal.from_dict(v) for k, v in (data.get("final") or {}).items()},
            cache={k: GraphCache.from_dict(v) for k, v in (data.get("cache") or {}).items()},
        )


@dataclass
class ConsensusInfo:
    network: Hash = field(default_factory=Hash)
    node: Hash = field(default_factory=Hash)
    version: str = ""
    uptime: str = ""
    epoch: datetime | None = None
    timestamp: datetime | None = None
    mint: Mint = field(default_factory=Mint)
    queue: Queue = field(default_factory=Queue)
    graph: Graph = field(default_factory=Graph)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsensusInfo":
        return cls(
            network=_hash(data.get("network")),
            node=_hash(data.get("node")),
            version=data.get("version") or "",
            uptime=data.get("uptime") or "",
            epoch=parse_time(data.get("epoch")),
            timestamp=parse_time(data.get("timestamp")),
            mint=Mint.from_dict(data.get("mint") or {}),
            queue=Queue.from_dict(data.get("queue") or {}),
            graph=Graph.from_dict(data.get("graph")),
        )