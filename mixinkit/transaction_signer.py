"""Signing safe transactions with a spend key and per-input view keys."""

from __future__ import annotations

from typing import Sequence

from .mixinnet.edwards import scalar_to_bytes
from .mixinnet.keys import Key
from .mixinnet.transaction import Transaction


def safe_sign_transaction(
    tx: Transaction, spend_key: Key, views: Sequence[Key], k: int
) -> None:
    """Add the signature at signer index ``k`` for each input, in place.

    The key for input ``i`` is the sum of ``views[i]`` and the spend key.
    """
    y = Key(spend_key).to_scalar()
    tx_hash = tx.transaction_hash()

    if not tx.signatures:
        tx.signatures = [{} for _ in tx.inputs]
    if len(views) > len(tx.signatures):
        raise ValueError(f"too many views {len(views)} for {len(tx.signatures)} inputs")

    for idx, view in enumerate(views):
        x = Key(view).to_scalar()
        key = Key(scalar_to_bytes(x + y))
        if tx.signatures[idx] is None:
            tx.signatures[idx] = {}
        tx.signatures[idx][k] = key.sign_hash(tx_hash)