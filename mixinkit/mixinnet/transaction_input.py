"""Assembling an unsigned transaction from spendable outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .hashing import Hash
from .transaction import EXTRA_SIZE_GENERAL_LIMIT, SLICE_COUNT_LIMIT, Transaction
from .types import TX_VERSION, Input, Output


@dataclass
class InputUTXO:
    """An output being spent, with the asset and amount it holds."""

    input: Input
    asset: Hash = field(default_factory=Hash)
    amount: Decimal = Decimal(0)


@dataclass
class TransactionInput:
    """Inputs, outputs and memo from which a transaction is built."""

    tx_version: int = TX_VERSION
    memo: str = ""
    inputs: list[InputUTXO] = field(default_factory=list)
    outputs: list[Output] = field(default_factory=list)
    references: list[Hash] = field(default_factory=list)
    hint: str = ""

    def asset(self) -> Hash:
        """Asset of the first input, or the zero hash when there is none."""
        if not self.inputs:
            return Hash()
        return Hash(self.inputs[0].asset)

    def total_input_amount(self) -> Decimal:
        return sum((Decimal(u.amount) for u in self.inputs), Decimal(0))

    def validate(self) -> None:
        """Raise ValueError unless inputs and outputs form a balanced transaction."""
        if not self.inputs:
            raise ValueError("no input utxo")

        total = self.total_input_amount()
        asset = self.asset()

        if len(self.memo.encode()) > EXTRA_SIZE_GENERAL_LIMIT:
            raise ValueError("invalid memo, extra too long")

        counts = (len(self.inputs), len(self.outputs), len(self.references))
        if any(n > SLICE_COUNT_LIMIT for n in counts):
            raise ValueError("invalid tx inputs or outputs %d %d %d" % counts)

        if any(Hash(u.asset) != asset for u in self.inputs):
            raise ValueError("invalid input utxo, asset not matched")

        for output in self.outputs:
            total -= Decimal(str(output.amount))
            if total < 0:
                raise ValueError("invalid output: amount exceed")

        if total != 0:
            raise ValueError("invalid output: amount not matched")

    def build(self) -> Transaction:
        """The unsigned transaction; raises ValueError when invalid."""
        self.validate()
        tx = Transaction(
            version=self.tx_version,
            asset=self.asset(),
            extra=self.memo.encode(),
            references=list(self.references),
            outputs=list(self.outputs),
        )
        if len(tx.extra) > tx.extra_limit():
            raise ValueError("memo too long")
        tx.inputs = [u.input for u in self.inputs]
        return tx