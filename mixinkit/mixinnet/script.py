"""Output scripts and transaction extra encoding."""

from __future__ import annotations

import base64
import binascii

OPERATOR_0 = 0x00
OPERATOR_64 = 0x40
OPERATOR_SUM = 0xFE
OPERATOR_CMP = 0xFF

OUTPUT_TYPE_SCRIPT = 0x00
OUTPUT_TYPE_WITHDRAWAL_SUBMIT = 0xA1
OUTPUT_TYPE_WITHDRAWAL_FUEL = 0xA2
OUTPUT_TYPE_NODE_PLEDGE = 0xA3
OUTPUT_TYPE_NODE_ACCEPT = 0xA4
OUTPUT_TYPE_NODE_RESIGN = 0xA5
OUTPUT_TYPE_NODE_REMOVE = 0xA6
OUTPUT_TYPE_DOMAIN_ACCEPT = 0xA7
OUTPUT_TYPE_DOMAIN_REMOVE = 0xA8
OUTPUT_TYPE_WITHDRAWAL_CLAIM = 0xA9
OUTPUT_TYPE_NODE_CANCEL = 0xAA
OUTPUT_TYPE_CUSTODIAN_EVOLUTION = 0xB1
OUTPUT_TYPE_CUSTODIAN_MIGRATION = 0xB2
OUTPUT_TYPE_CUSTODIAN_DEPOSIT = 0xB3
OUTPUT_TYPE_CUSTODIAN_WITHDRAWAL = 0xB4


class Script(bytes):
    """An output script; ``str()`` gives its hex form."""

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Script.fromhex({self.hex()!r})"

    def verify_format(self) -> None:
        """Raise ValueError unless this is a threshold script."""
        if len(self) != 3:
            raise ValueError(f"invalid script {len(self)}")
        if self[0] != OPERATOR_CMP or self[1] != OPERATOR_SUM:
            raise ValueError(f"invalid script {self[0]} {self[1]}")

    def validate(self, total: int) -> None:
        """Raise ValueError if ``total`` signatures do not meet the threshold."""
        self.verify_format()
        if total < self[2]:
            raise ValueError(f"invalid signature keys {total} {self[2]}")


def new_threshold_script(threshold: int) -> Script:
    """Script requiring ``threshold`` signatures."""
    return Script(bytes([OPERATOR_CMP, OPERATOR_SUM, threshold]))


def extra_to_string(extra: bytes) -> str:
    """Standard base64 form of a transaction extra."""
    return base64.b64encode(bytes(extra)).decode("ascii")


def parse_extra(text: str) -> bytes:
    """Decode an extra given as hex, falling back to standard base64."""
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        pass
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid extra {text!r}") from exc