"""PIN format checks."""

from __future__ import annotations

import binascii
import re

PIN_PATTERN = re.compile(r"\d{6}", re.ASCII)

# Counter appended to a new TIP public key when it replaces a PIN.
_TIP_COUNTER = (1).to_bytes(8, "big").hex()


def _hex_length(text: str) -> int | None:
    try:
        return len(binascii.unhexlify(text))
    except (binascii.Error, ValueError):
        return None


def validate_pin_pattern(pin: str) -> None:
    """Raise ValueError unless ``pin`` is six digits or a hex TIP key of 32 or 64 bytes."""
    if len(pin) > 6 and _hex_length(pin) in (32, 64):
        return
    if PIN_PATTERN.fullmatch(pin) is None:
        raise ValueError(f"pin must match regex pattern {'^' + PIN_PATTERN.pattern + '$'!r}")


def pad_new_pin(pin: str) -> str:
    """The value sent as a new PIN: TIP keys carry an eight-byte counter of 1."""
    if len(pin) > 6:
        return pin + _TIP_COUNTER
    return pin