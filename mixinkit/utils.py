"""Identifiers and random values used across the API."""

from __future__ import annotations

import hashlib
import secrets
import uuid


def new_uuid() -> str:
    """A random version 4 UUID in its canonical string form."""
    return str(uuid.uuid4())


def uuid_hash(data: bytes) -> str:
    """A name-based version 3 UUID from the MD5 digest of ``data``."""
    digest = bytearray(hashlib.md5(bytes(data)).digest())
    digest[6] = (digest[6] & 0x0F) | 0x30
    digest[8] = (digest[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(digest)))


def unique_conversation_id(user_id: str, recipient_id: str) -> str:
    """The conversation id two users share, whichever of them asks."""
    low, high = sorted((user_id, recipient_id))
    return uuid_hash((low + high).encode())


def random_pin() -> str:
    """A random six-digit PIN that never starts with zero."""
    value = int.from_bytes(secrets.token_bytes(8), "little") % 1_000_000
    if value < 100_000:
        value += 100_000
    return str(value)


def random_trace_id() -> str:
    return new_uuid()