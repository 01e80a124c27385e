"""Messenger sessions and message category labels."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Iterable

SESSION_PLATFORM_IOS = "iOS"
SESSION_PLATFORM_ANDROID = "Android"
SESSION_PLATFORM_DESKTOP = "Desktop"

ENCRYPTED_CATEGORY_LABEL = "ENCRYPTED_"
PLAIN_CATEGORY_LABEL = "PLAIN_"


@dataclass
class Session:
    user_id: str = ""
    session_id: str = ""
    public_key: str = ""
    platform: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            user_id=data.get("user_id") or "",
            session_id=data.get("session_id") or "",
            public_key=data.get("public_key") or "",
            platform=data.get("platform") or "",
        )

    def to_dict(self) -> dict[str, str]:
        """JSON form, leaving out empty fields."""
        return {k: v for k, v in vars(self).items() if v}


def is_encrypted_message_supported(sessions: Iterable[Session]) -> bool:
    """True if every session has a public key to encrypt to."""
    return all(s.public_key for s in sessions)


def generate_session_checksum(sessions: Iterable[Session]) -> str:
    """MD5 hex of the sorted session ids joined together; empty for no sessions."""
    ids = sorted(s.session_id for s in sessions)
    if not ids:
        return ""
    return hashlib.md5("".join(ids).encode()).hexdigest()


def is_encrypted_message_category(category: str) -> bool:
    return ENCRYPTED_CATEGORY_LABEL in category


def is_plain_message_category(category: str) -> bool:
    return PLAIN_CATEGORY_LABEL in category


def encrypt_message_category(category: str) -> str:
    return category.replace(PLAIN_CATEGORY_LABEL, ENCRYPTED_CATEGORY_LABEL)


def decrypt_message_category(category: str) -> str:
    return category.replace(ENCRYPTED_CATEGORY_LABEL, PLAIN_CATEGORY_LABEL)