"""Errors returned by kernel nodes."""

from __future__ import annotations

from typing import Any

INVALID_OUTPUT_KEY = 2000001
INPUT_LOCKED = 2000002
INVALID_SIGNATURE = 2000003


class MixinNetError(Exception):
    """An error with an HTTP-like status and a numeric code."""

    def __init__(
        self,
        status: int,
        code: int,
        description: str,
        extra: dict[str, Any] | None = None,
        request_id: str = "",
    ) -> None:
        super().__init__(status, code, description)
        self.status = status
        self.code = code
        self.description = description
        self.extra = dict(extra or {})
        self.request_id = request_id

    def __str__(self) -> str:
        text = f"[{self.status}/{self.code}] {self.description}"
        text += "".join(f" {k}={v}" for k, v in self.extra.items())
        if self.request_id:
            text += f" id={self.request_id}"
        return text


def is_error_codes(err: BaseException | None, *args: int) -> bool:
    """True if ``err`` or an error it was raised from carries one of the codes."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, MixinNetError):
            return err.code in args
        seen.add(id(err))
        err = err.__cause__
    return False


def parse_error(message: str) -> MixinNetError:
    """Turn a node's error message into a MixinNetError with a known code."""
    if message.startswith("invalid output key "):
        return MixinNetError(202, INVALID_OUTPUT_KEY, message)
    if message.startswith("input locked for transaction "):
        return MixinNetError(202, INPUT_LOCKED, message)
    if message.startswith(("invalid tx signature number ", "invalid signature keys ")):
        return MixinNetError(202, INVALID_SIGNATURE, message)
    return MixinNetError(202, 202, message)