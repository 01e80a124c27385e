"""Links that open screens in the Messenger app."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping
from urllib.parse import quote, quote_plus, urlencode

SCHEME = "mixin"

SEND_SCHEME_CATEGORY_TEXT = "text"
SEND_SCHEME_CATEGORY_IMAGE = "image"
SEND_SCHEME_CATEGORY_CONTACT = "contact"
SEND_SCHEME_CATEGORY_APP_CARD = "app_card"
SEND_SCHEME_CATEGORY_LIVE = "live"
SEND_SCHEME_CATEGORY_POST = "post"


def _decimal_text(amount: Decimal | int | str) -> str:
    value = Decimal(str(amount)).normalize()
    return format(value, "f")


def _link(host: str, path: str = "", query: Mapping[str, str] | None = None) -> str:
    text = f"{SCHEME}://{host}"
    if path:
        if not path.startswith("/"):
            text += "/"
        text += quote(path, safe="$&+,/:;=@")
    if query:
        text += "?" + urlencode(sorted(query.items()))
    return text


@dataclass(frozen=True)
class UrlScheme:
    host: str = "mixin.one"

    def users(self, user_id: str) -> str:
        return _link("users", user_id)

    def transfer(self, user_id: str) -> str:
        return _link("transfer", user_id)

    def pay(
        self,
        asset_id: str,
        trace_id: str,
        amount: Decimal | int | str,
        recipient: str,
        memo: str = "",
    ) -> str:
        """Payment link with every field present, even when empty."""
        return _link(
            "pay",
            query={
                "asset": asset_id,
                "trace": trace_id,
                "amount": _decimal_text(amount),
                "recipient": recipient,
                "memo": memo,
            },
        )

    def codes(self, code: str) -> str:
        return _link("codes", code)

    def snapshots(self, snapshot_id: str = "", trace_id: str = "") -> str:
        query = {"trace": trace_id} if trace_id else None
        return _link("snapshots", snapshot_id, query)

    def conversations(self, conversation_id: str = "", user_id: str = "") -> str:
        """Open a conversation; ``user_id`` lets the app create it first."""
        query = {"user": user_id} if user_id else None
        return _link("conversations", conversation_id, query)

    def apps(
        self, app_id: str, action: str = "", params: Mapping[str, str] | None = None
    ) -> str:
        """Open an app's profile; the action defaults to "open"."""
        query = {"action": action or "open"}
        query.update(params or {})
        return _link("apps", app_id, query)

    def send(self, category: str, data: bytes = b"", conversation_id: str = "") -> str:
        """Share ``data`` of ``category``, optionally into a given conversation."""
        query = {"category": category}
        if data:
            query["data"] = quote_plus(base64.b64encode(bytes(data)).decode(), safe="")
        if conversation_id:
            query["conversation"] = conversation_id
        return _link("send", query=query)


URL = UrlScheme()