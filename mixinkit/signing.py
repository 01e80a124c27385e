"""Request signatures: a SHA-256 over method, path and body."""

from __future__ import annotations

import hashlib
from urllib.parse import urlsplit


def sign_raw(method: str, uri: str, body: bytes | str | None = b"") -> str:
    """Hex SHA-256 of method, URI and body joined together."""
    if body is None:
        body = b""
    elif isinstance(body, str):
        body = body.encode()
    return hashlib.sha256(method.encode() + uri.encode() + bytes(body)).hexdigest()


def trim_url_host(url: str) -> str:
    """The URL from its path on, without scheme and host; "/" when there is no path."""
    path = urlsplit(url).path
    if path in ("", "/"):
        return "/"
    index = url.find(path)
    return url[index:] if index >= 0 else url