"""Mixin Network keys, transactions, kernel RPC, NFO memos and messenger helpers."""

__version__ = "0.1.0"