"""Hashing utilities."""

from __future__ import annotations

import xxhash


def bytes_xxh3(data: bytes) -> str:
    """Return the XXH3 128-bit hash of an in-memory payload."""

    return xxhash.xxh3_128_hexdigest(data)


def text_xxh3(text: str) -> str:
    return bytes_xxh3(text.encode("utf-8"))
