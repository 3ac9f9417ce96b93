"""Hashing utilities."""

from __future__ import annotations

import xxhash


def text_xxh32(text: str) -> str:
    """Return the XXH32 hash of *text* as 8 lowercase hex characters.

    XXH32 is a fast non-cryptographic checksum in the same class as CRC32;
    the digest is short enough to embed in file names.
    """

    return xxhash.xxh32(text.encode("utf-8")).hexdigest()
