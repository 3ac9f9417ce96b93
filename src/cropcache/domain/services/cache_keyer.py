"""Deterministic, filesystem-safe cache keys for thumbnails.

A key looks like ``summer-beach-200x100-1a2b3c4d``: the transliterated base
name, the requested size, and a short hash of the source file name.

The hash covers the file name only.  Two sources with the same basename in
different directories share the hash, and rewriting a file in place does
not change its key.  Keys are a best-effort cache identity, not a content
checksum.
"""

from __future__ import annotations

import re
import unicodedata
from os import PathLike
from pathlib import Path
from typing import Optional, Union

from ...utils.hashutils import text_xxh32

_ACCENTED = (
    "ÀÁÂÃÄÅÆÇÈÉÊËÌÍÎÏÐÑÒÓÔÕÖØÙÚÛÜüÝÞß"
    "àáâãäåæçèéêëìíîïðñòóôõöøùúûýýþÿRr"
)
_FOLDED = (
    "aaaaaaaceeeeiiiidnoooooouuuuuybs"
    "aaaaaaaceeeeiiiidnoooooouuuyybyrr"
)
_PUNCTUATION = "\"!@#$%&*()_-+={[}]/?;:.,\\'<>°ºª"

_TRANSLITERATION = str.maketrans(
    _ACCENTED + _PUNCTUATION,
    _FOLDED + " " * len(_PUNCTUATION),
)

_HTML_ESCAPES = {
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#039;",
    "<": "&lt;",
    ">": "&gt;",
}

_HYPHEN_RUNS = re.compile(r"-{2,}")
_DISALLOWED = re.compile(r"[^a-z0-9 ]")

FALLBACK_NAME = "image"

StrPath = Union[str, "PathLike[str]"]


def _escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


def _fold_char(char: str) -> str:
    if char.isascii():
        return char
    decomposed = unicodedata.normalize("NFKD", char)
    ascii_only = decomposed.encode("ascii", "ignore").decode("ascii")
    return ascii_only or " "


def sanitize_name(filename: str) -> str:
    """Return the human-readable part of a key for *filename*.

    *filename* is the stem, without extension.  Accented Latin letters fold
    to ASCII, punctuation and symbols turn into separators, and whitespace
    runs become single hyphens.
    """

    text = unicodedata.normalize("NFC", filename).lower()
    text = _escape_html(text).translate(_TRANSLITERATION)
    text = "".join(_fold_char(char) for char in text).lower()
    text = _DISALLOWED.sub(" ", text).strip()
    text = _HYPHEN_RUNS.sub("-", text.replace(" ", "-")).strip("-")
    return text or FALLBACK_NAME


def source_hash(source: StrPath) -> str:
    """Return the short hash identifying *source* by its file name."""

    return text_xxh32(Path(source).name)


def size_suffix(width: Optional[int], height: Optional[int]) -> str:
    suffix = f"-{width}" if width else ""
    if height:
        suffix += f"x{height}"
    return suffix


def derive_key(source: StrPath, width: int, height: Optional[int] = None) -> str:
    """Return the cache key for *source* at the requested size.

    Pass *height* only when the caller asked for it explicitly; a height
    derived from the aspect ratio must not appear in the key.
    """

    path = Path(source)
    return f"{sanitize_name(path.stem)}{size_suffix(width, height)}-{source_hash(path)}"


def split_key(key: str) -> tuple[str, str]:
    """Split *key* into ``(name_and_size, hash)``."""

    head, _, digest = key.rpartition("-")
    return head, digest
