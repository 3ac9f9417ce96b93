"""Default configuration values for cropcache."""

from __future__ import annotations

from typing import Final

DEFAULT_JPEG_QUALITY: Final[int] = 75
DEFAULT_PNG_COMPRESSION: Final[int] = 5
DEFAULT_WEBP: Final[bool] = False

JPEG_QUALITY_RANGE: Final[tuple[int, int]] = (1, 100)
PNG_COMPRESSION_RANGE: Final[tuple[int, int]] = (1, 9)

# Owner rwx, group/other rx.
CACHE_DIR_MODE: Final[int] = 0o755

MIME_JPEG: Final[str] = "image/jpeg"
MIME_PNG: Final[str] = "image/png"
SUPPORTED_MIME_TYPES: Final[frozenset[str]] = frozenset({MIME_JPEG, MIME_PNG})

# Cache entries are named after the decoded format, never after the source's
# own extension, so ``photo.JPG`` and ``photo.jpeg`` both land on ``.jpg``.
NATIVE_EXTENSIONS: Final[dict[str, str]] = {
    MIME_JPEG: "jpg",
    MIME_PNG: "png",
}
WEBP_EXTENSION: Final[str] = "webp"
CACHE_EXTENSIONS: Final[frozenset[str]] = frozenset({"jpg", "png", WEBP_EXTENSION})

# Prefix of the hidden temp files that in-flight writes use.  Anything in the
# cache directory starting with it is never treated as an entry.
TEMP_PREFIX: Final[str] = ".tmp-"

MESSAGE_NOT_FOUND: Final[str] = "Image not found"
MESSAGE_UNSUPPORTED: Final[str] = "Not a valid JPG or PNG image"
MESSAGE_INVALID_SIZE: Final[str] = "Width and height must be positive integers"
