"""WebP transcoding with Pillow's WebP encoder."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError, features

from ...application.interfaces import ITranscoder
from ...errors import TranscodeError

LOGGER = logging.getLogger(__name__)


def webp_available() -> bool:
    """Return whether the installed Pillow was built with WebP support."""

    return bool(features.check("webp"))


class PillowWebPTranscoder(ITranscoder):
    """Re-encode a JPEG or PNG file as lossy WebP."""

    def convert(self, src: Path, dst: Path, quality: int) -> None:
        if not webp_available():
            raise TranscodeError("Pillow was built without WebP support")
        try:
            with Image.open(src) as img:
                img.load()
                if img.mode not in ("RGB", "RGBA"):
                    has_alpha = "A" in img.getbands() or "transparency" in img.info
                    img = img.convert("RGBA" if has_alpha else "RGB")
                img.save(dst, format="WEBP", quality=quality)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise TranscodeError(f"Could not convert {src} to WebP: {exc}") from exc
        LOGGER.debug("Converted %s to %s", src, dst)
