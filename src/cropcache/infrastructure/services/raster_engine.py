"""Pillow implementation of the raster engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ...application.interfaces import DecodedImage, IRasterEngine
from ...config import MIME_JPEG, MIME_PNG
from ...errors import DecodeError, EncodeError

LOGGER = logging.getLogger(__name__)

_OPAQUE_BLACK = (0, 0, 0)

# Multi-picture JPEGs from phone cameras open as MPO but are plain JPEG on disk.
_FORMAT_MIME = {"JPEG": MIME_JPEG, "MPO": MIME_JPEG, "PNG": MIME_PNG}


@dataclass
class Canvas:
    """Destination image plus the alpha flags that govern drawing into it."""

    image: Image.Image
    blend: bool = True
    save_alpha: bool = False


class PillowRasterEngine(IRasterEngine):
    """
    Decodes JPEG/PNG sources and writes thumbnails using Pillow.
    """

    def __init__(self, resample_filter: Image.Resampling = Image.Resampling.LANCZOS):
        self._filter = resample_filter

    def sniff_mime(self, path: Path) -> Optional[str]:
        try:
            with Image.open(path) as img:
                fmt = img.format or ""
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            LOGGER.debug("Pillow could not identify %s: %s", path, e)
            return None
        return _FORMAT_MIME.get(fmt, Image.MIME.get(fmt))

    def decode(self, path: Path, mime: str) -> DecodedImage:
        try:
            with Image.open(path) as img:
                img.load()
                # JPEGs may arrive as CMYK or greyscale; PNG palettes may carry
                # a transparency chunk that only survives an RGBA conversion.
                mode = "RGBA" if mime == MIME_PNG else "RGB"
                pixels = img.convert(mode) if img.mode != mode else img.copy()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Could not decode {path}: {e}") from e
        return DecodedImage(pixels=pixels, width=pixels.width, height=pixels.height)

    def new_canvas(self, width: int, height: int) -> Canvas:
        return Canvas(image=Image.new("RGB", (width, height), _OPAQUE_BLACK))

    def set_alpha_mode(self, canvas: Canvas, blend: bool, save_alpha: bool) -> None:
        canvas.blend = blend
        canvas.save_alpha = save_alpha
        if save_alpha and canvas.image.mode != "RGBA":
            # Pixels drawn so far become opaque; only later draws keep alpha.
            canvas.image = canvas.image.convert("RGBA")

    def resample(
        self,
        canvas: Canvas,
        pixels: Image.Image,
        dst_x: int,
        dst_y: int,
        src_x: int,
        src_y: int,
        dst_w: int,
        dst_h: int,
        src_w: int,
        src_h: int,
    ) -> None:
        region = pixels.resize(
            (dst_w, dst_h),
            self._filter,
            box=(src_x, src_y, src_x + src_w, src_y + src_h),
        )
        target = canvas.image
        if canvas.blend and region.mode == "RGBA":
            # Composite over what is already on the canvas.
            target.paste(region, (dst_x, dst_y), region)
            return
        if region.mode != target.mode:
            region = region.convert(target.mode)
        target.paste(region, (dst_x, dst_y))

    def encode(self, canvas: Canvas, path: Path, mime: str, level: int) -> None:
        image = canvas.image
        if image.mode == "RGBA" and not canvas.save_alpha:
            image = image.convert("RGB")
        try:
            if mime == MIME_JPEG:
                if image.mode != "RGB":
                    image = image.convert("RGB")
                image.save(path, format="JPEG", quality=level)
            elif mime == MIME_PNG:
                image.save(path, format="PNG", compress_level=level)
            else:
                raise EncodeError(f"Cannot encode {mime}")
        except OSError as e:
            raise EncodeError(f"Could not write {path}: {e}") from e
