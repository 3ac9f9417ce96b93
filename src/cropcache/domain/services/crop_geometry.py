"""Crop-to-fill geometry.

Given the natural size of a source image and a target box, compute the
source rectangle that, once resized to the box, fills it completely without
distortion.  Overflow is discarded symmetrically from the longer axis.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from ..models import CropRect


def round_half_up(value: float) -> int:
    """Round positive *value* to the nearest integer, halves going up.

    Python's :func:`round` rounds halves to even, which would shift centred
    offsets by a pixel depending on parity.
    """

    return int(math.floor(value + 0.5))


def derive_height(src_w: int, src_h: int, dst_w: int) -> int:
    """Return the height that keeps the source aspect ratio at *dst_w*."""

    return max(1, round_half_up(dst_w * src_h / src_w))


def compute_crop(
    src_w: int,
    src_h: int,
    dst_w: int,
    dst_h: Optional[int] = None,
) -> Tuple[int, CropRect]:
    """Return ``(output_height, rect)`` for a centre crop of the source.

    When *dst_h* is ``None`` the output height follows the source aspect
    ratio and the full source is used.  Otherwise the axis whose scale factor
    is larger gets cropped so that ``rect.width / rect.height`` matches
    ``dst_w / dst_h`` within a pixel of rounding.
    """

    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"source dimensions must be positive, got {src_w}x{src_h}")
    if dst_w <= 0 or (dst_h is not None and dst_h <= 0):
        raise ValueError(f"target dimensions must be positive, got {dst_w}x{dst_h}")

    if dst_h is None:
        return derive_height(src_w, src_h, dst_w), CropRect(0, 0, src_w, src_h)

    # Compare src_w / dst_w against src_h / dst_h without float error.
    wide = src_w * dst_h
    tall = src_h * dst_w

    if wide > tall:
        crop_w = min(src_w, max(1, round_half_up(src_h * dst_w / dst_h)))
        offset = round_half_up((src_w - crop_w) / 2)
        return dst_h, CropRect(offset, 0, crop_w, src_h)

    if tall > wide:
        crop_h = min(src_h, max(1, round_half_up(src_w * dst_h / dst_w)))
        offset = round_half_up((src_h - crop_h) / 2)
        return dst_h, CropRect(0, offset, src_w, crop_h)

    return dst_h, CropRect(0, 0, src_w, src_h)
