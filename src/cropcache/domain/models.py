"""Value objects shared by the thumbnail pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..errors import InvalidDimensionsError, SourceNotFoundError, UnsupportedMediaTypeError


@dataclass(frozen=True)
class SourceImage:
    """A validated source raster on disk.

    Natural dimensions are not stored here: they are only read when a cache
    miss forces a decode.
    """

    path: Path
    mime: str


@dataclass(frozen=True)
class CropRect:
    """Source rectangle sampled for a crop-to-fill resize."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class ThumbnailRequest:
    """Everything one ``make`` call needs, fixed once validation succeeds.

    ``height`` is ``None`` when the caller let the source aspect ratio decide
    it; the key then carries no height suffix.
    """

    source: SourceImage
    width: int
    height: Optional[int]
    key: str
    native_ext: str


class ThumbnailStatus(Enum):
    HIT = "hit"
    GENERATED = "generated"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"
    INVALID_SIZE = "invalid_size"


@dataclass(frozen=True)
class ThumbnailResult:
    status: ThumbnailStatus
    path: Optional[Path] = None
    message: Optional[str] = None
    # Set when WebP output was requested but the conversion failed; ``path``
    # then points at the native-format entry.
    transcode_error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status in (ThumbnailStatus.HIT, ThumbnailStatus.GENERATED)

    @property
    def cache_hit(self) -> bool:
        return self.status is ThumbnailStatus.HIT

    def raise_for_status(self) -> "ThumbnailResult":
        """Raise the matching :mod:`cropcache.errors` class for a rejected request."""

        error = _STATUS_ERRORS.get(self.status)
        if error is not None:
            raise error(self.message or self.status.value)
        return self

    def __str__(self) -> str:
        if self.path is not None:
            return str(self.path)
        return self.message or self.status.value


_STATUS_ERRORS = {
    ThumbnailStatus.NOT_FOUND: SourceNotFoundError,
    ThumbnailStatus.UNSUPPORTED: UnsupportedMediaTypeError,
    ThumbnailStatus.INVALID_SIZE: InvalidDimensionsError,
}
