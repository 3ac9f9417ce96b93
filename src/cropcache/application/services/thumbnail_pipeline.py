"""Thumbnail pipeline: validate, key, look up, and generate on a miss."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from os import PathLike
from pathlib import Path
from typing import Iterator, Optional, Union

from ...config import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_PNG_COMPRESSION,
    DEFAULT_WEBP,
    JPEG_QUALITY_RANGE,
    MESSAGE_INVALID_SIZE,
    MESSAGE_NOT_FOUND,
    MESSAGE_UNSUPPORTED,
    MIME_PNG,
    NATIVE_EXTENSIONS,
    PNG_COMPRESSION_RANGE,
    SUPPORTED_MIME_TYPES,
    WEBP_EXTENSION,
)
from ...domain.models import SourceImage, ThumbnailRequest, ThumbnailResult, ThumbnailStatus
from ...domain.services.cache_keyer import derive_key, source_hash
from ...domain.services.crop_geometry import compute_crop
from ...errors import SettingsValidationError, TranscodeError
from ...infrastructure.services.cache_stats import PipelineStatsCollector
from ...infrastructure.services.cache_store import CacheStore
from ...infrastructure.services.raster_engine import PillowRasterEngine
from ...infrastructure.services.webp_transcoder import PillowWebPTranscoder
from ...utils.pathutils import atomic_path, safe_unlink
from ..interfaces import IRasterEngine, ITranscoder

LOGGER = logging.getLogger(__name__)

StrPath = Union[str, "PathLike[str]"]


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise SettingsValidationError(f"{name} must be an integer between {low} and {high}, got {value!r}")
    return value


class ThumbnailPipeline:
    """Center-cropped thumbnails served from a disk cache.

    ``make`` never recomputes an entry that already exists.  On a miss the
    source is decoded, cropped to fill the requested box, resampled and
    written atomically under its deterministic key; with WebP output on, the
    native file is then converted and removed.

    Validation problems come back as a :class:`ThumbnailResult` carrying a
    message.  Decode and write failures raise.  A failed WebP conversion
    only degrades the result to the native file and is kept in
    :attr:`last_transcode_error`.
    """

    def __init__(
        self,
        cache_dir: StrPath,
        quality: int = DEFAULT_JPEG_QUALITY,
        compression: int = DEFAULT_PNG_COMPRESSION,
        webp: bool = DEFAULT_WEBP,
        *,
        raster_engine: IRasterEngine | None = None,
        transcoder: ITranscoder | None = None,
        stats: PipelineStatsCollector | None = None,
    ):
        self._quality = _check_range("quality", quality, JPEG_QUALITY_RANGE)
        self._compression = _check_range("compression", compression, PNG_COMPRESSION_RANGE)
        self._webp = bool(webp)
        self._store = CacheStore(Path(cache_dir))
        self._engine = raster_engine or PillowRasterEngine()
        self._transcoder = transcoder or PillowWebPTranscoder()
        self.stats = stats or PipelineStatsCollector()
        self.last_transcode_error: Optional[TranscodeError] = None

        self._guard = threading.Lock()
        self._key_locks: dict[str, list] = {}

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def cache_dir(self) -> Path:
        return self._store.root

    @property
    def webp(self) -> bool:
        return self._webp

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    def make(self, source: StrPath, width: int, height: Optional[int] = None) -> ThumbnailResult:
        """Return the cached thumbnail for *source*, generating it if needed."""

        if width is None or width <= 0 or (height is not None and height <= 0):
            return ThumbnailResult(ThumbnailStatus.INVALID_SIZE, message=MESSAGE_INVALID_SIZE)

        path = Path(source)
        if not path.exists():
            LOGGER.debug("Source %s not found", path)
            return ThumbnailResult(ThumbnailStatus.NOT_FOUND, message=MESSAGE_NOT_FOUND)

        mime = self._engine.sniff_mime(path)
        if mime not in SUPPORTED_MIME_TYPES:
            LOGGER.debug("Source %s has unsupported type %s", path, mime)
            return ThumbnailResult(ThumbnailStatus.UNSUPPORTED, message=MESSAGE_UNSUPPORTED)

        request = ThumbnailRequest(
            source=SourceImage(path=path, mime=mime),
            width=width,
            height=height,
            key=derive_key(path, width, height),
            native_ext=NATIVE_EXTENSIONS[mime],
        )

        cached = self._lookup(request)
        if cached is not None:
            return self._hit(request, cached)

        with self._generation_lock(request.key):
            # Another thread may have produced the entry while we waited.
            cached = self._lookup(request)
            if cached is not None:
                return self._hit(request, cached)
            self.stats.record_miss()
            LOGGER.debug("Cache miss for %s", request.key)
            return self._generate(request)

    def flush(self, source: StrPath | None = None) -> int:
        """Remove every cached size of *source*, or the whole cache."""

        match = source_hash(source) if source else None
        return self._store.flush(match)

    def to_webp(self, path: StrPath, delete_original: bool = True) -> Path:
        """Convert *path* to a ``.webp`` sibling and return the new path.

        On failure the original path is returned unchanged and the error is
        kept in :attr:`last_transcode_error`.
        """

        path = Path(path)
        converted, _error = self._convert(path, path.with_suffix(f".{WEBP_EXTENSION}"), delete_original)
        return converted

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def _lookup(self, request: ThumbnailRequest) -> Path | None:
        return self._store.lookup(request.key, request.native_ext, prefer_webp=self._webp)

    def _hit(self, request: ThumbnailRequest, path: Path) -> ThumbnailResult:
        self.stats.record_hit()
        LOGGER.debug("Cache hit for %s: %s", request.key, path)
        return ThumbnailResult(ThumbnailStatus.HIT, path=path)

    def _generate(self, request: ThumbnailRequest) -> ThumbnailResult:
        source = request.source
        decoded = self._engine.decode(source.path, source.mime)
        out_h, rect = compute_crop(decoded.width, decoded.height, request.width, request.height)

        canvas = self._engine.new_canvas(request.width, out_h)
        if source.mime == MIME_PNG:
            # Alpha flags must be on the canvas before pixels are copied in.
            self._engine.set_alpha_mode(canvas, blend=False, save_alpha=True)
            level = self._compression
        else:
            level = self._quality
        self._engine.resample(
            canvas,
            decoded.pixels,
            0,
            0,
            rect.x,
            rect.y,
            request.width,
            out_h,
            rect.width,
            rect.height,
        )

        LOGGER.info(
            "Generating %s (%dx%d from %dx%d, crop %s)",
            request.key,
            request.width,
            out_h,
            decoded.width,
            decoded.height,
            rect,
        )
        if self._webp:
            return self._generate_webp(request, canvas, level)

        with self._store.atomic_entry(request.key, request.native_ext) as tmp_path:
            self._engine.encode(canvas, tmp_path, source.mime, level)
        self.stats.record_generated()
        native = self._store.path_for(request.key, request.native_ext)
        return ThumbnailResult(ThumbnailStatus.GENERATED, path=native)

    def _generate_webp(self, request: ThumbnailRequest, canvas, level: int) -> ThumbnailResult:
        # The native file stays staged until the conversion is settled, so
        # no other reader can pick it up and see it vanish afterwards.
        with self._store.staged_entry(request.key, request.native_ext) as staged:
            self._engine.encode(canvas, staged, request.source.mime, level)
            target = self._store.path_for(request.key, WEBP_EXTENSION)
            converted, error = self._convert(staged, target, delete_original=False)
            if error is not None:
                converted = self._store.publish(staged, request.key, request.native_ext)
        self.stats.record_generated()
        return ThumbnailResult(ThumbnailStatus.GENERATED, path=converted, transcode_error=error)

    def _convert(
        self, path: Path, target: Path, delete_original: bool
    ) -> tuple[Path, Optional[TranscodeError]]:
        try:
            try:
                with atomic_path(target) as tmp_path:
                    self._transcoder.convert(path, tmp_path, self._quality)
            except OSError as exc:
                raise TranscodeError(f"Could not write {target}: {exc}") from exc
        except TranscodeError as exc:
            self.last_transcode_error = exc
            self.stats.record_transcode_failure()
            LOGGER.warning("WebP conversion failed for %s, keeping original: %s", path, exc)
            return path, exc

        if delete_original and path != target:
            safe_unlink(path)
        return target, None

    @contextmanager
    def _generation_lock(self, key: str) -> Iterator[None]:
        """Serialise generation of one key inside this process.

        Other processes are covered by the atomic rename in the store.
        """

        with self._guard:
            slot = self._key_locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    self._key_locks.pop(key, None)
