"""Disk-backed thumbnail cache: one flat directory, one file per entry."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ...config import CACHE_DIR_MODE, CACHE_EXTENSIONS, TEMP_PREFIX, WEBP_EXTENSION
from ...domain.services.cache_keyer import split_key
from ...errors import CacheDirCreationError, EncodeError
from ...utils.pathutils import atomic_path, ensure_dir, safe_unlink, temp_sibling

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cache file name split back into its key components."""

    path: Path
    key: str
    ext: str

    @property
    def source_hash(self) -> str:
        return split_key(self.key)[1]

    @classmethod
    def parse(cls, path: Path) -> Optional["CacheEntry"]:
        """Return the entry for *path*, or ``None`` if it is not one."""

        name = path.name
        if name.startswith(TEMP_PREFIX) or name.startswith("."):
            return None
        key, dot, ext = name.rpartition(".")
        if not dot or not key or ext not in CACHE_EXTENSIONS:
            return None
        head, digest = split_key(key)
        if not head or not digest:
            return None
        return cls(path=path, key=key, ext=ext)


class CacheStore:
    """Path naming, existence checks, atomic writes and deletion.

    Presence of ``{root}/{key}.{ext}`` is the only record of an entry; there
    is no manifest.  Writes land in a hidden temp file first and are renamed
    into place, so a hit check never observes a partial thumbnail.
    """

    def __init__(self, root: Path, *, mode: int = CACHE_DIR_MODE):
        self._root = Path(root)
        try:
            ensure_dir(self._root, mode)
        except OSError as exc:
            raise CacheDirCreationError(f"Could not create cache folder {self._root}: {exc}") from exc
        if not self._root.is_dir():
            raise CacheDirCreationError(f"Cache path {self._root} is not a directory")

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str, ext: str) -> Path:
        return self._root / f"{key}.{ext}"

    def exists(self, key: str, ext: str) -> bool:
        return self.path_for(key, ext).is_file()

    def lookup(self, key: str, native_ext: str, *, prefer_webp: bool = False) -> Path | None:
        """Return the cached path for *key*, or ``None`` on a miss.

        With *prefer_webp* a ``.webp`` entry wins over the native one.
        """

        candidates = [native_ext]
        if prefer_webp:
            candidates.insert(0, WEBP_EXTENSION)
        for ext in candidates:
            path = self.path_for(key, ext)
            if path.is_file():
                return path
        return None

    @contextmanager
    def atomic_entry(self, key: str, ext: str) -> Iterator[Path]:
        """Yield a temp path to write the entry into; publish it on success."""

        target = self.path_for(key, ext)
        try:
            with atomic_path(target) as tmp_path:
                yield tmp_path
        except OSError as exc:
            raise EncodeError(f"Could not write cache entry {target}: {exc}") from exc

    @contextmanager
    def staged_entry(self, key: str, ext: str) -> Iterator[Path]:
        """Yield a hidden temp path for *key* that is published only on request.

        Whatever is still at the temp path when the block exits is removed,
        so an entry that was never passed to :meth:`publish` stays invisible.
        """

        tmp_path = temp_sibling(self.path_for(key, ext))
        try:
            yield tmp_path
        finally:
            safe_unlink(tmp_path)

    def publish(self, tmp_path: Path, key: str, ext: str) -> Path:
        """Rename a staged file into place as ``{key}.{ext}``."""

        target = self.path_for(key, ext)
        try:
            os.replace(tmp_path, target)
        except OSError as exc:
            raise EncodeError(f"Could not publish cache entry {target}: {exc}") from exc
        return target

    def write(self, key: str, data: bytes, ext: str) -> Path:
        """Store already-encoded *data* under *key* and return its path."""

        with self.atomic_entry(key, ext) as tmp_path:
            tmp_path.write_bytes(data)
        return self.path_for(key, ext)

    def entries(self) -> Iterator[CacheEntry]:
        for path in sorted(self._root.iterdir()):
            if not path.is_file():
                continue
            entry = CacheEntry.parse(path)
            if entry is not None:
                yield entry

    def flush(self, match_hash: str | None = None) -> int:
        """Delete cache entries and return how many were removed.

        With *match_hash* only entries whose key ends in that source hash
        go, which covers every size variant of one source.  Without it the
        whole cache is emptied.  Temp files of in-flight writes are left
        alone.
        """

        removed = 0
        for entry in list(self.entries()):
            if match_hash is not None and entry.source_hash != match_hash:
                continue
            if safe_unlink(entry.path):
                removed += 1
        LOGGER.info(
            "Flushed %d cache entr%s from %s%s",
            removed,
            "y" if removed == 1 else "ies",
            self._root,
            f" matching {match_hash}" if match_hash else "",
        )
        return removed
