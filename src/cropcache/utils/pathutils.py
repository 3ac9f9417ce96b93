"""Filesystem helpers shared by the cache store and the transcoder."""

from __future__ import annotations

import logging
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..config import CACHE_DIR_MODE, TEMP_PREFIX

LOGGER = logging.getLogger(__name__)


def ensure_dir(path: Path, mode: int = CACHE_DIR_MODE) -> Path:
    """Create *path* and its parents if needed and return it."""

    path.mkdir(mode=mode, parents=True, exist_ok=True)
    return path


def safe_unlink(path: Path) -> bool:
    """Delete *path*, returning ``False`` when it was already gone.

    Only regular files are removed.  A file that vanishes between the check
    and the unlink (a concurrent flush, for instance) is not an error.
    """

    if not path.is_file():
        return False
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def temp_sibling(path: Path) -> Path:
    """Return a unique hidden temp path in the directory of *path*.

    The temp file keeps the final suffix so encoders that sniff the format
    from the extension still pick the right one.
    """

    return path.with_name(f"{TEMP_PREFIX}{uuid.uuid4().hex}-{path.name}")


@contextmanager
def atomic_path(path: Path) -> Iterator[Path]:
    """Yield a temp path and move it over *path* once the block succeeds.

    The rename is atomic on the same filesystem, so a concurrent reader sees
    either no file or the complete one.  On error the temp file is removed
    and the exception propagates.
    """

    tmp_path = temp_sibling(path)
    try:
        yield tmp_path
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            LOGGER.warning("Could not remove temp file %s", tmp_path)
        raise
