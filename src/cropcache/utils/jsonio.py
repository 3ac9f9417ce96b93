"""JSON file helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .pathutils import atomic_path


def read_json(path: Path) -> Any:
    """Return the decoded JSON document stored at *path*."""

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json(path: Path, data: Any) -> None:
    """Write *data* to *path* as indented UTF-8 JSON, replacing it atomically."""

    with atomic_path(path) as tmp_path:
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
