"""Schema helpers for the cropcache settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_PNG_COMPRESSION,
    DEFAULT_WEBP,
    JPEG_QUALITY_RANGE,
    PNG_COMPRESSION_RANGE,
)


SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "cropcache/settings.schema.json",
    "type": "object",
    "required": ["schema", "cache_dir", "jpeg_quality", "png_compression", "webp"],
    "properties": {
        "schema": {"const": "cropcache/settings@1"},
        "cache_dir": {"type": "string", "minLength": 1},
        "jpeg_quality": {
            "type": "integer",
            "minimum": JPEG_QUALITY_RANGE[0],
            "maximum": JPEG_QUALITY_RANGE[1],
        },
        "png_compression": {
            "type": "integer",
            "minimum": PNG_COMPRESSION_RANGE[0],
            "maximum": PNG_COMPRESSION_RANGE[1],
        },
        "webp": {"type": "boolean"},
    },
    "additionalProperties": True,
}


DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "cropcache/settings@1",
    "cache_dir": "cache",
    "jpeg_quality": DEFAULT_JPEG_QUALITY,
    "png_compression": DEFAULT_PNG_COMPRESSION,
    "webp": DEFAULT_WEBP,
}


_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result.

    Raises :class:`jsonschema.ValidationError` when the merged document does
    not satisfy :data:`SETTINGS_SCHEMA`.
    """

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key == "cache_dir" and value not in {None, ""}:
                try:
                    merged[key] = os.fspath(value)
                except TypeError:
                    continue
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults"]
