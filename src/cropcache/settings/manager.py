"""Settings file management with validation."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "cropcache" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "cropcache" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cropcache" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "cropcache" / "settings.json"
    return Path.home() / ".config" / "cropcache" / "settings.json"


class SettingsManager:
    """Load, validate and persist pipeline settings."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, falling back to defaults if missing."""

        path = self.path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Could not read settings {path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"Settings file {path} must contain a JSON object")
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc

    def save(self) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        write_json(path, self._data)

    def get(self, key: str, default: Any | None = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*, validate, and persist the change."""

        candidate = dict(self._data)
        candidate[key] = value
        try:
            self._data = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self.save()


__all__ = ["SettingsManager", "default_settings_path"]
