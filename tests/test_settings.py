from __future__ import annotations

import json
from pathlib import Path

import pytest

from cropcache.errors import SettingsLoadError, SettingsValidationError
from cropcache.settings import DEFAULT_SETTINGS, SettingsManager, default_settings_path, merge_with_defaults


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    assert manager.get("jpeg_quality") == 75
    assert manager.get("png_compression") == 5
    assert manager.get("webp") is False
    assert not (tmp_path / "settings.json").exists()


def test_file_overrides_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"jpeg_quality": 90, "webp": True}), encoding="utf-8")
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert manager.get("jpeg_quality") == 90
    assert manager.get("webp") is True
    assert manager.get("png_compression") == DEFAULT_SETTINGS["png_compression"]


@pytest.mark.parametrize(
    "payload",
    [{"jpeg_quality": 0}, {"jpeg_quality": 101}, {"png_compression": 10}, {"webp": "yes"}, {"cache_dir": ""}],
)
def test_invalid_values_rejected(tmp_path: Path, payload) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps(payload), encoding="utf-8")
    manager = SettingsManager(path=settings_path)
    with pytest.raises(SettingsValidationError):
        manager.load()


def test_malformed_json(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        SettingsManager(path=settings_path).load()


def test_non_object_json(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        SettingsManager(path=settings_path).load()


def test_set_persists(tmp_path: Path) -> None:
    settings_path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    manager.set("cache_dir", tmp_path / "thumbs")
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["cache_dir"] == str(tmp_path / "thumbs")

    reloaded = SettingsManager(path=settings_path)
    reloaded.load()
    assert reloaded.get("cache_dir") == str(tmp_path / "thumbs")


def test_set_rejects_invalid_value(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    with pytest.raises(SettingsValidationError):
        manager.set("png_compression", 0)
    assert manager.get("png_compression") == 5


def test_merge_with_defaults_keeps_unknown_keys() -> None:
    merged = merge_with_defaults({"extra": 1})
    assert merged["extra"] == 1
    assert merged["schema"] == "cropcache/settings@1"


def test_default_settings_path_honours_xdg(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("os.name", "posix")
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_settings_path() == tmp_path / "cropcache" / "settings.json"
