import sys
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


ImageFactory = Callable[..., Path]


@pytest.fixture()
def make_image(tmp_path: Path) -> ImageFactory:
    """Write a solid-colour image under ``tmp_path / "src"`` and return its path."""

    source_dir = tmp_path / "src"
    source_dir.mkdir(exist_ok=True)

    def _make(
        name: str,
        size: tuple[int, int] = (400, 300),
        *,
        fmt: str = "JPEG",
        mode: str = "RGB",
        color=(200, 40, 40),
        directory: Path | None = None,
    ) -> Path:
        target_dir = directory or source_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        Image.new(mode, size, color).save(path, format=fmt)
        return path

    return _make


@pytest.fixture()
def transparent_png(tmp_path: Path) -> Path:
    """100x100 PNG: left half fully transparent, right half opaque red."""

    path = tmp_path / "src" / "sticker.png"
    path.parent.mkdir(exist_ok=True)
    image = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    image.paste((255, 0, 0, 255), (50, 0, 100, 100))
    image.save(path, format="PNG")
    return path


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture()
def make_mpo(tmp_path: Path) -> ImageFactory:
    """Write a two-frame multi-picture JPEG, as phone cameras produce."""

    def _make(name: str = "phone.jpg", size: tuple[int, int] = (400, 300)) -> Path:
        path = tmp_path / "src" / name
        path.parent.mkdir(exist_ok=True)
        first = Image.new("RGB", size, (30, 120, 200))
        second = Image.new("RGB", size, (200, 120, 30))
        first.save(path, format="MPO", save_all=True, append_images=[second])
        return path

    return _make
