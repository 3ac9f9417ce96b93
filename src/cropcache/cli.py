"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler

from .application.services.thumbnail_pipeline import ThumbnailPipeline
from .domain.services.cache_keyer import derive_key
from .errors import CropCacheError, SettingsError
from .settings import SettingsManager

app = typer.Typer(help="Center-cropped thumbnails with a disk cache")


@dataclass
class _Options:
    settings_path: Optional[Path]
    cache_dir: Optional[Path]
    quality: Optional[int]
    compression: Optional[int]
    webp: Optional[bool]


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SettingsError as exc:
            typer.echo(f"Settings error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except CropCacheError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _build_pipeline(ctx: typer.Context) -> ThumbnailPipeline:
    options: _Options = ctx.obj
    settings = SettingsManager(options.settings_path)
    settings.load()

    def pick(override, key):
        return settings.get(key) if override is None else override

    return ThumbnailPipeline(
        pick(options.cache_dir, "cache_dir"),
        quality=pick(options.quality, "jpeg_quality"),
        compression=pick(options.compression, "png_compression"),
        webp=pick(options.webp, "webp"),
    )


@app.callback()
def main(
    ctx: typer.Context,
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", "-c", help="Cache directory"),
    quality: Optional[int] = typer.Option(None, "--quality", "-q", help="JPEG quality (1-100)"),
    compression: Optional[int] = typer.Option(None, "--compression", help="PNG compression (1-9)"),
    webp: Optional[bool] = typer.Option(None, "--webp/--no-webp", help="Convert thumbnails to WebP"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log cache activity"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.obj = _Options(settings_path, cache_dir, quality, compression, webp)


@app.command()
@_handle_errors
def make(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Source JPEG or PNG image"),
    width: int = typer.Argument(..., help="Thumbnail width"),
    height: Optional[int] = typer.Option(None, "--height", help="Thumbnail height"),
) -> None:
    """Print the path of the cached thumbnail, generating it on a miss."""

    pipeline = _build_pipeline(ctx)
    result = pipeline.make(source, width, height).raise_for_status()
    if result.transcode_error is not None:
        print(f"[yellow]WebP conversion failed: {result.transcode_error}")
    typer.echo(str(result.path))


@app.command()
@_handle_errors
def flush(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(None, help="Only flush thumbnails of this source"),
) -> None:
    """Delete cached thumbnails of one source, or the whole cache."""

    pipeline = _build_pipeline(ctx)
    removed = pipeline.flush(source)
    print(f"[green]Removed {removed} cached thumbnail(s)")


@app.command()
@_handle_errors
def webp(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JPEG or PNG file"),
    keep_original: bool = typer.Option(False, "--keep-original", help="Do not delete the input file"),
) -> None:
    """Convert an image file to WebP next to the original."""

    pipeline = _build_pipeline(ctx)
    converted = pipeline.to_webp(path, delete_original=not keep_original)
    if converted == path:
        typer.echo(f"Error: {pipeline.last_transcode_error}", err=True)
        raise typer.Exit(1)
    typer.echo(str(converted))


@app.command()
def key(
    source: Path = typer.Argument(..., help="Source image path"),
    width: int = typer.Argument(..., help="Thumbnail width"),
    height: Optional[int] = typer.Option(None, "--height", help="Thumbnail height"),
) -> None:
    """Print the cache key for a source and size without touching the cache."""

    typer.echo(derive_key(source, width, height))


if __name__ == "__main__":  # pragma: no cover
    app()
