"""cropcache

Center-cropped image thumbnails served from a disk cache.

Primary entrypoints:
 - application.services.thumbnail_pipeline (ThumbnailPipeline)
 - cli.py (Typer CLI)
"""

from .application.services.thumbnail_pipeline import ThumbnailPipeline
from .domain.models import ThumbnailResult, ThumbnailStatus

__all__ = [
    "ThumbnailPipeline",
    "ThumbnailResult",
    "ThumbnailStatus",
]
