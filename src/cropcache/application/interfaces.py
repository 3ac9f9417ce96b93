from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class DecodedImage:
    pixels: Any
    width: int
    height: int


class IRasterEngine(ABC):
    """Interface for decoding, resampling and encoding raster images."""

    @abstractmethod
    def sniff_mime(self, path: Path) -> Optional[str]:
        """Return the MIME type detected from the content of *path*, if any."""
        pass

    @abstractmethod
    def decode(self, path: Path, mime: str) -> DecodedImage:
        """
        Read *path* and return its pixels with natural dimensions.
        Raises DecodeError when the file cannot be decoded.
        """
        pass

    @abstractmethod
    def new_canvas(self, width: int, height: int) -> Any:
        """Allocate an opaque destination canvas."""
        pass

    @abstractmethod
    def set_alpha_mode(self, canvas: Any, blend: bool, save_alpha: bool) -> None:
        """
        Configure alpha handling on *canvas*.
        Must be called before resample() for transparency to survive.
        """
        pass

    @abstractmethod
    def resample(
        self,
        canvas: Any,
        pixels: Any,
        dst_x: int,
        dst_y: int,
        src_x: int,
        src_y: int,
        dst_w: int,
        dst_h: int,
        src_w: int,
        src_h: int,
    ) -> None:
        """Resize the source rectangle of *pixels* into the canvas rectangle."""
        pass

    @abstractmethod
    def encode(self, canvas: Any, path: Path, mime: str, level: int) -> None:
        """
        Write *canvas* to *path*.
        *level* is the JPEG quality (1-100) or PNG compression level (1-9).
        Raises EncodeError on failure.
        """
        pass


class ITranscoder(ABC):
    """Interface for converting an encoded raster file to another format."""

    @abstractmethod
    def convert(self, src: Path, dst: Path, quality: int) -> None:
        """Convert *src* into *dst*. Raises TranscodeError on failure."""
        pass
