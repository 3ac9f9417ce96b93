"""Custom exception hierarchy for cropcache."""

from __future__ import annotations


class CropCacheError(Exception):
    """Base class for all custom errors raised by cropcache."""


# --- 3-layer hierarchy ---

class DomainError(CropCacheError):
    """Base class for request validation errors."""


class InfrastructureError(CropCacheError):
    """Base class for filesystem, raster and transcode errors."""


class SettingsError(CropCacheError):
    """Base class for settings related failures."""


# --- Domain errors ---

class SourceNotFoundError(DomainError):
    """Raised when the source image does not exist."""


class UnsupportedMediaTypeError(DomainError):
    """Raised when the source is neither a JPEG nor a PNG image."""


class InvalidDimensionsError(DomainError):
    """Raised when a requested width or height is not a positive integer."""


# --- Infrastructure errors ---

class CacheDirCreationError(InfrastructureError):
    """Raised when the cache root cannot be created."""


class DecodeError(InfrastructureError):
    """Raised when a source image cannot be read or decoded."""


class EncodeError(InfrastructureError):
    """Raised when a thumbnail cannot be encoded or written to the cache."""


class TranscodeError(InfrastructureError):
    """Raised when an encoded thumbnail cannot be converted to WebP."""


# --- Settings errors ---

class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
