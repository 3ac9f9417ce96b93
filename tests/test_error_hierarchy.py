"""Tests for the custom error hierarchy."""

import pytest
from cropcache.errors import (
    CacheDirCreationError,
    CropCacheError,
    DecodeError,
    DomainError,
    EncodeError,
    InfrastructureError,
    InvalidDimensionsError,
    SettingsError,
    SettingsLoadError,
    SettingsValidationError,
    SourceNotFoundError,
    TranscodeError,
    UnsupportedMediaTypeError,
)


@pytest.mark.parametrize("error", [SourceNotFoundError, UnsupportedMediaTypeError, InvalidDimensionsError])
def test_validation_errors_are_domain_errors(error):
    assert issubclass(error, DomainError)
    assert isinstance(error("x"), CropCacheError)


@pytest.mark.parametrize("error", [CacheDirCreationError, DecodeError, EncodeError, TranscodeError])
def test_io_errors_are_infrastructure_errors(error):
    assert issubclass(error, InfrastructureError)
    assert isinstance(error("x"), CropCacheError)


def test_settings_errors():
    assert issubclass(SettingsLoadError, SettingsError)
    assert issubclass(SettingsValidationError, SettingsError)
    assert issubclass(SettingsError, CropCacheError)


def test_error_message():
    err = DecodeError("photo.jpg is truncated")
    assert str(err) == "photo.jpg is truncated"
