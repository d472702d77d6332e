"""
Pytest configuration and fixtures for babysort tests.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pytest
from PIL import Image
from PIL.ExifTags import Base

from babysort.core.config import Configuration
from babysort.core.types import Photo
from babysort.organization.naming import parse_pattern

BIRTH_DATE = datetime(2024, 1, 1)


@pytest.fixture
def make_config() -> Callable[..., Configuration]:
    """Factory for configurations for a baby named Ada born on 2024-01-01."""

    def _make_config(**overrides) -> Configuration:
        values = {
            "name": "Ada",
            "birth_date": BIRTH_DATE,
            "naming_pattern": parse_pattern("%n %g %s"),
        }
        values.update(overrides)
        return Configuration(**values)

    return _make_config


@pytest.fixture
def config(make_config) -> Configuration:
    """Default configuration."""
    return make_config()


@pytest.fixture
def write_photo() -> Callable[..., Path]:
    """Factory writing a fake photo file, with unique content by default."""

    def _write_photo(path: Path, content: Optional[str] = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content if content is not None else f"photo {path.name}")
        return path

    return _write_photo


@pytest.fixture
def make_photo() -> Callable[..., Photo]:
    """Factory for photos scanned from the directory they sit in."""

    def _make_photo(path: Path, timestamp: Optional[datetime] = None, **kwargs) -> Photo:
        values = {
            "scan_root": path.parent,
            "timestamp": timestamp,
            "timestamp_resolved": True,
        }
        values.update(kwargs)
        return Photo(path=path, **values)

    return _make_photo


@pytest.fixture
def exif_jpeg() -> Callable[..., Path]:
    """Factory writing a real JPEG carrying an EXIF DateTime tag."""

    def _exif_jpeg(path: Path, taken: datetime, color: str = "red") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", (32, 32), color=color)
        exif = Image.Exif()
        exif[Base.DateTime] = taken.strftime("%Y:%m:%d %H:%M:%S")
        img.save(path, "JPEG", exif=exif)
        return path

    return _exif_jpeg
