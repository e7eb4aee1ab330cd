import os
from datetime import datetime
from pathlib import Path

import piexif
import pytest
from PIL import Image

from photo_renamer.models import ResolvedDate


class FakeMetadataStore:
    """Stands in for ExifDateStore; records every call."""

    def __init__(self, dates=None, write_error=None):
        self.dates = dict(dates or {})
        self.write_error = write_error
        self.reads = []
        self.writes = []

    def read_date_taken(self, path: Path):
        self.reads.append(path.name)
        return self.dates.get(path.name)

    def write_date_taken(self, path: Path, date: ResolvedDate):
        if self.write_error:
            raise self.write_error
        self.writes.append((path.name, date))


@pytest.fixture
def metadata_factory():
    """FakeMetadataStore constructor, for tests that need preset dates or a write error."""
    return FakeMetadataStore


@pytest.fixture
def fake_metadata(metadata_factory):
    return metadata_factory()


@pytest.fixture
def make_jpeg(tmp_path):
    """Factory writing a small real JPEG, optionally with DateTimeOriginal set."""
    def _make(name, date_taken=None, directory=None):
        path = (directory or tmp_path) / name
        img = Image.new("RGB", (8, 8), "red")
        if date_taken:
            exif_bytes = piexif.dump({"Exif": {piexif.ExifIFD.DateTimeOriginal: date_taken.encode("ascii")}})
            img.save(path, "JPEG", exif=exif_bytes)
        else:
            img.save(path, "JPEG")
        return path
    return _make


@pytest.fixture
def set_mtime():
    def _set(path: Path, when: datetime):
        os.utime(path, (when.timestamp(), when.timestamp()))
    return _set
