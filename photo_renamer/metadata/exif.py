import logging
from pathlib import Path
from typing import Optional

import exifread
import piexif

from .. import config
from ..exceptions import MetadataReadError, MetadataWriteError
from ..models import ResolvedDate
from ..naming.parser import format_exif_datetime, parse_exif_datetime


class ExifDateStore:
    """
    Reads and writes the single 'date taken' value of an image.

    Strategies:
      - Read: 'exifread' (fast, Python-native, understands JPEG and HEIC).
      - Write: 'piexif' (lossless EXIF segment replacement, JPEG only).
    """

    def read_date_taken(self, path: Path) -> Optional[ResolvedDate]:
        """
        Returns the first usable date from config.DATE_TAGS, or None when the
        image carries no such tag.

        Raises:
            MetadataReadError: the file could not be opened or parsed.
        """
        try:
            with path.open('rb') as f:
                # details=False skips makernotes and thumbnails
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            raise MetadataReadError(f"ExifRead failed for {path}: {e}") from e

        for tag in config.DATE_TAGS:
            if tag not in tags:
                continue
            date = parse_exif_datetime(str(tags[tag]))
            if date is not None:
                return date
            logging.debug(f"Ignoring malformed {tag} '{tags[tag]}' in {path.name}")
        return None

    def write_date_taken(self, path: Path, date: ResolvedDate):
        """
        Sets DateTimeOriginal, DateTimeDigitized and DateTime to `date`.

        The container is rewritten in place; an interrupted write can corrupt it.

        Raises:
            MetadataWriteError: piexif could not load or insert the EXIF block
                (unsupported container such as HEIC, corrupt file, read-only file).
        """
        value = format_exif_datetime(date).encode('ascii')
        try:
            exif_dict = piexif.load(str(path))
            exif_dict.setdefault("Exif", {})
            exif_dict.setdefault("0th", {})
            exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = value
            exif_dict["Exif"][piexif.ExifIFD.DateTimeDigitized] = value
            exif_dict["0th"][piexif.ImageIFD.DateTime] = value

            # Thumbnails without their IFD make piexif.dump fail
            if exif_dict.get("thumbnail") and not exif_dict.get("1st"):
                exif_dict["thumbnail"] = None

            exif_bytes = piexif.dump(exif_dict)
            piexif.insert(exif_bytes, str(path))
        except Exception as e:
            raise MetadataWriteError(f"Could not write EXIF date to {path}: {e}") from e
