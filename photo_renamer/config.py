"""
Configuration constants for the photo renamer.
"""
import re
from dataclasses import dataclass
from typing import FrozenSet

# --- File Type Definitions ---
IMAGE_EXTS = frozenset({'.jpg', '.jpeg', '.heic'})
VIDEO_EXTS = frozenset({'.mp4', '.mov'})

# --- Metadata Parsing ---
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
    'Image DateTime',
]

# --- Filename Dates ---
# Year, month, day are mandatory; hour/minute/second each optional.
FILENAME_DATE_PATTERN = re.compile(
    r'(\d{4})[._-]?(\d{2})[._-]?(\d{2})'
    r'(?:[._-]?(\d{2}))?(?:[._-]?(\d{2}))?(?:[._-]?(\d{2}))?',
    re.ASCII,
)

# "YYYY-MM-DD HH.MM.SS", optionally followed by a collision counter "_N"
CANONICAL_STEM_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2} \d{2}\.\d{2}\.\d{2}(?:_\d+)?', re.ASCII)

DEFAULT_HOUR = "14"
DEFAULT_MINUTE = "00"
DEFAULT_SECOND = "00"

MIN_YEAR = 1970
MAX_YEAR = 2050

# --- Hashing ---
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading


@dataclass(frozen=True)
class OrganizerSettings:
    """
    Immutable run configuration handed to the classifier and the engine.
    """
    image_exts: FrozenSet[str] = IMAGE_EXTS
    video_exts: FrozenSet[str] = VIDEO_EXTS
    dry_run: bool = False
    # Set the mtime of files dated from their filename to that date
    retime_from_filename: bool = True
