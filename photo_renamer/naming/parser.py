"""
Filename date extraction and canonical name formatting.
"""
from typing import Optional

from .. import config
from ..models import FilenameDateMatch, ResolvedDate


def parse_filename_date(name: str) -> Optional[FilenameDateMatch]:
    """
    Finds the first date-like run of digits anywhere in `name`.

    Accepts YYYY MM DD optionally separated by '.', '_' or '-', followed by up
    to three two-digit groups (hour, minute, second). Missing time groups get
    the defaults from config. Calendar ranges are not checked here.

    Examples:
        IMG_20230502_143015.jpg  -> 2023 05 02 14 30 15
        photo_2023-05-02.heic    -> 2023 05 02 14 00 00
    """
    m = config.FILENAME_DATE_PATTERN.search(name)
    if not m:
        return None

    year, month, day, hour, minute, second = m.groups()
    return FilenameDateMatch(
        year=year,
        month=month,
        day=day,
        hour=hour or config.DEFAULT_HOUR,
        minute=minute or config.DEFAULT_MINUTE,
        second=second or config.DEFAULT_SECOND,
    )


def is_canonical_stem(stem: str) -> bool:
    """True if the stem is already 'YYYY-MM-DD HH.MM.SS' (optionally '_N')."""
    return config.CANONICAL_STEM_PATTERN.fullmatch(stem) is not None


def format_canonical_stem(date: ResolvedDate) -> str:
    return date.canonical_stem()


def format_exif_datetime(date: ResolvedDate) -> str:
    """EXIF wire format, 'YYYY:MM:DD HH:MM:SS'."""
    return date.exif_string()


def parse_exif_datetime(value: str) -> Optional[ResolvedDate]:
    """
    Parses an EXIF 'YYYY:MM:DD HH:MM:SS' string.
    Returns None for blank or malformed values (cameras write '0000:00:00 00:00:00').
    """
    clean = value.strip().rstrip('\x00')
    # Drop sub-second precision some writers append
    if "." in clean:
        clean = clean.split(".")[0]

    parts = clean.replace(' ', ':').split(':')
    if len(parts) != 6 or not all(p.isdigit() for p in parts):
        return None

    date = ResolvedDate(*(int(p) for p in parts))
    if date.year == 0 or date.month == 0 or date.day == 0:
        return None
    return date
