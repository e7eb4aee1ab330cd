from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from . import config


class MediaKind(Enum):
    IMAGE = "image"
    VIDEO = "video"
    UNCLASSIFIED = "unclassified"


class DateSource(Enum):
    METADATA = "metadata"
    FILENAME = "filename"
    MTIME = "mtime"


class Status(Enum):
    RENAMED = "renamed"
    ALREADY_CANONICAL = "already_canonical"
    UNCLASSIFIED = "unclassified"
    NO_DATE = "no_date"
    INVALID_DATE = "invalid_date"
    METADATA_WRITE_FAILED = "metadata_write_failed"
    RENAME_FAILED = "rename_failed"
    KEPT = "kept"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"
    HASH_FAILED = "hash_failed"
    DIRECTORY_FAILED = "directory_failed"


# METADATA_WRITE_FAILED is a partial success: the file was still renamed
FAILURE_STATUSES = {
    Status.RENAME_FAILED,
    Status.DELETE_FAILED,
    Status.HASH_FAILED,
    Status.DIRECTORY_FAILED,
}


@dataclass(frozen=True)
class FilenameDateMatch:
    """
    Raw capture groups pulled out of a filename.
    Time fields are already defaulted, calendar ranges are not checked.
    """
    year: str
    month: str
    day: str
    hour: str = config.DEFAULT_HOUR
    minute: str = config.DEFAULT_MINUTE
    second: str = config.DEFAULT_SECOND


@dataclass(frozen=True)
class ResolvedDate:
    """
    A naive local date/time. No timezone normalization is applied anywhere.
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ResolvedDate":
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second)

    @classmethod
    def from_match(cls, match: FilenameDateMatch) -> "ResolvedDate":
        return cls(
            int(match.year), int(match.month), int(match.day),
            int(match.hour), int(match.minute), int(match.second),
        )

    def is_calendar_valid(self) -> bool:
        return (
            config.MIN_YEAR <= self.year <= config.MAX_YEAR
            and 1 <= self.month <= 12
            and 1 <= self.day <= 31
        )

    def to_datetime(self) -> datetime:
        """Raises ValueError for combinations like Feb 30 or hour 60."""
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def canonical_stem(self) -> str:
        """'YYYY-MM-DD HH.MM.SS', the name every renamed file gets."""
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}.{self.minute:02d}.{self.second:02d}")

    def exif_string(self) -> str:
        """EXIF wire format, 'YYYY:MM:DD HH:MM:SS'."""
        return (f"{self.year:04d}:{self.month:02d}:{self.day:02d} "
                f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}")

    def __str__(self) -> str:
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}")


@dataclass
class FileOutcome:
    """Result of processing a single file (or directory, for listing errors)."""
    path: Path
    status: Status
    new_path: Optional[Path] = None
    source: Optional[DateSource] = None
    date: Optional[ResolvedDate] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status not in FAILURE_STATUSES


@dataclass
class RunSummary:
    """
    Per-run aggregation of file outcomes.
    """
    outcomes: List[FileOutcome] = field(default_factory=list)

    def add(self, outcome: FileOutcome) -> FileOutcome:
        self.outcomes.append(outcome)
        return outcome

    def counts(self) -> Dict[Status, int]:
        return dict(Counter(o.status for o in self.outcomes))

    def count(self, status: Status) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    def renamed(self) -> List[FileOutcome]:
        """Outcomes that ended with the file under a new name."""
        return [o for o in self.outcomes if o.new_path is not None]

    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]
