import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Optional, Set, Tuple

from ..config import OrganizerSettings
from ..exceptions import FileOperationError, MetadataReadError, MetadataWriteError
from ..metadata.exif import ExifDateStore
from ..models import DateSource, FileOutcome, MediaKind, ResolvedDate, Status
from ..naming.parser import format_canonical_stem, is_canonical_stem, parse_filename_date
from ..naming.unique import resolve_unique_stem
from ..scanning.filesystem import LocalFileSystem


class DateResolutionEngine:
    """
    Decides the capture date of one media file and renames it to
    'YYYY-MM-DD HH.MM.SS<ext>'.

    Fallback chain:
      - Images: EXIF date taken -> filename date (written back into EXIF).
                Neither -> file left alone.
      - Videos: filename date -> modification time (always available).

    Files whose stem is already canonical are skipped before anything is read,
    which makes repeated runs no-ops.
    """

    def __init__(self,
                 settings: Optional[OrganizerSettings] = None,
                 metadata: Optional[ExifDateStore] = None,
                 fs: Optional[LocalFileSystem] = None):
        self.settings = settings or OrganizerSettings()
        self.metadata = metadata or ExifDateStore()
        self.fs = fs or LocalFileSystem()
        # Dry run only: names already handed out, per directory
        self._planned: Dict[Path, Set[str]] = defaultdict(set)

    def begin_run(self):
        """Forgets the names planned by a previous dry run."""
        self._planned.clear()

    def process(self, path: Path, kind: MediaKind) -> FileOutcome:
        if kind is MediaKind.UNCLASSIFIED:
            logging.debug(f"Skipping unsupported file type: {path.name}")
            return FileOutcome(path, Status.UNCLASSIFIED)

        if is_canonical_stem(path.stem):
            logging.debug(f"Skipping already named file: {path.name}")
            return FileOutcome(path, Status.ALREADY_CANONICAL)

        if kind is MediaKind.IMAGE:
            return self._process_image(path)
        return self._process_video(path)

    # --- Policies ---

    def _process_image(self, path: Path) -> FileOutcome:
        date = self._read_metadata_date(path)
        if date is not None:
            # Already in EXIF: no write-back, only the rename
            return self._rename(path, date, DateSource.METADATA)

        date, outcome = self._filename_date(path)
        if outcome is not None:
            return outcome

        if self.settings.dry_run:
            return self._rename(path, date, DateSource.FILENAME)

        write_error = None
        try:
            self.metadata.write_date_taken(path, date)
        except MetadataWriteError as e:
            # Still renamed; the failure is reported in the outcome
            logging.warning(str(e))
            write_error = e
        self._retime(path, date)

        outcome = self._rename(path, date, DateSource.FILENAME)
        if write_error is not None and outcome.status is Status.RENAMED:
            outcome.status = Status.METADATA_WRITE_FAILED
            outcome.message = str(write_error)
        return outcome

    def _process_video(self, path: Path) -> FileOutcome:
        match = parse_filename_date(path.name)
        if match is not None:
            date = ResolvedDate.from_match(match)
            if date.is_calendar_valid():
                if not self.settings.dry_run:
                    self._retime(path, date)
                return self._rename(path, date, DateSource.FILENAME)
            logging.debug(f"Ignoring invalid filename date {date} in {path.name}")

        try:
            mtime = self.fs.modification_time(path)
        except FileOperationError as e:
            logging.error(str(e))
            return FileOutcome(path, Status.RENAME_FAILED, message=str(e))
        return self._rename(path, ResolvedDate.from_datetime(mtime), DateSource.MTIME)

    # --- Steps ---

    def _read_metadata_date(self, path: Path) -> Optional[ResolvedDate]:
        try:
            return self.metadata.read_date_taken(path)
        except MetadataReadError as e:
            # Unreadable EXIF is treated like missing EXIF
            logging.warning(str(e))
            return None

    def _filename_date(self, path: Path) -> Tuple[Optional[ResolvedDate], Optional[FileOutcome]]:
        """Returns (date, None) on success, (None, outcome) when the file must be left alone."""
        match = parse_filename_date(path.name)
        if match is None:
            logging.info(f"No date in filename: {path.name}")
            return None, FileOutcome(path, Status.NO_DATE, message="No date found")

        date = ResolvedDate.from_match(match)
        if not date.is_calendar_valid():
            logging.warning(f"Invalid date in filename: {path.name}")
            return None, FileOutcome(path, Status.INVALID_DATE, source=DateSource.FILENAME,
                                     date=date, message="Invalid date")
        return date, None

    def _retime(self, path: Path, date: ResolvedDate):
        """Aligns mtime with a filename-derived date. Failure here is not fatal."""
        if not self.settings.retime_from_filename:
            return
        try:
            when = date.to_datetime()
        except ValueError:
            logging.warning(f"Cannot set modification time to {date} for {path.name}")
            return
        try:
            if self.fs.modification_time(path) != when:
                self.fs.set_modification_time(path, when)
        except FileOperationError as e:
            logging.warning(str(e))

    def _rename(self, path: Path, date: ResolvedDate, source: DateSource) -> FileOutcome:
        ext = path.suffix
        planned = self._planned[path.parent] if self.settings.dry_run else ()
        stem = resolve_unique_stem(path.parent, format_canonical_stem(date), ext, reserved=planned)
        new_path = path.parent / f"{stem}{ext}"

        if self.settings.dry_run:
            planned.add(new_path.name)
            logging.info(f"[DRY RUN] Rename {path.name} -> {new_path.name} ({source.value})")
            return FileOutcome(path, Status.RENAMED, new_path=new_path, source=source, date=date)

        try:
            self.fs.rename(path, new_path)
        except FileOperationError as e:
            logging.error(str(e))
            return FileOutcome(path, Status.RENAME_FAILED, source=source, date=date, message=str(e))

        logging.info(f"Renamed {path.name} -> {new_path.name} ({source.value})")
        return FileOutcome(path, Status.RENAMED, new_path=new_path, source=source, date=date)
