import logging
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .config import OrganizerSettings
from .metadata.exif import ExifDateStore
from .models import FileOutcome, RunSummary, Status
from .organization.dedupe import DuplicateEliminator
from .organization.renamer import DateResolutionEngine
from .scanning.filesystem import DirectoryWalker, LocalFileSystem, classify


class PhotoRenamerApp:
    def __init__(self,
                 settings: Optional[OrganizerSettings] = None,
                 metadata: Optional[ExifDateStore] = None,
                 fs: Optional[LocalFileSystem] = None,
                 show_progress: bool = True):
        self.settings = settings or OrganizerSettings()
        self.fs = fs or LocalFileSystem()
        self.engine = DateResolutionEngine(self.settings, metadata or ExifDateStore(), self.fs)
        self.show_progress = show_progress

    def organize(self, root: Path) -> RunSummary:
        """
        Renames every image and video under root to its capture date.
        1. Walk (files of a folder first, then its subfolders)
        2. Classify by extension
        3. Resolve date & rename, one file at a time

        Raises:
            DirectoryReadError: root cannot be listed.
        """
        self.engine.begin_run()
        logging.info(f"Organizing {root} (DryRun={self.settings.dry_run})...")
        summary = RunSummary()
        walker = DirectoryWalker(self.fs)

        def on_dir_error(directory: Path, err: Exception):
            summary.add(FileOutcome(directory, Status.DIRECTORY_FAILED, message=str(err)))

        files = walker.walk(root, on_error=on_dir_error)
        for path in tqdm(files, desc="Organizing", unit="file", disable=not self.show_progress):
            kind = classify(path, self.settings)
            summary.add(self.engine.process(path, kind))

        logging.info(f"Organization complete. Renamed {len(summary.renamed())} files.")
        return summary

    def delete_duplicates(self, root: Path) -> RunSummary:
        logging.info(f"Scanning {root} for duplicates (DryRun={self.settings.dry_run})...")
        eliminator = DuplicateEliminator(self.fs, dry_run=self.settings.dry_run,
                                         show_progress=self.show_progress)
        return eliminator.run(root)
