import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from tqdm import tqdm

from ..exceptions import FileHashError, FileOperationError
from ..models import FileOutcome, RunSummary, Status
from ..scanning.filesystem import DirectoryWalker, LocalFileSystem
from ..scanning.hasher import FileHasher


class DuplicateEliminator:
    """
    Deletes byte-identical files. The first file seen with a given content
    hash is kept; every later file with the same hash is deleted.

    Purely content based: names, extensions and metadata are never looked at.
    The hash index lives only for one run.
    """

    def __init__(self,
                 fs: Optional[LocalFileSystem] = None,
                 hasher: Optional[FileHasher] = None,
                 dry_run: bool = False,
                 show_progress: bool = True):
        self.fs = fs or LocalFileSystem()
        self.hasher = hasher or FileHasher(self.fs)
        self.dry_run = dry_run
        self.show_progress = show_progress

    def run(self, root: Path) -> RunSummary:
        """
        Scans every regular file under root in traversal order.

        Raises:
            DirectoryReadError: root cannot be listed.
        """
        summary = RunSummary()
        walker = DirectoryWalker(self.fs)

        def on_dir_error(directory: Path, err: Exception):
            summary.add(FileOutcome(directory, Status.DIRECTORY_FAILED, message=str(err)))

        files = walker.walk(root, on_error=on_dir_error)
        self.eliminate(tqdm(files, desc="Hashing", unit="file", disable=not self.show_progress),
                       summary)

        logging.info(f"Duplicate scan complete. Deleted {summary.count(Status.DELETED)} files.")
        return summary

    def eliminate(self, paths: Iterable[Path], summary: RunSummary) -> RunSummary:
        """Hashes `paths` in order, deleting every file whose content was already seen."""
        seen: Dict[str, Path] = {}

        for path in paths:
            try:
                digest = self.hasher.compute_hash(path)
            except FileHashError as e:
                logging.error(str(e))
                summary.add(FileOutcome(path, Status.HASH_FAILED, message=str(e)))
                continue

            original = seen.get(digest)
            if original is None:
                seen[digest] = path
                summary.add(FileOutcome(path, Status.KEPT))
                continue

            if self.dry_run:
                logging.info(f"[DRY RUN] Delete {path} (duplicate of {original})")
                summary.add(FileOutcome(path, Status.DELETED, message=f"Duplicate of {original}"))
                continue

            try:
                self.fs.delete(path)
            except FileOperationError as e:
                logging.error(str(e))
                summary.add(FileOutcome(path, Status.DELETE_FAILED, message=str(e)))
                continue

            logging.info(f"Deleted duplicate: {path} (same content as {original})")
            summary.add(FileOutcome(path, Status.DELETED, message=f"Duplicate of {original}"))

        return summary
