import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from ..config import OrganizerSettings
from ..exceptions import DirectoryReadError, FileOperationError
from ..models import MediaKind


def classify(path: Path, settings: OrganizerSettings) -> MediaKind:
    """Exact, case-insensitive match of the suffix against the configured sets."""
    # macOS AppleDouble companions share the suffix but hold no media
    if path.name.startswith("._"):
        return MediaKind.UNCLASSIFIED

    ext = path.suffix.lower()
    if ext in settings.image_exts:
        return MediaKind.IMAGE
    if ext in settings.video_exts:
        return MediaKind.VIDEO
    return MediaKind.UNCLASSIFIED


class LocalFileSystem:
    """
    The filesystem operations the renamer and the duplicate eliminator need.
    Every failure surfaces as one of the package's exception types.
    """

    def list_directory(self, directory: Path) -> List[os.DirEntry]:
        """Entries sorted case-insensitively by name for a stable order."""
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise DirectoryReadError(f"Cannot list {directory}: {e}") from e

        entries.sort(key=lambda e: e.name.lower())
        return entries

    def rename(self, src: Path, dest: Path):
        try:
            # os.rename would silently replace dest on POSIX; refuse instead
            if dest.exists():
                raise FileExistsError(f"{dest} already exists")
            os.rename(src, dest)
        except OSError as e:
            raise FileOperationError(f"Rename {src} -> {dest} failed: {e}") from e

    def modification_time(self, path: Path) -> datetime:
        try:
            return datetime.fromtimestamp(path.stat().st_mtime)
        except OSError as e:
            raise FileOperationError(f"Cannot stat {path}: {e}") from e

    def set_modification_time(self, path: Path, when: datetime):
        """Sets mtime to `when` (naive local time), keeping atime."""
        try:
            st = path.stat()
            os.utime(path, (st.st_atime, when.timestamp()))
        except (OSError, OverflowError, ValueError) as e:
            raise FileOperationError(f"Cannot set modification time of {path}: {e}") from e

    def open_bytes(self, path: Path):
        """Opens a file for binary reading; the caller closes it."""
        try:
            return open(path, 'rb')
        except OSError as e:
            raise FileOperationError(f"Cannot open {path}: {e}") from e

    def delete(self, path: Path):
        try:
            path.unlink()
        except OSError as e:
            raise FileOperationError(f"Delete {path} failed: {e}") from e


class DirectoryWalker:
    """
    Depth-first traversal. Within each directory the files come first, then
    each subdirectory is walked to completion before the next one.

    A directory is listed completely before any of its files is yielded, so
    renaming files while iterating does not disturb the walk.
    """

    def __init__(self, fs: Optional[LocalFileSystem] = None):
        self.fs = fs or LocalFileSystem()

    def walk(self, root: Path,
             on_error: Optional[Callable[[Path, Exception], None]] = None) -> Iterator[Path]:
        """
        Yields every regular file under root (symlinks are not followed).

        Raises:
            DirectoryReadError: root itself cannot be listed.
        """
        entries = self.fs.list_directory(root)
        yield from self._walk_entries(root, entries, on_error)

    def _walk_entries(self, directory: Path, entries: List[os.DirEntry],
                      on_error: Optional[Callable[[Path, Exception], None]]) -> Iterator[Path]:
        dirs = []
        for e in entries:
            if e.is_dir(follow_symlinks=False):
                dirs.append(Path(e.path))
            elif e.is_file(follow_symlinks=False):
                yield Path(e.path)

        for d in dirs:
            try:
                sub_entries = self.fs.list_directory(d)
            except DirectoryReadError as err:
                logging.error(str(err))
                if on_error:
                    on_error(d, err)
                continue
            yield from self._walk_entries(d, sub_entries, on_error)
