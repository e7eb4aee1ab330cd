import hashlib
from pathlib import Path
from typing import Optional

from .. import config
from ..exceptions import FileHashError, FileOperationError
from .filesystem import LocalFileSystem


class FileHasher:
    def __init__(self, fs: Optional[LocalFileSystem] = None):
        self.fs = fs or LocalFileSystem()

    def compute_hash(self, path: Path) -> str:
        """
        SHA-256 of the full file content. Reads in chunks so large videos
        never sit in memory at once.

        Raises:
            FileHashError: the file could not be opened or read.
        """
        h = hashlib.sha256()
        try:
            with self.fs.open_bytes(path) as f:
                while chunk := f.read(config.HASH_CHUNK_SIZE):
                    h.update(chunk)
        except (OSError, FileOperationError) as e:
            raise FileHashError(f"Hash failed for {path}: {e}") from e
        return h.hexdigest()
