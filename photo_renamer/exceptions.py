"""
Custom exception hierarchy for the photo renamer.

Collaborators (metadata store, filesystem, hasher) raise these; the rename
engine and the duplicate eliminator catch them per file and turn them into
FileOutcome records so a single bad file never stops the run.
"""


class PhotoRenamerError(Exception):
    """Base exception for all photo renamer errors."""
    pass


class MetadataReadError(PhotoRenamerError):
    """Raised when an image container cannot be parsed for metadata."""
    pass


class MetadataWriteError(PhotoRenamerError):
    """Raised when the date taken cannot be written into an image."""
    pass


class FileHashError(PhotoRenamerError):
    """Raised when file hashing fails."""
    pass


class FileOperationError(PhotoRenamerError):
    """Raised when a rename, delete or timestamp update fails."""
    pass


class DirectoryReadError(PhotoRenamerError):
    """Raised when a directory cannot be listed."""
    pass
