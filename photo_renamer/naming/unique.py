from pathlib import Path
from typing import Collection


def resolve_unique_stem(directory: Path, stem: str, ext: str,
                        reserved: Collection[str] = ()) -> str:
    """
    Returns `stem`, or `stem_1`, `stem_2`, ... whichever first does not name
    an existing entry `<stem><ext>` in `directory`.

    The directory is checked on every call (never cached): earlier renames in
    the same pass change what counts as a collision. Names in `reserved`
    (file names planned but not yet on disk, as in a dry run) count as taken.
    Not safe against other processes writing to the same directory.
    """
    candidate = stem
    counter = 1
    while f"{candidate}{ext}" in reserved or _occupied(directory / f"{candidate}{ext}"):
        candidate = f"{stem}_{counter}"
        counter += 1
    return candidate


def _occupied(target: Path) -> bool:
    # A dangling symlink still holds the name
    return target.exists() or target.is_symlink()
