"""Content hashing for manifest directories."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .errors import DirectoryReadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def compute_file_hash(filepath: Path) -> str:
    """Compute SHA1 hash of file contents."""
    h = hashlib.sha1()
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def hash_string(text: str) -> str:
    """Compute SHA1 hash of a string."""
    return hashlib.sha1(text.encode("utf-8", "surrogatepass")).hexdigest()


def iter_files(directory: Path) -> Iterator[Path]:
    """
    Yield every file below a directory in lexical walk order.

    Entries are visited in sorted name order and directories are descended
    into as soon as they are reached, so ``a/z.yaml`` comes before ``b.yaml``.
    Symlinked directories are not descended.

    Raises:
        DirectoryReadError: If a directory cannot be listed
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise DirectoryReadError(str(directory), e.strerror or str(e)) from e

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            yield from iter_files(path)
        elif entry.is_symlink() and path.is_dir():
            continue
        else:
            yield path


def hash_directory(directory: Path) -> str:
    """
    Compute the content digest of a manifest directory.

    Each file's own hash is appended to a running string in walk order and
    the whole string is hashed once more. File names and mtimes do not
    contribute, only bytes and their order.

    Args:
        directory: Manifest directory to hash

    Returns:
        Lowercase hex digest

    Raises:
        DirectoryReadError: If the directory or any file below it is unreadable
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryReadError(str(directory), "not a directory")

    file_hashes: list[str] = []
    for filepath in iter_files(directory):
        try:
            file_hashes.append(compute_file_hash(filepath))
        except OSError as e:
            raise DirectoryReadError(str(filepath), e.strerror or str(e)) from e

    digest = hash_string("".join(file_hashes))
    logger.debug("Hashed %d files in %s: %s", len(file_hashes), directory, digest)
    return digest
