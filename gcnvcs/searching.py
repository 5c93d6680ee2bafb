"""Locating the repository directory and objects inside it."""

from __future__ import annotations

import os
from pathlib import Path

from gcnvcs.hashing import hash_to_path

GCN_DIR_NAME = ".gcn"


class RepositoryError(RuntimeError):
    """The repository is missing, incomplete or corrupted."""


def find_gcn_dir(cur_dir: str | os.PathLike[str]) -> Path:
    """Return the ``.gcn`` directory of the repository containing ``cur_dir``."""
    current = Path(cur_dir).absolute()
    for directory in (current, *current.parents):
        candidate = directory / GCN_DIR_NAME
        if candidate.is_dir():
            return candidate
    raise RepositoryError("This is not a gcn repository.")


def find_file(
    cur_dir: str | os.PathLike[str], relative_path: str, is_dir: bool = False
) -> Path:
    """Return ``relative_path`` inside the repository's ``.gcn`` directory.

    The path must exist and be a directory if ``is_dir`` is true, otherwise
    a regular file.
    """
    path = find_gcn_dir(cur_dir) / relative_path
    if path.is_dir() if is_dir else path.is_file():
        return path
    raise RepositoryError("No file. It is not repository or repository is corrupted")


def find_file_by_prefix(object_dir: str | os.PathLike[str], prefix: str) -> Path:
    """Return the first object whose decimal hash starts with ``prefix``."""
    if len(prefix) < 2:
        raise ValueError("Hash prefix must be at least 2 characters long")
    bucket = Path(object_dir) / prefix[:2]
    rest = prefix[2:]
    if not bucket.exists():
        raise RepositoryError("Commit with this hash doesn't exist")
    for entry in sorted(bucket.iterdir()):
        if entry.is_file() and entry.name.startswith(rest):
            return entry
    raise RepositoryError("Commit with this hash doesn't exist")


def find_file_by_hash(object_dir: str | os.PathLike[str], hash_value: int) -> Path:
    """Return the object file stored for an exact hash value."""
    path = Path(os.fspath(object_dir) + hash_to_path(hash_value))
    if path.exists():
        return path
    raise RepositoryError(
        "File system corrupted. Commit file doesn't exist even though it should"
    )