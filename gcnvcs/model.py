"""Object modes and the records stored in the index and in tree objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class FileMode(IntEnum):
    """Type tags written in front of entries, commits and HEAD contents."""

    BLOB = 0o100644
    EXEC = 0o100755
    TREE = 0o040000
    COMMIT = 0o000105
    PATH = 0o000644


@dataclass(frozen=True)
class IndexEntry:
    """A staged file: its path relative to the repository root, mode and blob hash."""

    path: str
    mode: int
    hash: int


@dataclass(frozen=True)
class TreeEntry:
    """One entry of a tree object: a blob or a sub-tree."""

    mode: int
    filename: str
    hash: int