"""Readers for HEAD, branch refs, tree objects and the index."""

from __future__ import annotations

import os
import struct
from pathlib import Path

from gcnvcs.model import FileMode, IndexEntry, TreeEntry
from gcnvcs.searching import RepositoryError

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def read_head(head_path: str | os.PathLike[str]) -> tuple[int, Path | None]:
    """Return the commit hash HEAD points at and the branch file, if any.

    A branch with no commits yet gives hash 0. A detached HEAD gives no branch.
    """
    head_path = Path(head_path)
    try:
        content = head_path.read_bytes()
    except OSError as exc:
        raise RepositoryError("Failed to open HEAD") from exc
    if len(content) < _U32.size:
        raise RepositoryError("HEAD is corrupted or unknown type")
    (kind,) = _U32.unpack_from(content)
    payload = content[_U32.size :]

    if kind == FileMode.PATH:
        branch = head_path.parent / payload.decode("utf-8")
        pointer = branch.read_bytes()
        if not pointer:
            return 0, branch
        if len(pointer) < _U64.size:
            raise RepositoryError(f"Branch file is corrupted: {branch}")
        (hash_value,) = _U64.unpack_from(pointer)
        return hash_value, branch
    if kind == FileMode.COMMIT:
        if len(payload) < _U64.size:
            raise RepositoryError("HEAD is corrupted or unknown type")
        (hash_value,) = _U64.unpack_from(payload)
        return hash_value, None
    raise RepositoryError("HEAD is corrupted or unknown type")


def get_branches(gcn_dir: str | os.PathLike[str]) -> dict[str, Path]:
    """Map branch names to their files under ``refs/heads``."""
    heads = Path(gcn_dir) / "refs" / "heads"
    return {entry.name: entry for entry in heads.iterdir() if entry.is_file()}


def get_tree_entries(tree_path: str | os.PathLike[str]) -> list[TreeEntry]:
    """Parse a tree object into its entries."""
    try:
        data = Path(tree_path).read_bytes()
    except OSError as exc:
        raise RepositoryError("Invalid tree path") from exc

    entries: list[TreeEntry] = []
    position = 0
    while len(data) - position >= _U32.size:
        (mode,) = _U32.unpack_from(data, position)
        position += _U32.size
        end = data.find(b"\0", position)
        if end < 0:
            raise RepositoryError("Failed to read filename")
        filename = data[position:end].decode("utf-8")
        position = end + 1
        if len(data) - position < _U64.size:
            raise RepositoryError("Failed to read hash")
        (hash_value,) = _U64.unpack_from(data, position)
        position += _U64.size
        entries.append(TreeEntry(mode, filename, hash_value))
    return entries


def read_index(index_path: str | os.PathLike[str]) -> list[IndexEntry]:
    """Parse the staging index; an empty file holds no entries."""
    try:
        data = Path(index_path).read_bytes()
    except OSError as exc:
        raise RepositoryError("Failed to open index file for reading") from exc
    if not data:
        return []

    try:
        (count,) = _U32.unpack_from(data)
        position = _U32.size
        entries: list[IndexEntry] = []
        for _ in range(count):
            (path_len,) = _U16.unpack_from(data, position)
            position += _U16.size
            raw_path = data[position : position + path_len]
            if len(raw_path) != path_len:
                raise RepositoryError("Index is truncated")
            position += path_len
            (mode,) = _U32.unpack_from(data, position)
            position += _U32.size
            (hash_value,) = _U64.unpack_from(data, position)
            position += _U64.size
            entries.append(IndexEntry(raw_path.decode("utf-8"), mode, hash_value))
    except struct.error as exc:
        raise RepositoryError("Index is truncated") from exc
    return entries