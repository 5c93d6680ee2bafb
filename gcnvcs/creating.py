"""Writers for blob, tree and commit objects."""

from __future__ import annotations

import os
import struct
from collections import defaultdict
from collections.abc import Mapping, Sequence
from pathlib import Path

from gcnvcs.hashing import compress_stream, hash_stream, hash_to_path, xxh64
from gcnvcs.model import FileMode, IndexEntry
from gcnvcs.reading import read_index
from gcnvcs.searching import find_gcn_dir

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def _object_path(object_directory: str | os.PathLike[str], hash_value: int) -> Path:
    return Path(os.fspath(object_directory) + hash_to_path(hash_value))


def _store(object_directory: str | os.PathLike[str], data: bytes) -> int:
    hash_value = xxh64(data)
    path = _object_path(object_directory, hash_value)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return hash_value


def create_blob(
    input_path: str | os.PathLike[str], object_dir: str | os.PathLike[str]
) -> int:
    """Store a file's content as a compressed blob and return its hash.

    The hash is taken over the uncompressed content.
    """
    with open(input_path, "rb") as source:
        hash_value = hash_stream(source)
        blob_path = _object_path(object_dir, hash_value)
        blob_path.parent.mkdir(parents=True, exist_ok=True)
        source.seek(0)
        with open(blob_path, "wb") as target:
            compress_stream(source, target)
    return hash_value


def _entry(mode: int, name: str, hash_value: int) -> bytes:
    return _U32.pack(mode) + name.encode("utf-8") + b"\0" + _U64.pack(hash_value)


def write_tree(
    directory: str | os.PathLike[str],
    root: str | os.PathLike[str],
    object_directory: str | os.PathLike[str],
    trees: Mapping[str, Sequence[IndexEntry]],
    entries: Sequence[IndexEntry],
) -> int:
    """Write the tree object for ``directory`` and its sub-trees; return its hash.

    Files directly inside ``directory`` come first, in the order of
    ``entries``, followed by sub-directories in sorted order of their keys
    in ``trees``.
    """
    directory = str(Path(directory))
    root = Path(root)
    parts: list[bytes] = []

    for entry in entries:
        path = root / entry.path
        if str(path.parent) == directory:
            parts.append(_entry(entry.mode, path.name, entry.hash))

    for subdir in sorted(trees):
        sub_path = Path(subdir)
        if str(sub_path.parent) == directory:
            sub_hash = write_tree(subdir, root, object_directory, trees, entries)
            parts.append(_entry(FileMode.TREE, sub_path.name, sub_hash))

    return _store(object_directory, b"".join(parts))


def create_tree(
    object_directory: str | os.PathLike[str], index_path: str | os.PathLike[str]
) -> int:
    """Build tree objects from the index and return the root tree's hash."""
    root = find_gcn_dir(object_directory).parent
    entries = sorted(read_index(index_path), key=lambda entry: entry.path)
    trees: defaultdict[str, list[IndexEntry]] = defaultdict(list)
    for entry in entries:
        parent = os.path.normpath(str((root / entry.path).parent))
        trees[parent].append(entry)
    return write_tree(str(root), root, object_directory, trees, entries)


def create_commit(
    object_directory: str | os.PathLike[str],
    message: str,
    tree_hash: int,
    author: str,
    parent_hash: int = 0,
) -> int:
    """Write a commit object and return its hash.

    A parent hash of 0 means the commit has no parent.
    """
    parts = [_U32.pack(FileMode.TREE), _U64.pack(tree_hash)]
    if parent_hash != 0:
        parts.append(b"parent\0" + _U64.pack(parent_hash))
    parts.append(b"author " + author.encode("utf-8") + b"\0")
    parts.append(message.encode("utf-8"))
    return _store(object_directory, b"".join(parts))