"""Rebuilding a working directory from a stored tree."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from gcnvcs.hashing import decompress_stream
from gcnvcs.model import FileMode
from gcnvcs.reading import get_tree_entries
from gcnvcs.searching import RepositoryError, find_file_by_hash

_FILE_MODES = (FileMode.BLOB, FileMode.EXEC)


def recreate_dir_from_tree(
    root_dir: str | os.PathLike[str],
    object_dir: str | os.PathLike[str],
    tree_hash: int,
) -> None:
    """Write out the files and directories of a tree object under ``root_dir``."""
    root_dir = Path(root_dir)
    tree_path = find_file_by_hash(object_dir, tree_hash)

    for entry in get_tree_entries(tree_path):
        filename = entry.filename
        if os.name == "nt" and entry.mode == FileMode.EXEC and not filename.endswith(".exe"):
            filename += ".exe"
        target = root_dir / filename

        if entry.mode in _FILE_MODES:
            blob_path = find_file_by_hash(object_dir, entry.hash)
            try:
                with open(blob_path, "rb") as blob, open(target, "wb") as output:
                    decompress_stream(blob, output)
            except OSError as exc:
                raise RepositoryError("Failed to open file") from exc
            if sys.platform.startswith("linux") and entry.mode == FileMode.EXEC:
                target.chmod(0o755)
        else:
            target.mkdir(exist_ok=True)
            recreate_dir_from_tree(target, object_dir, entry.hash)