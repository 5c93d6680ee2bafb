"""Inspection helpers that render commit and tree objects as text."""

from __future__ import annotations

import argparse
import os
import struct
import sys
from collections.abc import Sequence
from pathlib import Path

from gcnvcs.reading import get_tree_entries
from gcnvcs.searching import RepositoryError, find_file, find_file_by_prefix

_HEADER = struct.Struct("<IQ")


def format_commit(commit_path: str | os.PathLike[str]) -> str:
    """Render a commit object: mode and tree hash, then its text with NULs as newlines."""
    try:
        data = Path(commit_path).read_bytes()
    except OSError as exc:
        raise RepositoryError("File cant be opened") from exc
    if len(data) < _HEADER.size:
        raise RepositoryError("Commit is corrupted")
    mode, tree_hash = _HEADER.unpack_from(data)
    body = data[_HEADER.size :].replace(b"\0", b"\n").decode("utf-8", errors="replace")
    return f"{mode} {tree_hash}\n{body}"


def format_tree(tree_path: str | os.PathLike[str]) -> str:
    """Render a tree object, one ``mode filename hash`` line per entry."""
    return "".join(
        f"{entry.mode} {entry.filename} {entry.hash}\n"
        for entry in get_tree_entries(tree_path)
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Print the tree object whose hash starts with the given prefix."""
    parser = argparse.ArgumentParser(prog="gcn-debug", description=main.__doc__)
    parser.add_argument("hash", help="hash or hash prefix of a tree object")
    args = parser.parse_args(argv)
    try:
        object_dir = find_file(Path.cwd(), "objects", True)
        tree_path = find_file_by_prefix(object_dir, args.hash)
        print(format_tree(tree_path), end="")
    except (RepositoryError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())