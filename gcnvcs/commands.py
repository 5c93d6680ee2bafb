"""The repository commands: init, add, commit and switch."""

from __future__ import annotations

import argparse
import os
import stat
import struct
import sys
from collections.abc import Iterator, Sequence
from pathlib import Path

from gcnvcs.creating import create_blob, create_commit, create_tree
from gcnvcs.model import FileMode, IndexEntry
from gcnvcs.reading import get_branches, read_head
from gcnvcs.recreate import recreate_dir_from_tree
from gcnvcs.searching import (
    GCN_DIR_NAME,
    RepositoryError,
    find_file,
    find_file_by_hash,
    find_file_by_prefix,
    find_gcn_dir,
)

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_COMMIT_HEADER = struct.Struct("<IQ")

MIN_PREFIX_LENGTH = 4


def init_repository(
    directory: str | os.PathLike[str], username: str, email: str
) -> bool:
    """Create a repository in ``directory``.

    Returns False without touching anything if ``directory`` already lies
    inside a repository, True once a new one has been created.
    """
    directory = Path(directory)
    try:
        find_gcn_dir(directory)
    except RepositoryError:
        pass
    else:
        return False

    gcn_dir = directory / GCN_DIR_NAME
    gcn_dir.mkdir(exist_ok=True)
    heads = gcn_dir / "refs" / "heads"
    heads.mkdir(parents=True, exist_ok=True)
    (gcn_dir / "objects").mkdir(exist_ok=True)
    (gcn_dir / "INDEX").write_bytes(b"")

    main_branch = heads / "main"
    main_branch.write_bytes(b"")
    write_head_branch(gcn_dir / "HEAD", main_branch)

    (gcn_dir / "user_data").write_text(
        f"username={username}\nemail={email}\n", encoding="utf-8"
    )
    return True


def _working_files(directory: Path, root: Path) -> Iterator[Path]:
    """Yield regular files under ``directory``, skipping the repository's own directory."""
    for dirpath, dirnames, filenames in os.walk(directory):
        current = Path(dirpath)
        if current.absolute() == root and GCN_DIR_NAME in dirnames:
            dirnames.remove(GCN_DIR_NAME)
        dirnames.sort()
        for name in sorted(filenames):
            path = current / name
            if path.is_file():
                yield path


def _file_mode(path: Path) -> FileMode:
    if os.name == "nt":
        return FileMode.BLOB
    return FileMode.EXEC if path.stat().st_mode & stat.S_IXUSR else FileMode.BLOB


def add_to_index(cur_dir: str | os.PathLike[str]) -> list[IndexEntry]:
    """Store every file under ``cur_dir`` as a blob and replace the index with them."""
    cur_dir = Path(cur_dir).absolute()
    index = find_file(cur_dir, "INDEX")
    root = index.parent.parent
    objects = find_file(cur_dir, "objects", True)

    entries: list[IndexEntry] = []
    parts: list[bytes] = []
    for path in _working_files(cur_dir, root):
        hash_value = create_blob(path, objects)
        relative = path.absolute().relative_to(root).as_posix()
        encoded = relative.encode("utf-8")
        if len(encoded) > 0xFFFF:
            raise ValueError(f"Path too long for the index: {relative}")
        mode = _file_mode(path)
        parts.append(
            _U16.pack(len(encoded)) + encoded + _U32.pack(mode) + _U64.pack(hash_value)
        )
        entries.append(IndexEntry(relative, int(mode), hash_value))

    with open(index, "wb") as index_file:
        index_file.write(_U32.pack(len(entries)))
        index_file.write(b"".join(parts))
    return entries


def _read_author(user_data: Path) -> str:
    values: dict[str, str] = {}
    for line in user_data.read_text(encoding="utf-8").splitlines():
        key, _, value = line.partition("=")
        values[key] = value
    return f"{values.get('username', '')} {values.get('email', '')}"


def commit(message: str, cwd: str | os.PathLike[str] | None = None) -> int:
    """Commit the staged index and return the new commit's hash.

    On a branch the branch is moved to the new commit and the index is
    emptied; with a detached HEAD the commit is stored only.
    """
    cwd = Path.cwd() if cwd is None else Path(cwd)
    index = find_file(cwd, "INDEX")
    head = find_file(cwd, "HEAD")
    if index.stat().st_size == 0:
        raise RepositoryError("Nothing to commit: INDEX is empty.")
    objects = find_file(cwd, "objects", True)
    user_data = find_file(cwd, "user_data")

    tree_hash = create_tree(objects, index)
    author = _read_author(user_data)
    parent_hash, branch = read_head(head)
    commit_hash = create_commit(objects, message, tree_hash, author, parent_hash)

    if branch is None:
        return commit_hash
    try:
        branch.write_bytes(_U64.pack(commit_hash))
    except OSError as exc:
        raise RepositoryError("Failed to open branch") from exc
    index.write_bytes(b"")
    return commit_hash


def write_head_branch(
    head_path: str | os.PathLike[str], branch_path: str | os.PathLike[str]
) -> None:
    """Point HEAD at a branch file, stored relative to the HEAD's directory."""
    head_path = Path(head_path)
    branch_path = Path(branch_path)
    try:
        reference = branch_path.relative_to(head_path.parent).as_posix()
    except ValueError:
        reference = str(branch_path)
    try:
        head_path.write_bytes(_U32.pack(FileMode.PATH) + reference.encode("utf-8"))
    except OSError as exc:
        raise RepositoryError("HEAD file can't be opened") from exc


def write_head_commit(head_path: str | os.PathLike[str], hash_value: int) -> None:
    """Detach HEAD onto a commit hash."""
    try:
        Path(head_path).write_bytes(_U32.pack(FileMode.COMMIT) + _U64.pack(hash_value))
    except OSError as exc:
        raise RepositoryError("HEAD file can't be opened") from exc


def switch(target: str, cwd: str | os.PathLike[str] | None = None) -> int:
    """Switch to a branch name or commit hash prefix and restore its files.

    Returns the hash of the commit switched to.
    """
    cwd = Path.cwd() if cwd is None else Path(cwd)
    objects = find_file(cwd, "objects", True)
    gcn_dir = objects.parent
    head = gcn_dir / "HEAD"
    root = gcn_dir.parent
    branches = get_branches(gcn_dir)

    if target in branches:
        branch = branches[target]
        try:
            pointer = branch.read_bytes()
        except OSError as exc:
            raise RepositoryError("Could not open branch file") from exc
        if len(pointer) < _U64.size:
            raise RepositoryError(f"Branch {target} has no commits")
        (commit_hash,) = _U64.unpack_from(pointer)
        commit_path = find_file_by_hash(objects, commit_hash)
        write_head_branch(head, branch)
    else:
        if len(target) < MIN_PREFIX_LENGTH:
            raise ValueError("Target hash must be at least 4 characters long.")
        commit_path = find_file_by_prefix(objects, target)
        commit_hash = int(commit_path.parent.name + commit_path.name)
        write_head_commit(head, commit_hash)

    try:
        data = commit_path.read_bytes()
    except OSError as exc:
        raise RepositoryError("Commit can't be opened") from exc
    if len(data) < _COMMIT_HEADER.size:
        raise RepositoryError("Commit is corrupted")
    mode, tree_hash = _COMMIT_HEADER.unpack_from(data)
    if mode != FileMode.TREE:
        raise RepositoryError("Commit is corrupted")

    recreate_dir_from_tree(root, objects, tree_hash)
    return commit_hash


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gcn", description="A small version control system.")
    commands = parser.add_subparsers(dest="command", required=True)

    init_parser = commands.add_parser("init", help="create a repository here")
    init_parser.add_argument("username")
    init_parser.add_argument("email")

    add_parser = commands.add_parser("add", help="stage every file in a directory")
    add_parser.add_argument("directory")

    commit_parser = commands.add_parser("commit", help="commit the staged files")
    commit_parser.add_argument("message")

    switch_parser = commands.add_parser("switch", help="switch to a branch or commit")
    switch_parser.add_argument("target")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one repository command from the command line."""
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "init":
            if not init_repository(Path.cwd(), args.username, args.email):
                print("Already a gcn repository")
        elif args.command == "add":
            add_to_index(Path(args.directory))
        elif args.command == "commit":
            commit(args.message)
        else:
            switch(args.target)
    except (RepositoryError, ValueError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())