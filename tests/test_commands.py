import os
import struct
import zlib

import pytest

from gcnvcs.commands import (
    add_to_index,
    commit,
    init_repository,
    main,
    switch,
    write_head_branch,
    write_head_commit,
)
from gcnvcs.model import FileMode
from gcnvcs.reading import read_head, read_index
from gcnvcs.searching import RepositoryError, find_file_by_hash


@pytest.fixture
def repo(tmp_path):
    init_repository(tmp_path, "alice", "alice@example.com")
    (tmp_path / "a.txt").write_bytes(b"alpha")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_bytes(b"beta")
    return tmp_path


def test_init_creates_layout(tmp_path):
    assert init_repository(tmp_path, "alice", "alice@example.com") is True
    gcn = tmp_path / ".gcn"
    assert (gcn / "objects").is_dir()
    assert (gcn / "refs" / "heads" / "main").read_bytes() == b""
    assert (gcn / "INDEX").read_bytes() == b""
    assert (gcn / "HEAD").read_bytes() == struct.pack("<I", 0o644) + b"refs/heads/main"
    assert (gcn / "user_data").read_text() == "username=alice\nemail=alice@example.com\n"


def test_init_twice_keeps_existing(tmp_path):
    init_repository(tmp_path, "alice", "alice@example.com")
    assert init_repository(tmp_path, "bob", "bob@example.com") is False
    assert "alice" in (tmp_path / ".gcn" / "user_data").read_text()


def test_fresh_head_points_to_empty_main(tmp_path):
    init_repository(tmp_path, "alice", "alice@example.com")
    hash_value, branch = read_head(tmp_path / ".gcn" / "HEAD")
    assert hash_value == 0
    assert branch == tmp_path / ".gcn" / "refs" / "heads" / "main"


def test_add_writes_index_and_blobs(repo):
    entries = add_to_index(repo)
    assert sorted(entry.path for entry in entries) == ["a.txt", "sub/b.txt"]
    assert read_index(repo / ".gcn" / "INDEX") == entries
    objects = repo / ".gcn" / "objects"
    for entry in entries:
        blob = find_file_by_hash(objects, entry.hash)
        assert zlib.decompress(blob.read_bytes()) == (repo / entry.path).read_bytes()


def test_add_subdirectory_paths_relative_to_root(repo):
    entries = add_to_index(repo / "sub")
    assert [entry.path for entry in entries] == ["sub/b.txt"]


def test_add_marks_executables(repo):
    script = repo / "run.sh"
    script.write_bytes(b"#!/bin/sh\n")
    script.chmod(0o755)
    modes = {entry.path: entry.mode for entry in add_to_index(repo)}
    expected = FileMode.BLOB if os.name == "nt" else FileMode.EXEC
    assert modes["run.sh"] == expected
    assert modes["a.txt"] == FileMode.BLOB


def test_commit_with_empty_index_raises(repo):
    with pytest.raises(RepositoryError):
        commit("first", repo)


def test_commit_moves_branch_and_empties_index(repo):
    add_to_index(repo)
    commit_hash = commit("first", repo)
    gcn = repo / ".gcn"
    assert (gcn / "refs" / "heads" / "main").read_bytes() == struct.pack("<Q", commit_hash)
    assert (gcn / "INDEX").read_bytes() == b""
    assert read_head(gcn / "HEAD") == (commit_hash, gcn / "refs" / "heads" / "main")
    data = find_file_by_hash(gcn / "objects", commit_hash).read_bytes()
    assert struct.unpack_from("<I", data)[0] == FileMode.TREE
    assert b"author alice alice@example.com\0first" in data
    assert b"parent\0" not in data


def test_second_commit_records_parent(repo):
    add_to_index(repo)
    first = commit("first", repo)
    (repo / "a.txt").write_bytes(b"changed")
    add_to_index(repo)
    second = commit("second", repo)
    assert second != first
    data = find_file_by_hash(repo / ".gcn" / "objects", second).read_bytes()
    assert b"parent\0" + struct.pack("<Q", first) in data


def test_switch_branch_restores_files(repo):
    add_to_index(repo)
    commit_hash = commit("first", repo)
    (repo / "a.txt").write_bytes(b"modified")
    (repo / "sub" / "b.txt").unlink()
    assert switch("main", repo) == commit_hash
    assert (repo / "a.txt").read_bytes() == b"alpha"
    assert (repo / "sub" / "b.txt").read_bytes() == b"beta"
    gcn = repo / ".gcn"
    assert read_head(gcn / "HEAD") == (commit_hash, gcn / "refs" / "heads" / "main")


def test_switch_by_hash_prefix_detaches_head(repo):
    add_to_index(repo)
    first = commit("first", repo)
    (repo / "a.txt").write_bytes(b"second version")
    add_to_index(repo)
    commit("second", repo)
    assert switch(str(first)[:8], repo) == first
    assert (repo / "a.txt").read_bytes() == b"alpha"
    assert read_head(repo / ".gcn" / "HEAD") == (first, None)


def test_commit_on_detached_head_keeps_branch(repo):
    add_to_index(repo)
    first = commit("first", repo)
    switch(str(first)[:8], repo)
    (repo / "a.txt").write_bytes(b"detached work")
    add_to_index(repo)
    detached = commit("detached", repo)
    gcn = repo / ".gcn"
    assert (gcn / "refs" / "heads" / "main").read_bytes() == struct.pack("<Q", first)
    assert (gcn / "INDEX").read_bytes() != b""
    assert find_file_by_hash(gcn / "objects", detached).is_file()


def test_switch_short_target_raises(repo):
    with pytest.raises(ValueError):
        switch("123", repo)


def test_switch_unknown_prefix_raises(repo):
    add_to_index(repo)
    first = commit("first", repo)
    digits = str(first)
    wrong = digits[:2] + ("0" if digits[2] != "0" else "1") + digits[3:8]
    with pytest.raises(RepositoryError):
        switch(wrong, repo)


def test_switch_to_branch_without_commits_raises(repo):
    with pytest.raises(RepositoryError):
        switch("main", repo)


def test_write_head_commit_round_trip(tmp_path):
    init_repository(tmp_path, "alice", "alice@example.com")
    head = tmp_path / ".gcn" / "HEAD"
    write_head_commit(head, 1234567890123)
    assert read_head(head) == (1234567890123, None)
    assert head.read_bytes()[:4] == struct.pack("<I", 0o105)


def test_write_head_branch_round_trip(tmp_path):
    init_repository(tmp_path, "alice", "alice@example.com")
    gcn = tmp_path / ".gcn"
    feature = gcn / "refs" / "heads" / "feature"
    feature.write_bytes(struct.pack("<Q", 42))
    write_head_branch(gcn / "HEAD", feature)
    assert read_head(gcn / "HEAD") == (42, feature)


def test_main_runs_commands(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["init", "alice", "alice@example.com"]) == 0
    assert main(["commit", "empty"]) == 1
    assert "Nothing to commit" in capsys.readouterr().err
    (tmp_path / "file.txt").write_bytes(b"content")
    assert main(["add", "."]) == 0
    assert main(["commit", "first"]) == 0
    assert (tmp_path / ".gcn" / "INDEX").read_bytes() == b""
    (tmp_path / "file.txt").write_bytes(b"other")
    assert main(["switch", "main"]) == 0
    assert (tmp_path / "file.txt").read_bytes() == b"content"


def test_main_outside_repository_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["add", "."]) == 1
    assert "ERROR" in capsys.readouterr().err