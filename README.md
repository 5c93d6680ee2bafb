# gcnvcs

A small version control system. It stores file contents, directory
trees and commits as objects named by their 64-bit XXH64 hash, and
keeps branches and the staging index in a hidden `.gcn` directory at
the repository root. It has no dependencies outside the standard
library.

## Installation

```
pip install .
```

This installs two commands, `gcn` and `gcn-debug`.

## Repository layout

`gcn init` creates:

```
.gcn/
  HEAD            the current branch, or a commit hash when detached
  INDEX           the staged files (path, mode and blob hash)
  user_data       username= and email= lines used as a commit's author
  objects/        blobs, trees and commits, stored as <first two digits>/<rest>
  refs/heads/main the default branch, empty until the first commit
```

Object names are the decimal form of their hash. File blobs are stored
zlib-compressed, with the hash taken over the uncompressed content;
trees and commits are stored as raw binary records.

## Commands

On success the commands print nothing, except as noted. On failure they
print `ERROR: <message>` to standard error and exit with status 1.

Create a repository in the current directory. If the current directory
already lies inside a repository, nothing is changed and
`Already a gcn repository` is printed:

```
gcn init alice alice@example.com
```

Stage every regular file below a directory. The repository's own `.gcn`
directory is skipped. On systems other than Windows, files with the
owner execute bit are recorded as executables. The index is replaced,
not merged: it afterwards holds exactly the files found in that run.

```
gcn add .
```

Commit the staged files. It is an error if the index is empty. The
author is taken from `user_data`. On a branch, the new commit's parent
is whatever the branch pointed at, the branch is moved to the new
commit and the index is emptied. With a detached HEAD the commit is
only stored; no branch moves and the index is kept.

```
gcn commit "First commit"
```

Switch to a branch by name, or to a commit by a prefix of at least four
digits of its hash (which detaches HEAD). Branch names are checked
first. Switching to a branch with no commits is an error. The files and
directories of the commit's tree are then written into the working
directory, overwriting files of the same name.

```
gcn switch main
gcn switch 1234
```

Print a tree object found by a prefix (at least two digits) of its
hash, one `mode name hash` line per entry:

```
gcn-debug 1234
```

## What it does not do

There are no commands to create or delete branches, show history or
status, diff, or merge; `main` is the only branch `gcn init` creates.
`gcn switch` writes the target tree's files but does not remove files
that the tree does not contain.

## Using it as a library

- `gcnvcs.model` — `FileMode` (the type tags), and the `IndexEntry` and
  `TreeEntry` records
- `gcnvcs.hashing` — `xxh64`, `hash_stream`, `hash_to_path`,
  `compress_stream`, `decompress_stream`
- `gcnvcs.searching` — `find_gcn_dir`, `find_file`,
  `find_file_by_prefix`, `find_file_by_hash`; failures raise
  `RepositoryError`
- `gcnvcs.reading` — `read_head` (returns the commit hash and the branch
  file, or `None` when detached), `get_branches`, `get_tree_entries`,
  `read_index`
- `gcnvcs.creating` — `create_blob`, `write_tree`, `create_tree`,
  `create_commit`, each returning the new object's hash
- `gcnvcs.recreate` — `recreate_dir_from_tree`
- `gcnvcs.debug` — `format_commit`, `format_tree`
- `gcnvcs.commands` — `init_repository` (returns `False` if already
  inside a repository), `add_to_index` (returns the staged entries),
  `commit` and `switch` (return the commit hash), `write_head_branch`,
  `write_head_commit`

```python
from gcnvcs.commands import init_repository, add_to_index, commit

init_repository("project", "alice", "alice@example.com")
add_to_index("project")
commit_hash = commit("First commit", cwd="project")
```

## Running the tests

```
pip install ".[test]"
pytest
```