import os
import sys

import pytest

from changedpkgs.errors import RevisionReadError
from changedpkgs.git import list_changed_files, read_file_at_revision


def test_list_changed_files_between_commits(git_repo) -> None:
    root, commit = git_repo
    first = commit({"go.mod": "module m\n", "a/a.go": "package a\n", "b/b.go": "package b\n"}, "initial")
    second = commit({"a/a.go": "package a // changed\n", "b/b.go": None, "c/with space.go": "package c\n"}, "change")

    changed = list_changed_files(str(root), first, second)

    assert sorted(changed) == ["a/a.go", "b/b.go", "c/with space.go"]


def test_list_changed_files_empty_diff(git_repo) -> None:
    root, commit = git_repo
    sha = commit({"README.md": "hi\n"}, "initial")

    assert list_changed_files(str(root), sha, sha) == []


def test_list_changed_files_bad_revision(git_repo) -> None:
    root, commit = git_repo
    sha = commit({"README.md": "hi\n"}, "initial")

    with pytest.raises(RevisionReadError, match="listing changed files"):
        list_changed_files(str(root), sha, "does-not-exist")


def test_read_file_at_revision(git_repo) -> None:
    root, commit = git_repo
    first = commit({"go.mod": "module m\n\nrequire a.com/b v1.0.0\n"}, "initial")
    second = commit({"go.mod": "module m\n\nrequire a.com/b v1.1.0\n"}, "bump")

    assert "v1.0.0" in read_file_at_revision(str(root), "go.mod", first)
    assert "v1.1.0" in read_file_at_revision(str(root), "go.mod", second)


def test_read_missing_file_at_revision(git_repo) -> None:
    root, commit = git_repo
    first = commit({"README.md": "hi\n"}, "initial")
    commit({"go.mod": "module m\n"}, "add go.mod")

    with pytest.raises(RevisionReadError, match=f"reading go.mod at {first}"):
        read_file_at_revision(str(root), "go.mod", first)


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem accepting non-UTF-8 names")
def test_list_changed_files_non_utf8_name(git_repo) -> None:
    root, commit = git_repo
    first = commit({"README.md": "hi\n"}, "initial")
    name = os.fsdecode(b"caf\xe9.txt")
    second = commit({name: "latin-1 name\n"}, "add")

    changed = list_changed_files(str(root), first, second)

    assert changed == [name]
    assert os.fsencode(changed[0]) == b"caf\xe9.txt"
