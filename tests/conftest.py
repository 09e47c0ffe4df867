"""Pytest configuration and fixtures."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from changedpkgs.models import ImportedPackage, LocalPackage



@pytest.fixture
def repo_dir(tmp_path: Path) -> str:
    """Absolute repository root used to resolve changed paths."""
    return str(tmp_path.resolve() / "repo")


@pytest.fixture
def make_package(repo_dir: str) -> Callable[..., LocalPackage]:
    """Build a LocalPackage from repo-relative files and import paths.

    Imports given as strings are local/stdlib; pass ImportedPackage for
    packages owned by a third-party module.
    """

    def _make(
        path: str,
        files: list[str] | tuple[str, ...] = (),
        imports: list[str | ImportedPackage] | tuple = (),
    ) -> LocalPackage:
        resolved = {}
        for imp in imports:
            if isinstance(imp, str):
                imp = ImportedPackage(path=imp)
            resolved[imp.path] = imp
        return LocalPackage(
            path=path,
            files=frozenset(os.path.join(repo_dir, f) for f in files),
            imports=resolved,
        )

    return _make


def _git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    ).stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> tuple[Path, Callable[[dict[str, str | None], str], str]]:
    """A fresh Git repository plus a helper committing file changes.

    The helper takes {relative path: content or None to delete} and a commit
    message, and returns the new commit SHA.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    root = tmp_path / "git-repo"
    root.mkdir()
    _git(root, "init", "--quiet")
    _git(root, "config", "user.email", "tests@example.com")
    _git(root, "config", "user.name", "Tests")
    _git(root, "config", "commit.gpgsign", "false")

    def commit(changes: dict[str, str | None], message: str) -> str:
        for rel, content in changes.items():
            target = root / rel
            if content is None:
                target.unlink()
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        _git(root, "add", "--all")
        _git(root, "commit", "--quiet", "--allow-empty", "-m", message)
        return _git(root, "rev-parse", "HEAD")

    return root, commit
