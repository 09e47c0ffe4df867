"""Git queries: changed files between revisions, file content at a revision."""

from .errors import CommandError, RevisionReadError
from .process import run_command


def list_changed_files(repo_dir: str, from_rev: str, to_rev: str, *, git: str = "git") -> list[str]:
    """Paths (relative to the repository root) that differ between two revisions."""
    try:
        out = run_command([git, "-C", repo_dir, "diff", "--name-only", "-z", from_rev, to_rev])
    except CommandError as exc:
        raise RevisionReadError(f"listing changed files: {exc}") from exc

    # NUL-terminated, so the last element is always empty
    return [path for path in out.split("\x00") if path]


def read_file_at_revision(repo_dir: str, path: str, rev: str, *, git: str = "git") -> str:
    """Full text of `path` as of `rev`."""
    try:
        return run_command([git, "-C", repo_dir, "show", f"{rev}:{path}"])
    except CommandError as exc:
        raise RevisionReadError(f"reading {path} at {rev}: {exc}") from exc
