"""Error kinds raised while computing changed packages.

All of them derive from ChangedPackagesError so the CLI can report any
failure with a single handler. None of them is retried.
"""

from __future__ import annotations


class ChangedPackagesError(Exception):
    """Base class for every diagnosable failure of a run."""


class ConfigError(ChangedPackagesError):
    """Invalid configuration file or value."""


class GraphLoadError(ChangedPackagesError):
    """Local packages could not be loaded or analysed."""


class GraphOrderError(GraphLoadError):
    """A package appears before one of the local packages it imports."""


class OwnershipConflictError(GraphLoadError):
    """A file is owned by more than one local package."""

    def __init__(self, file: str, owners: list[str]):
        self.file = file
        self.owners = owners
        super().__init__(f"file {file} is owned by more than one package: {', '.join(owners)}")


class RevisionReadError(ChangedPackagesError):
    """Listing changed files or reading a file at a revision failed."""


class ManifestParseError(ChangedPackagesError):
    """A manifest could not be parsed."""

    def __init__(self, path: str, line: int, message: str):
        self.path = path
        self.line = line
        self.message = message
        super().__init__(f"{path}:{line}: {message}")


class CommandError(ChangedPackagesError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"running command: `{' '.join(self.command)}`: exit status {returncode}\nstderr: {stderr}"
        )


class Interrupted(ChangedPackagesError):
    """The run was cancelled by the operator (SIGINT)."""

    def __init__(self, message: str = "interrupted (^C)"):
        super().__init__(message)
