"""changed-pkgs - find the Go packages affected by a change between two revisions."""

__version__ = "0.1.0"
