"""
Run configuration.

Settings come from, lowest precedence first: built-in defaults, a TOML file,
CHANGED_PKGS_* environment variables and command-line options. The file is
either given with --config or found as .changed-pkgs.toml in the current
directory, and holds a single [changed-pkgs] table:

    [changed-pkgs]
    mod_dir = "services/api"
    log_level = "info"
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

DEFAULT_CONFIG_NAME = ".changed-pkgs.toml"
CONFIG_TABLE = "changed-pkgs"

LOG_LEVELS = ("debug", "info", "warn", "error")
OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Settings:
    """Everything a run needs besides the two revisions."""

    repo_dir: str = "."
    mod_dir: str = "."
    manifest_name: str = "go.mod"
    git: str = "git"
    go: str = "go"
    log_level: str = "warn"
    output: str = "text"

    def merged(self, **overrides: Any) -> Settings:
        """Copy with every override that is not None applied."""
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _validate(key: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty string, got {value!r}")
    if key == "log_level" and value not in LOG_LEVELS:
        raise ConfigError(f"invalid log_level {value}: must be one of: {', '.join(LOG_LEVELS)}")
    if key == "output" and value not in OUTPUT_FORMATS:
        raise ConfigError(f"invalid output {value}: must be one of: {', '.join(OUTPUT_FORMATS)}")


def load_settings(path: Path | None = None, cwd: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Explicit config file; it must exist
        cwd: Where to look for DEFAULT_CONFIG_NAME when `path` is None

    Returns:
        Defaults updated with the file's [changed-pkgs] table (defaults alone
        when no file is given or found)
    """
    import tomllib

    if path is None:
        candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
        if not candidate.is_file():
            return Settings()
        path = candidate

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"reading config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"parsing config {path}: {exc}") from exc

    table = data.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"{path}: [{CONFIG_TABLE}] must be a table")

    known = {f.name for f in dataclasses.fields(Settings)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown keys in [{CONFIG_TABLE}]: {', '.join(unknown)}")

    for key, value in table.items():
        _validate(key, value)

    return Settings(**table)
