"""Running external commands (git, go)."""

import logging
import os
import subprocess

from .errors import ChangedPackagesError, CommandError, Interrupted

logger = logging.getLogger(__name__)


def run_command(
    args: list[str],
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Run a command and return what it wrote to stdout.

    Raises:
        CommandError: the command exited non-zero (stderr is included)
        Interrupted: the run was interrupted (SIGINT) while the command ran
        ChangedPackagesError: the executable could not be started or timed out
    """
    logger.debug("running command: %s", " ".join(args))
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            env=env,
            timeout=timeout,
            capture_output=True,
            text=True,
            encoding="utf-8",
            # file names need not be UTF-8; keep their bytes as os.fsdecode does
            errors="surrogateescape",
            check=False,
        )
    except KeyboardInterrupt:
        # subprocess.run has already killed and reaped the child
        raise Interrupted() from None
    except FileNotFoundError as exc:
        if cwd is not None and not os.path.isdir(cwd):
            raise ChangedPackagesError(f"running command: `{' '.join(args)}`: no such directory {cwd}") from exc
        raise ChangedPackagesError(f"{args[0]} is not installed or not available in PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise ChangedPackagesError(f"running command: `{' '.join(args)}`: timed out after {timeout}s") from exc

    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr)
    return result.stdout
