"""Changed command implementation - list the packages affected by a change."""

import json
import logging
import os
from typing import TextIO

from rich.console import Console

from ..config import Settings
from ..engine import compute_impacted_packages
from ..errors import ChangedPackagesError, Interrupted
from ..events import EventCallback, ImpactEvent, format_event
from ..git import list_changed_files, read_file_at_revision
from ..golist import list_local_packages
from ..log import log_event
from ..manifest import collect_manifest_delta

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
# https://tldp.org/LDP/abs/html/exitcodes.html
SIGNAL_EXIT_BASE = 128
SIGINT_VALUE = 2


def get_changed_packages(
    settings: Settings,
    from_ref: str,
    to_ref: str,
    on_event: EventCallback | None = None,
) -> set[str]:
    """Packages changed between `from_ref` and `to_ref`.

    A package is changed when it contains a file that changed between the
    two revisions, imports a package from a third-party module whose version
    changed, or imports a local package for which either holds.
    """
    graph = list_local_packages(settings.mod_dir, go=settings.go)

    # package files are listed with symlinks resolved; changed paths must match
    repo_dir = os.path.realpath(settings.repo_dir)

    changed_files = list_changed_files(repo_dir, from_ref, to_ref, git=settings.git)
    logger.info("changed files: %s", changed_files)

    def read_file(path: str, rev: str) -> str:
        return read_file_at_revision(repo_dir, path, rev, git=settings.git)

    changed_modules = collect_manifest_delta(
        changed_files,
        from_ref,
        to_ref,
        read_file,
        manifest_name=settings.manifest_name,
    )
    logger.info("changed 3rd party modules: %s", sorted(changed_modules))

    return compute_impacted_packages(graph, changed_files, changed_modules, repo_dir, on_event=on_event)


def run_changed(
    settings: Settings,
    from_ref: str,
    to_ref: str,
    explain: bool = False,
    out: TextIO | None = None,
) -> int:
    """Print the changed packages, sorted, one per line (or as JSON).

    Args:
        settings: Directories, executables and output format
        from_ref: Revision before the change
        to_ref: Revision after the change
        explain: Also print why each package changed
        out: Where to print the result (stdout by default)

    Returns:
        Exit code (0 = success, 1 = failure, 130 = interrupted)
    """
    console = Console(stderr=True)
    reasons: dict[str, ImpactEvent] = {}

    def on_event(event: ImpactEvent) -> None:
        reasons[event.package] = event
        log_event(event)

    try:
        packages = get_changed_packages(settings, from_ref, to_ref, on_event=on_event)
    except (Interrupted, KeyboardInterrupt):
        console.print("interrupted (^C)", style="bold red", markup=False, highlight=False, soft_wrap=True)
        return SIGNAL_EXIT_BASE + SIGINT_VALUE
    except ChangedPackagesError as exc:
        console.print(
            f"Error: getting changed packages: {exc}",
            style="bold red",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return EXIT_FAILURE

    _print_packages(sorted(packages), reasons, settings.output, explain, out)
    return EXIT_SUCCESS


def _print_packages(
    packages: list[str],
    reasons: dict[str, ImpactEvent],
    output: str,
    explain: bool,
    out: TextIO | None,
) -> None:
    if output == "json":
        if explain:
            payload = [{"package": pkg, "reason": reasons[pkg].to_dict()} for pkg in packages]
        else:
            payload = packages
        print(json.dumps(payload, indent=2), file=out)
        return

    for pkg in packages:
        if explain:
            print(f"{pkg}\t{format_event(reasons[pkg])}", file=out)
        else:
            print(pkg, file=out)
