"""Manifest delta: third-party modules whose required version changed."""

import logging
import os
from typing import Callable, Iterable

from .errors import ManifestParseError
from .models import ModuleRequirement
from .modfile import parse_manifest

logger = logging.getLogger(__name__)

MANIFEST_NAME = "go.mod"

# (path, revision) -> file content
FileReader = Callable[[str, str], str]
# (path, content) -> module -> requirement
ManifestParser = Callable[[str, str], dict[str, ModuleRequirement]]


def diff_requirements(
    before: dict[str, ModuleRequirement],
    after: dict[str, ModuleRequirement],
) -> set[str]:
    """Modules required in both snapshots with a different version.

    Modules that were added or removed are not part of the delta: nothing can
    have depended on a module before it was required, and nothing can still
    depend on one that is no longer required.
    """
    changed = set()
    for module, req in after.items():
        old = before.get(module)
        if old is not None and old.version != req.version:
            changed.add(module)
    return changed


def resolve_manifest_delta(
    path: str,
    from_rev: str,
    to_rev: str,
    read_file: FileReader,
    parse: ManifestParser = parse_manifest,
) -> set[str]:
    """Compare a manifest between two revisions.

    Args:
        path: Manifest path relative to the repository root
        from_rev: Revision before the change
        to_rev: Revision after the change
        read_file: Returns the content of a path at a revision
        parse: Turns manifest content into module -> requirement

    Raises:
        RevisionReadError: the manifest is missing at either revision
        ManifestParseError: the manifest is malformed at either revision
    """
    before = _load_snapshot(path, from_rev, read_file, parse)
    after = _load_snapshot(path, to_rev, read_file, parse)
    return diff_requirements(before, after)


def _load_snapshot(
    path: str, rev: str, read_file: FileReader, parse: ManifestParser
) -> dict[str, ModuleRequirement]:
    content = read_file(path, rev)
    try:
        return parse(path, content)
    except ManifestParseError as exc:
        raise ManifestParseError(exc.path, exc.line, f"{exc.message} (at {rev})") from exc


def is_manifest(path: str, manifest_name: str = MANIFEST_NAME) -> bool:
    return os.path.basename(path) == manifest_name


def collect_manifest_delta(
    changed_files: Iterable[str],
    from_rev: str,
    to_rev: str,
    read_file: FileReader,
    manifest_name: str = MANIFEST_NAME,
    parse: ManifestParser = parse_manifest,
) -> set[str]:
    """Union of the deltas of every changed manifest."""
    changed_modules: set[str] = set()
    for path in dict.fromkeys(changed_files):
        if not is_manifest(path, manifest_name):
            continue
        delta = resolve_manifest_delta(path, from_rev, to_rev, read_file, parse)
        logger.debug("changed 3rd party modules in %s: %s", path, sorted(delta))
        changed_modules |= delta
    return changed_modules
