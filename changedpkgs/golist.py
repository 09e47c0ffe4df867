"""Local package loading via `go list`."""

import json
import logging
import os
from typing import Any, Iterator

from .errors import CommandError, GraphLoadError
from .graph import PackageGraph
from .models import ImportedPackage, LocalPackage
from .process import run_command

logger = logging.getLogger(__name__)

# Files a package owns: everything `go build` reads plus embedded files.
# Test files are not part of a package's build and are not listed.
OWNED_FILE_FIELDS = (
    "GoFiles",
    "CgoFiles",
    "CFiles",
    "CXXFiles",
    "MFiles",
    "HFiles",
    "FFiles",
    "SFiles",
    "SwigFiles",
    "SwigCXXFiles",
    "SysoFiles",
    "EmbedFiles",
)

GO_LIST_FIELDS = ("ImportPath", "Dir", "Imports", "Module", "Standard", "DepOnly", "Error") + OWNED_FILE_FIELDS


def iter_json_stream(data: str) -> Iterator[dict[str, Any]]:
    """Decode concatenated JSON objects, as printed by `go list -json`."""
    decoder = json.JSONDecoder()
    pos = 0
    end = len(data)
    while True:
        while pos < end and data[pos].isspace():
            pos += 1
        if pos >= end:
            return
        obj, pos = decoder.raw_decode(data, pos)
        yield obj


def _owning_module(record: dict[str, Any]) -> tuple[str | None, str | None]:
    module = record.get("Module")
    if not module or module.get("Main"):
        return None, None
    return module.get("Path"), module.get("Version")


def _package_files(record: dict[str, Any]) -> frozenset[str]:
    # go list reports Dir under $PWD, which may go through a symlink
    pkg_dir = os.path.realpath(record["Dir"]) if record.get("Dir") else ""
    files = set()
    for field_name in OWNED_FILE_FIELDS:
        for name in record.get(field_name) or []:
            files.add(os.path.normpath(os.path.join(pkg_dir, name)))
    return frozenset(files)


def packages_from_records(records: list[dict[str, Any]]) -> list[LocalPackage]:
    """Build LocalPackages from `go list -deps -json` records.

    Records matching the pattern (not DepOnly) are the local packages; the
    others are only used to find the module owning each import. `go list`
    prints a package only after all its dependencies, and that order is kept.
    """
    by_path = {rec["ImportPath"]: rec for rec in records}

    packages = []
    for rec in records:
        if rec.get("DepOnly"):
            continue

        error = rec.get("Error")
        if error:
            raise GraphLoadError(f"failed querying package {rec['ImportPath']}: {error.get('Err', error)}")

        imports: dict[str, ImportedPackage] = {}
        for import_path in rec.get("Imports") or []:
            imported = by_path.get(import_path, {})
            module, version = _owning_module(imported)
            imports[import_path] = ImportedPackage(path=import_path, module=module, version=version)

        packages.append(
            LocalPackage(
                path=rec["ImportPath"],
                files=_package_files(rec),
                imports=imports,
            )
        )

    return packages


def list_local_packages(mod_dir: str, *, go: str = "go", env: dict[str, str] | None = None) -> PackageGraph:
    """Load the packages of the module in `mod_dir`, dependencies first.

    Raises:
        GraphLoadError: `go list` failed or a package has an error (e.g. a
            syntax error in its sources)
    """
    args = [go, "list", "-e", "-deps", "-json=" + ",".join(GO_LIST_FIELDS), "./..."]
    try:
        out = run_command(args, cwd=mod_dir, env=env)
    except CommandError as exc:
        raise GraphLoadError(f"failed listing local packages: {exc}") from exc

    try:
        records = list(iter_json_stream(out))
    except ValueError as exc:
        raise GraphLoadError(f"failed decoding `go list` output: {exc}") from exc

    packages = packages_from_records(records)
    logger.debug("loaded %d local packages from %s", len(packages), mod_dir)
    return PackageGraph(packages=packages)
