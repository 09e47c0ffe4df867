"""Change propagation: from changed files and modules to impacted packages.

A package is impacted when:

- one of its files changed between the two revisions, or
- it imports a package from a third-party module whose required version
  changed between the two revisions, or
- it imports a local package for which either of the above holds.
"""

from typing import Iterable

from .events import EventCallback, ImpactEvent, ImpactKind
from .graph import PackageGraph
from .models import LocalPackage


def _discard(event: ImpactEvent) -> None:
    pass


def compute_impacted_packages(
    graph: PackageGraph | Iterable[LocalPackage],
    changed_files: Iterable[str],
    manifest_delta: set[str],
    repo_dir: str,
    on_event: EventCallback | None = None,
) -> set[str]:
    """Compute the set of impacted local package paths.

    Args:
        graph: Local packages, dependencies before dependents. A plain list is
            wrapped in a PackageGraph, which checks that order.
        changed_files: Paths relative to `repo_dir`; duplicates are harmless.
        manifest_delta: Third-party modules whose required version changed
        repo_dir: Absolute path of the repository root
        on_event: Called once for every package marked impacted

    Returns:
        Unordered set of import paths; sort it if you need a stable order.
    """
    if not isinstance(graph, PackageGraph):
        graph = PackageGraph(packages=list(graph))
    emit = on_event or _discard

    impacted: set[str] = set()

    for path in changed_files:
        owner = graph.owner_of(path, repo_dir)
        if owner is None or owner in impacted:
            continue
        impacted.add(owner)
        emit(ImpactEvent(ImpactKind.PACKAGE_FILE, owner, file=path))

    # A single forward pass is enough: the graph lists every dependency before
    # its dependents, so an impacted dependency is already recorded here.
    for pkg in graph:
        if pkg.path in impacted:
            continue
        event = impact_from_imports(pkg, impacted, manifest_delta)
        if event is not None:
            impacted.add(pkg.path)
            emit(event)

    return impacted


def impact_from_imports(
    pkg: LocalPackage,
    impacted: set[str],
    manifest_delta: set[str],
) -> ImpactEvent | None:
    """Return the first import of `pkg` that makes it impacted, as an event."""
    for import_path, imported in pkg.imports.items():
        if import_path in impacted:
            return ImpactEvent(ImpactKind.PACKAGE_IMPORT, pkg.path, dependency=import_path)
        if imported.module is not None and imported.module in manifest_delta:
            return ImpactEvent(ImpactKind.PACKAGE_MODULE, pkg.path, module=imported.module)
    return None
