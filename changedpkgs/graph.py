"""Package graph construction and file attribution."""

import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .errors import GraphLoadError, GraphOrderError, OwnershipConflictError
from .models import LocalPackage


def resolve_changed_path(repo_dir: str, path: str) -> str:
    """Absolute, normalised form of a repo-relative path."""
    return os.path.normpath(os.path.join(repo_dir, path))


def attribute_file(path: str, packages: Iterable[LocalPackage], repo_dir: str) -> str | None:
    """Return the import path of the package owning `path`, or None.

    `path` is relative to `repo_dir`. Packages are scanned in order and the
    first owner wins; a file owned by no package is not an error.
    """
    abs_path = resolve_changed_path(repo_dir, path)
    for pkg in packages:
        if pkg.owns(abs_path):
            return pkg.path
    return None


@dataclass
class PackageGraph:
    """Local packages in dependency order (dependencies first).

    Construction checks that order: every imported package that is part of the
    graph must come before its importer. It also checks that no file is owned
    by two packages, which is what makes first-match attribution sound.
    """

    packages: list[LocalPackage] = field(default_factory=list)

    # Lookup tables built on construction
    _by_path: dict[str, LocalPackage] = field(default_factory=dict, repr=False)
    _owners: dict[str, str] = field(default_factory=dict, repr=False)  # abs file -> package path

    def __post_init__(self):
        self._build_lookups()
        self._check_order()

    def _build_lookups(self):
        self._by_path = {}
        self._owners = {}
        for pkg in self.packages:
            if pkg.path in self._by_path:
                raise GraphLoadError(f"package {pkg.path} listed more than once")
            self._by_path[pkg.path] = pkg

            for file in sorted(pkg.files):
                owner = self._owners.get(file)
                if owner is not None:
                    raise OwnershipConflictError(file, [owner, pkg.path])
                self._owners[file] = pkg.path

    def _check_order(self):
        seen: set[str] = set()
        for pkg in self.packages:
            for import_path in pkg.imports:
                if import_path in self._by_path and import_path not in seen:
                    raise GraphOrderError(
                        f"package {pkg.path} is listed before its dependency {import_path}"
                    )
            seen.add(pkg.path)

    @classmethod
    def from_unordered(cls, packages: list[LocalPackage]) -> "PackageGraph":
        """Build a graph from packages in any order.

        Uses Kahn's algorithm, keeping the given order among packages whose
        dependencies are all placed. Raises GraphOrderError on an import cycle.
        """
        by_path = {pkg.path: pkg for pkg in packages}
        if len(by_path) != len(packages):
            raise GraphLoadError("package list contains duplicate import paths")

        in_degree: dict[str, int] = {}
        dependents: dict[str, list[str]] = defaultdict(list)
        for pkg in packages:
            local_deps = [dep for dep in pkg.imports if dep in by_path and dep != pkg.path]
            in_degree[pkg.path] = len(local_deps)
            for dep in local_deps:
                dependents[dep].append(pkg.path)

        # Start with packages that have no local dependencies
        ready = [pkg.path for pkg in packages if in_degree[pkg.path] == 0]
        ordered: list[LocalPackage] = []

        while ready:
            path = ready.pop(0)
            ordered.append(by_path[path])
            for dependent in dependents.get(path, []):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready.append(dependent)

        if len(ordered) != len(by_path):
            placed = {pkg.path for pkg in ordered}
            stuck = sorted(path for path in by_path if path not in placed)
            raise GraphOrderError(f"import cycle between packages: {', '.join(stuck)}")

        return cls(packages=ordered)

    def __iter__(self) -> Iterator[LocalPackage]:
        return iter(self.packages)

    def __len__(self) -> int:
        return len(self.packages)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def get(self, path: str) -> LocalPackage | None:
        """Get a package by import path."""
        return self._by_path.get(path)

    @property
    def paths(self) -> list[str]:
        """Import paths in graph order."""
        return [pkg.path for pkg in self.packages]

    def owner_of(self, path: str, repo_dir: str) -> str | None:
        """Indexed equivalent of attribute_file for this graph."""
        return self._owners.get(resolve_changed_path(repo_dir, path))

