"""Data models for packages and manifest requirements."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImportedPackage:
    """A package imported by a local package."""

    path: str
    module: str | None = None  # owning third-party module; None for local/stdlib
    version: str | None = None


@dataclass
class LocalPackage:
    """A package of the module under analysis."""

    path: str  # import path
    files: frozenset[str] = field(default_factory=frozenset)  # absolute paths
    imports: dict[str, ImportedPackage] = field(default_factory=dict)  # import path -> package

    def owns(self, abs_path: str) -> bool:
        return abs_path in self.files


@dataclass(frozen=True)
class ModuleRequirement:
    """A `require` entry of a manifest snapshot."""

    module: str
    version: str
    indirect: bool = False
