"""
Structured impact events.

The propagation engine reports each decision it makes (a package marked
impacted, and why) as an ImpactEvent passed to a caller-supplied callback.
Nothing is recorded globally; callers choose where events go.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class ImpactKind(str, Enum):
    """Reason a package was marked impacted."""

    PACKAGE_FILE = "package_file"  # one of its files changed
    PACKAGE_IMPORT = "package_import"  # it imports an impacted local package
    PACKAGE_MODULE = "package_module"  # it imports from a module whose version changed


@dataclass(frozen=True)
class ImpactEvent:
    """A single impact decision."""

    kind: ImpactKind
    package: str
    file: str | None = None
    dependency: str | None = None
    module: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        d: dict[str, Any] = {"kind": self.kind.value, "package": self.package}
        if self.file:
            d["file"] = self.file
        if self.dependency:
            d["dependency"] = self.dependency
        if self.module:
            d["module"] = self.module
        return d


EventCallback = Callable[[ImpactEvent], None]


def format_event(event: ImpactEvent) -> str:
    """Format an event as a single human-readable line."""
    if event.kind == ImpactKind.PACKAGE_FILE:
        return f"package {event.package} changed because of file {event.file}"
    if event.kind == ImpactKind.PACKAGE_IMPORT:
        return f"package {event.package} changed because of dependent package {event.dependency}"
    return f"package {event.package} changed because of dependent 3rd party module {event.module}"
