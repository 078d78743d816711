"""Navigable tree of workspace packages and their dependencies."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from cargodiag.models import Dependency, Metadata, Package

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageNode:
    """A workspace member; its children are its dependencies."""

    package: Package

    @property
    def label(self) -> str:
        return self.package.name

    @property
    def description(self) -> str:
        return self.package.version

    @property
    def tooltip(self) -> str | None:
        return self.package.description

    @property
    def collapsible(self) -> bool:
        return True


@dataclass(frozen=True)
class DependencyNode:
    """A dependency of a package; always a leaf."""

    dependency: Dependency

    @property
    def label(self) -> str:
        return self.dependency.name

    @property
    def description(self) -> str | None:
        return self.dependency.kind

    @property
    def tooltip(self) -> str | None:
        return self.dependency.source

    @property
    def collapsible(self) -> bool:
        return False


TreeItem = PackageNode | DependencyNode


class WorkspaceTree:
    """Tree data for a cargo workspace, built from its metadata."""

    def __init__(self, metadata: Metadata) -> None:
        self._listeners: list[Callable[[], None]] = []
        self.load_metadata(metadata)

    def load_metadata(self, metadata: Metadata) -> None:
        self.metadata = metadata
        self._packages: dict[str, Package] = {package.id: package for package in metadata.packages}

    def on_change(self, listener: Callable[[], None]) -> None:
        """Register a callback fired after every refresh."""
        self._listeners.append(listener)

    def refresh(self, metadata: Metadata | None = None) -> None:
        self.load_metadata(metadata if metadata is not None else self.metadata)
        for listener in self._listeners:
            listener()

    def children(self, element: TreeItem | None = None) -> list[TreeItem]:
        """Return the children of ``element``, or the roots when it is None."""
        if element is None:
            roots: list[TreeItem] = []
            for member_id in self.metadata.workspace_members:
                package = self._packages.get(member_id)
                if package is None:
                    logger.warning(f"Workspace member {member_id} missing from metadata packages")
                    continue
                roots.append(PackageNode(package))
            return roots

        if isinstance(element, PackageNode):
            package = self._packages.get(element.package.id, element.package)
            return [DependencyNode(dependency) for dependency in package.dependencies]

        return []
