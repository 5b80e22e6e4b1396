"""Abstract base class for package metadata sources."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from deptree.models.manifest import PackageManifest
from deptree.resolver.spec import RequestedSpec, parse_package_arg


class MetadataRealizer(ABC):
    """Abstract base class for metadata sources.

    Turns raw ``name@spec`` strings into concrete manifests. Implementations
    talk to a registry, a cache, a git host or the file system; the resolver
    only relies on this contract.

    Attributes:
        name: Unique name for this metadata source.
    """

    name: str = "base"

    async def realize(
        self,
        spec: str,
        base_path: Union[str, Path, None] = None,
    ) -> RequestedSpec:
        """Parse a raw specifier into a typed requirement.

        Args:
            spec: ``name@spec`` string.
            base_path: Directory local specifiers are relative to.

        Returns:
            Parsed requirement.

        Raises:
            InvalidSpecError: If the specifier is malformed.
        """
        return parse_package_arg(spec)

    @abstractmethod
    async def fetch_metadata(
        self,
        spec: Union[str, RequestedSpec],
        base_path: Union[str, Path, None] = None,
    ) -> PackageManifest:
        """Fetch the manifest of the package a specifier resolves to.

        The returned manifest must be a fresh object with ``requested`` set,
        never shared with another caller.

        Args:
            spec: ``name@spec`` string or parsed requirement.
            base_path: Directory local specifiers are relative to.

        Returns:
            Manifest of the chosen version.

        Raises:
            PackageNotFoundError: If the package does not exist.
            VersionNotFoundError: If no version satisfies the specifier.
        """
        ...

    async def add_shrinkwrap(self, pkg: PackageManifest) -> PackageManifest:
        """Attach the shrinkwrap shipped inside a package, if any.

        Default implementation keeps whatever ``pkg.shrinkwrap`` already holds.
        """
        return pkg

    async def add_bundled(self, pkg: PackageManifest) -> PackageManifest:
        """Attach manifests of bundled children, if any.

        Default implementation keeps whatever ``pkg.bundled_packages`` holds.
        """
        return pkg
