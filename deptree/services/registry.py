"""In-memory metadata source."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from deptree.exceptions import PackageNotFoundError, VersionNotFoundError
from deptree.models.manifest import PackageManifest
from deptree.resolver.semver import (
    clean_version,
    find_best_match,
    is_prerelease,
    parse_version,
)
from deptree.resolver.spec import RequestedSpec, SpecType, resolve_spec
from deptree.services.metadata import MetadataRealizer

logger = logging.getLogger(__name__)


class InMemoryRegistry(MetadataRealizer):
    """Metadata source backed by published manifests held in memory.

    Ranges resolve to the newest satisfying version, tags through dist-tags
    (``latest`` defaults to the newest release), and git, remote and local
    specifiers through explicitly registered sources.

    Attributes:
        latency: Seconds every fetch waits before answering.
        fetched: Raw specifiers fetched, in call order.
        max_in_flight: Highest number of concurrent fetches observed.
    """

    name = "memory"

    def __init__(
        self,
        packages: Optional[Iterable[Union[PackageManifest, dict[str, Any]]]] = None,
        latency: float = 0.0,
    ) -> None:
        """Initialize the registry.

        Args:
            packages: Manifests to publish up front.
            latency: Artificial delay per fetch, in seconds.
        """
        self.latency = latency
        self.fetched: list[str] = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._packages: dict[str, dict[str, PackageManifest]] = {}
        self._dist_tags: dict[str, dict[str, str]] = {}
        self._sources: dict[str, PackageManifest] = {}
        for package in packages or []:
            self.publish(package)

    def publish(
        self,
        manifest: Union[PackageManifest, dict[str, Any]],
        tag: Optional[str] = None,
        source: Optional[str] = None,
    ) -> PackageManifest:
        """Publish a manifest.

        Args:
            manifest: Manifest or package.json-style dict.
            tag: Dist-tag to point at this version.
            source: Git, remote or local specifier that also yields it.

        Returns:
            The stored manifest.
        """
        if isinstance(manifest, dict):
            manifest = PackageManifest.model_validate(manifest)
        version = clean_version(manifest.version) or manifest.version
        self._packages.setdefault(manifest.name, {})[version] = manifest
        if tag:
            self.tag(manifest.name, tag, version)
        if source:
            self._sources[resolve_spec(manifest.name, source).spec] = manifest
        logger.debug(f"Published {manifest.name}@{version}")
        return manifest

    def tag(self, name: str, tag: str, version: str) -> None:
        """Point a dist-tag of ``name`` at ``version``."""
        self._dist_tags.setdefault(name, {})[tag] = version

    def versions(self, name: str) -> list[str]:
        """List published versions of ``name``."""
        return list(self._packages.get(name, {}))

    async def fetch_metadata(
        self,
        spec: Union[str, RequestedSpec],
        base_path: Union[str, Path, None] = None,
    ) -> PackageManifest:
        """Fetch the manifest a specifier resolves to.

        Args:
            spec: ``name@spec`` string or parsed requirement.
            base_path: Unused; local specifiers are looked up verbatim.

        Returns:
            Deep copy of the selected manifest with ``requested`` set.

        Raises:
            PackageNotFoundError: If the package is unknown.
            VersionNotFoundError: If nothing satisfies the specifier.
        """
        requested = spec if isinstance(spec, RequestedSpec) else await self.realize(spec, base_path)
        self.fetched.append(requested.raw)

        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.latency:
                await asyncio.sleep(self.latency)
            manifest = self._select(requested)
        finally:
            self._in_flight -= 1

        pkg = manifest.model_copy(deep=True)
        pkg.requested = requested
        if not requested.is_registry and requested.type != SpecType.TAG:
            pkg.resolved_from = requested.raw_spec
        return pkg

    def _select(self, requested: RequestedSpec) -> PackageManifest:
        if requested.type in (SpecType.GIT, SpecType.REMOTE, SpecType.LOCAL):
            manifest = self._sources.get(requested.spec)
            if manifest is None:
                raise VersionNotFoundError(requested.name, requested.raw_spec)
            return manifest

        published = self._packages.get(requested.name)
        if not published:
            raise PackageNotFoundError(requested.name)

        if requested.type == SpecType.TAG:
            version = self._dist_tags.get(requested.name, {}).get(requested.spec)
            if version is None and requested.spec == "latest":
                version = self._latest(list(published))
        elif requested.type == SpecType.VERSION:
            version = requested.spec if requested.spec in published else None
        else:
            version = find_best_match(list(published), requested.spec)

        if version is None or version not in published:
            raise VersionNotFoundError(requested.name, requested.raw_spec)
        return published[version]

    @staticmethod
    def _latest(versions: list[str]) -> Optional[str]:
        releases = [v for v in versions if not is_prerelease(v)]
        candidates = releases or versions
        return max(candidates, key=parse_version) if candidates else None
