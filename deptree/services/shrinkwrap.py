"""Shrinkwrap reading and inflation."""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from deptree.config import Settings, get_settings
from deptree.exceptions import ShrinkwrapError
from deptree.models.manifest import PackageManifest, Shrinkwrap, ShrinkwrapEntry
from deptree.resolver.semver import clean_version
from deptree.services.metadata import MetadataRealizer
from deptree.tree.node import create_node

if TYPE_CHECKING:
    from deptree.tree.node import TreeNode

logger = logging.getLogger(__name__)


class ShrinkwrapInflater:
    """Reads shrinkwrap pins and turns them into pinned child nodes.

    Pinned nodes are marked ``from_shrinkwrap`` and satisfy every
    requirement for their name.

    Attributes:
        realizer: Metadata source used to fetch pinned manifests.
        settings: Resolver settings.
    """

    def __init__(
        self,
        realizer: MetadataRealizer,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize the inflater.

        Args:
            realizer: Metadata source.
            settings: Resolver settings; the global ones when omitted.
        """
        self.realizer = realizer
        self.settings = settings or get_settings()

    def read(self, node: "TreeNode") -> Optional[Shrinkwrap]:
        """Return the shrinkwrap of ``node``.

        The manifest's own shrinkwrap wins; otherwise the shrinkwrap file in
        the node's directory is read, if present.

        Raises:
            ShrinkwrapError: If the file exists but cannot be parsed.
        """
        if node.package.shrinkwrap is not None:
            return node.package.shrinkwrap
        path = node.path / self.settings.shrinkwrap_filename
        if not path.is_file():
            return None
        try:
            shrinkwrap = Shrinkwrap.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise ShrinkwrapError(str(path), str(e)) from e
        node.package.shrinkwrap = shrinkwrap
        logger.debug(f"Read shrinkwrap for {node.package.id} from {path}")
        return shrinkwrap

    async def read_and_inflate(self, node: "TreeNode") -> None:
        """Read ``node``'s shrinkwrap once and inflate its pins."""
        if node.shrinkwrap_checked:
            return
        node.shrinkwrap_checked = True
        shrinkwrap = self.read(node)
        if shrinkwrap is not None and shrinkwrap.dependencies:
            await self.inflate(node, shrinkwrap.dependencies)

    async def inflate(
        self,
        node: "TreeNode",
        entries: dict[str, ShrinkwrapEntry],
    ) -> list["TreeNode"]:
        """Install pinned entries as children of ``node``.

        Existing children already at the pinned version are kept; the others
        are fetched concurrently and attached in name order.

        Args:
            node: Node the pins belong to.
            entries: Pins by package name.

        Returns:
            Pinned children, sorted by name.

        Raises:
            DeptreeException: The first fetch failure, after all fetches
                have completed.
        """
        names = sorted(entries)
        fetched = await asyncio.gather(
            *(self._fetch_pin(node, name, entries[name]) for name in names),
            return_exceptions=True,
        )
        failures = [result for result in fetched if isinstance(result, BaseException)]
        if failures:
            raise failures[0]

        pinned = []
        for name, pkg in zip(names, fetched):
            entry = entries[name]
            if pkg is None:
                child = node.child_named(name)
            else:
                pkg.resolved_from = entry.from_ or entry.to_spec(name)
                child = create_node(pkg, parent=node)
                node.add_child(child)
            child.package.from_shrinkwrap = True
            child.shrinkwrap_checked = True
            pinned.append(child)
            if entry.dependencies:
                await self.inflate(child, entry.dependencies)
        return pinned

    async def _fetch_pin(
        self,
        node: "TreeNode",
        name: str,
        entry: ShrinkwrapEntry,
    ) -> Optional[PackageManifest]:
        existing = node.child_named(name)
        if existing is not None and _same_version(existing.package.version, entry.version):
            return None
        return await self.realizer.fetch_metadata(entry.to_spec(name), node.path)


def _same_version(actual: str, pinned: str) -> bool:
    return (clean_version(actual) or actual) == (clean_version(pinned) or pinned)
