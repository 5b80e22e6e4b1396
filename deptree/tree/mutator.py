"""Tree mutation: attaching, linking and detaching nodes.

Every structural change to a tree goes through a :class:`TreeMutator`.
Metadata fetches may run concurrently, but :meth:`TreeMutator.apply` and
the other mutating entry points hold the mutator's lock, so only one
writer touches ``children``, ``phantom_children`` and ``required_by`` at a
time.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from deptree.config import Settings, get_settings
from deptree.exceptions import ConflictingPlacementError
from deptree.models.manifest import PackageManifest
from deptree.resolver.matcher import is_prod_dep, is_requirement_satisfied_by
from deptree.resolver.placement import earliest_installable
from deptree.resolver.requirement import find_requirement
from deptree.resolver.spec import RequestedSpec, SpecType
from deptree.services.bundled import BundledInflater
from deptree.services.metadata import MetadataRealizer
from deptree.services.shrinkwrap import ShrinkwrapInflater
from deptree.tree.node import TreeNode, create_node, flat_name_from_tree

logger = logging.getLogger(__name__)

USER_REQUIRED = "#USER"
DEV_PREFIX = "#DEV:"

# Manifest attribute each save target writes to
SAVE_TARGETS = {
    "dependencies": "dependencies",
    "devDependencies": "dev_dependencies",
    "optionalDependencies": "optional_dependencies",
}


@dataclass
class Resolution:
    """Outcome of the read-only phase for one dependency.

    Attributes:
        name: Dependency name.
        requested: Parsed requirement.
        existing: Node that already satisfied it when checked.
        package: Fetched manifest when nothing satisfied it.
    """

    name: str
    requested: RequestedSpec
    existing: Optional[TreeNode] = None
    package: Optional[PackageManifest] = None


def update_phantom_children(
    current: Optional[TreeNode],
    child: TreeNode,
) -> list[tuple[TreeNode, Optional[str]]]:
    """Stamp a phantom record for ``child`` from ``current`` upwards.

    Every level from ``current`` up to, but not including, ``child``'s
    parent records ``name -> version``.

    Returns:
        ``(node, previous version)`` for every level stamped, so the stamps
        can be undone.
    """
    name = child.package.name
    stamped = []
    while current is not None and current is not child.parent:
        stamped.append((current, current.package.phantom_children.get(name)))
        current.package.phantom_children[name] = child.package.version
        current = current.parent
    return stamped


def _restore_phantom_children(name: str, stamped: list[tuple[TreeNode, Optional[str]]]) -> None:
    for node, previous in stamped:
        if previous is None:
            node.package.phantom_children.pop(name, None)
        else:
            node.package.phantom_children[name] = previous


def _child_position(parent: TreeNode, name: str) -> tuple[int, Optional[TreeNode]]:
    for position, child in enumerate(parent.children):
        if child.package.name == name:
            return position, child
    return len(parent.children), None


def _put_back(parent: TreeNode, name: str, position: int, previous: Optional[TreeNode]) -> None:
    """Drop whatever ``parent`` holds as ``name`` and reinstate ``previous``."""
    parent.remove_children_named(name)
    if previous is not None:
        parent.children.insert(position, previous)
        previous.parent = parent


class TreeMutator:
    """Single writer for a dependency tree.

    Attributes:
        realizer: Metadata source.
        settings: Resolver settings.
        shrinkwrap: Shrinkwrap reader and inflater.
        bundled: Bundled-dependency inflater.
        lock: Serializes all mutations.
    """

    def __init__(
        self,
        realizer: MetadataRealizer,
        settings: Optional[Settings] = None,
        shrinkwrap: Optional[ShrinkwrapInflater] = None,
        bundled: Optional[BundledInflater] = None,
    ) -> None:
        """Initialize the mutator.

        Args:
            realizer: Metadata source.
            settings: Resolver settings; the global ones when omitted.
            shrinkwrap: Shrinkwrap inflater; built from ``realizer`` when omitted.
            bundled: Bundled inflater; a default one when omitted.
        """
        self.realizer = realizer
        self.settings = settings or get_settings()
        self.shrinkwrap = shrinkwrap or ShrinkwrapInflater(realizer, self.settings)
        self.bundled = bundled or BundledInflater()
        self.lock = asyncio.Lock()

    async def realize_package(
        self,
        spec: Union[str, RequestedSpec],
        base_path: Union[str, Path, None] = None,
    ) -> PackageManifest:
        """Fetch a manifest together with its shrinkwrap and bundled children.

        Touches no tree state, so it may run concurrently.
        """
        pkg = await self.realizer.fetch_metadata(spec, base_path)
        if pkg.requested is None and isinstance(spec, RequestedSpec):
            pkg.requested = spec
        if not pkg.resolved_from and pkg.requested is not None:
            pkg.resolved_from = f"{pkg.requested.name}@{pkg.requested.spec}"
        pkg = await self.realizer.add_shrinkwrap(pkg)
        pkg = await self.realizer.add_bundled(pkg)
        return pkg

    def add_required_dep(self, tree: TreeNode, child: TreeNode) -> bool:
        """Record that ``child`` satisfies a dependency of ``tree``.

        Production requirers are recorded by location, development ones as
        ``#DEV:<location>``.

        Returns:
            False if ``tree`` does not declare a dependency ``child`` satisfies.
        """
        if not is_requirement_satisfied_by(tree, child):
            return False
        location = flat_name_from_tree(tree)
        if is_prod_dep(tree, child.package.name) is not None:
            label = location
        else:
            label = f"{DEV_PREFIX}{location}"
        child.package.required_by.add(label)
        child.required_by.add(tree)
        return True

    def link_requirement(self, child: TreeNode, tree: TreeNode) -> TreeNode:
        """Reuse an existing node for a requirement of ``tree``.

        Args:
            child: Node that satisfies the requirement.
            tree: Requiring node.

        Returns:
            ``child``.
        """
        self.add_required_dep(tree, child)
        child.package.location = flat_name_from_tree(child)
        if tree.parent is not None and child is not tree and child.parent is not tree:
            update_phantom_children(tree, child)
        logger.debug(f"{tree.location} uses existing {child.package.id} at {child.location}")
        return child

    async def attach_new_node(self, pkg: PackageManifest, tree: TreeNode) -> TreeNode:
        """Install a fetched package for a requirement of ``tree``.

        The node goes to the highest level the placement planner allows,
        replacing any child of the same name there. If inflating its
        bundled or shrinkwrapped children fails, the tree is put back the
        way it was and the error propagates.

        Args:
            pkg: Manifest from :meth:`realize_package`.
            tree: Requiring node.

        Returns:
            The new node.

        Raises:
            ConflictingPlacementError: If the planner picked a level off the
                requiring path.
        """
        parent = earliest_installable(tree, tree, pkg) or tree
        if parent is not tree and all(parent is not ancestor for ancestor in tree.ancestors()):
            raise ConflictingPlacementError(pkg.name, flat_name_from_tree(parent))

        position, replaced = _child_position(parent, pkg.name)
        child = create_node(pkg, parent=parent, is_link=tree.is_link)
        parent.add_child(child)
        self.add_required_dep(tree, child)
        pkg.location = flat_name_from_tree(child)

        stamped = []
        if tree.parent is not None and parent is not tree:
            stamped = update_phantom_children(tree, child)

        try:
            if pkg.bundled_packages:
                self.bundled.inflate(child)

            if pkg.shrinkwrap is not None:
                child.shrinkwrap_checked = True
                if pkg.shrinkwrap.dependencies:
                    await self.shrinkwrap.inflate(child, pkg.shrinkwrap.dependencies)
        except Exception:
            _put_back(parent, pkg.name, position, replaced)
            _restore_phantom_children(pkg.name, stamped)
            logger.debug(f"Rolled back {pkg.id} at {child.location}")
            raise

        logger.debug(f"Installed {pkg.id} at {child.location} for {tree.location}")
        return child

    async def apply(self, tree: TreeNode, resolution: Resolution) -> TreeNode:
        """Apply one dependency's resolution to the tree.

        The requirement search is repeated under the lock, since earlier
        writers may have changed the tree after the read-only phase.

        Args:
            tree: Requiring node.
            resolution: Result of the read-only phase.

        Returns:
            Node now satisfying the requirement.
        """
        async with self.lock:
            existing = find_requirement(tree, resolution.name, resolution.requested)
            if existing is not None:
                self.link_requirement(existing, tree)
                await self.shrinkwrap.read_and_inflate(existing)
                return existing
            pkg = resolution.package
            if pkg is None:
                pkg = await self.realize_package(resolution.requested, tree.path)
            return await self.attach_new_node(pkg, tree)

    async def reconcile(self, child: TreeNode, tree: TreeNode) -> TreeNode:
        """Link an already attached node to its parent's requirements."""
        async with self.lock:
            if not is_requirement_satisfied_by(tree, child):
                logger.debug(f"{child.package.id} at {child.location} is extraneous")
            return self.link_requirement(child, tree)

    async def install_requested(
        self,
        pkg: PackageManifest,
        tree: TreeNode,
        save_to_dependencies: Optional[str] = None,
    ) -> TreeNode:
        """Install a package a user asked for directly under ``tree``'s care.

        Args:
            pkg: Fetched manifest.
            tree: Node the request is made for (usually the root).
            save_to_dependencies: Manifest map to record the spec in.

        Returns:
            The new node.
        """
        target = save_target(save_to_dependencies)
        async with self.lock:
            position, previous = _child_position(tree, pkg.name)
            tree.remove_children_named(pkg.name)
            try:
                child = await self.attach_new_node(pkg, tree)
            except Exception:
                _put_back(tree, pkg.name, position, previous)
                raise
            if self.settings.global_install:
                child.is_global = True

            spec = _saved_spec(child.package)
            if target is not None:
                getattr(tree.package, target)[child.package.name] = spec
            if target is not None and save_to_dependencies != "devDependencies":
                tree.package.dependencies[child.package.name] = spec
            child.directly_requested = True
            child.save = save_to_dependencies

            # things the user asked for that are not a dependency still
            # need a reason to stay
            if not self.add_required_dep(tree, child):
                child.package.required_by.add(USER_REQUIRED)
            logger.info(f"Added {child.package.id} at {child.location}")
            return child

    async def detach_requirement(
        self,
        tree: TreeNode,
        name: str,
        save_to_dependencies: Optional[str] = None,
    ) -> list[TreeNode]:
        """Detach the children of ``tree`` called ``name``.

        Detached nodes are tagged with ``save_to_dependencies`` and recorded
        in ``tree.removed``. References to the detached subtrees are dropped
        from the remaining nodes' required-by sets.

        Returns:
            The detached nodes.
        """
        async with self.lock:
            detached = tree.remove_children_named(name)
            for node in detached:
                node.save = save_to_dependencies
                if node not in tree.removed:
                    tree.removed.append(node)

            gone = [node for removed in detached for node in removed.walk()]
            if gone:
                for node in tree.root().walk():
                    for requirer in gone:
                        if requirer in node.required_by:
                            node.required_by.discard(requirer)
                            node.package.required_by.discard(requirer.location)
                            node.package.required_by.discard(f"{DEV_PREFIX}{requirer.location}")
            for node in detached:
                logger.info(f"Removed {node.package.id} from {tree.location}")
            return detached


def _saved_spec(pkg: PackageManifest) -> str:
    requested = pkg.requested
    if requested is None or requested.type == SpecType.TAG:
        return f"^{pkg.version}"
    return requested.raw_spec or requested.spec


def save_target(save_to_dependencies: Optional[str]) -> Optional[str]:
    if save_to_dependencies is None:
        return None
    try:
        return SAVE_TARGETS[save_to_dependencies]
    except KeyError:
        raise ValueError(f"Cannot save to '{save_to_dependencies}'") from None
