"""Recursive dependency resolution.

Resolution works one sibling group at a time. First every dependency of a
node is realized and, if nothing in the tree already satisfies it, fetched;
these reads run concurrently. Then the results are applied in name order
through the single :class:`~deptree.tree.mutator.TreeMutator`. Only after the
whole group has been applied does the pipeline descend into the children,
again in name order.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional

from deptree.config import Settings, get_settings
from deptree.exceptions import (
    DependencyResolutionError,
    DeptreeException,
    InvalidSpecError,
    MissingProductionDependency,
    OptionalDependencyFailed,
    PeerDependencyUnmet,
    UnresolvableRequirementError,
)
from deptree.models.manifest import PackageManifest
from deptree.resolver.requirement import find_requirement
from deptree.resolver.spec import resolve_spec
from deptree.services.metadata import MetadataRealizer
from deptree.services.progress import LogTracker, ProgressTracker
from deptree.tree.mutator import Resolution, TreeMutator, save_target
from deptree.tree.node import TreeNode, reset_metadata
from deptree.utils import OrderedSet

logger = logging.getLogger(__name__)


class DependencyLoader:
    """Resolves the dependencies of a tree, recursively.

    Attributes:
        realizer: Metadata source.
        settings: Resolver settings.
        mutator: The single writer for trees this loader touches.
        tracker: Default progress sink.
        warnings: Optional dependencies that failed and were skipped.
    """

    def __init__(
        self,
        realizer: MetadataRealizer,
        settings: Optional[Settings] = None,
        mutator: Optional[TreeMutator] = None,
        tracker: Optional[ProgressTracker] = None,
    ) -> None:
        """Initialize the loader.

        Args:
            realizer: Metadata source.
            settings: Resolver settings; the global ones when omitted.
            mutator: Tree mutator; one sharing ``realizer`` and ``settings``
                when omitted.
            tracker: Progress sink; a :class:`LogTracker` when omitted.
        """
        self.realizer = realizer
        self.settings = settings or get_settings()
        self.mutator = mutator or TreeMutator(realizer, self.settings)
        self.tracker = tracker or LogTracker()
        self.warnings: list[OptionalDependencyFailed] = []

    async def load_deps(self, tree: TreeNode, tracker: Optional[ProgressTracker] = None) -> None:
        """Resolve the production dependencies of ``tree`` and its subtree.

        Nodes other than the root are loaded at most once.

        Args:
            tree: Node to resolve.
            tracker: Progress sink for this node.

        Raises:
            DependencyResolutionError: If any production dependency in the
                subtree could not be resolved. Resolution of the other
                dependencies still completes.
        """
        tracker = tracker or self.tracker
        if tree.parent is not None:
            if tree.loaded:
                tracker.finish()
                return
            tree.loaded = True
        else:
            async with self.mutator.lock:
                await self.mutator.shrinkwrap.read_and_inflate(tree)

        deps = {
            name: spec
            for name, spec in tree.package.dependencies.items()
            if self.settings.optional or not tree.package.is_optional(name)
        }
        children, errors = await self._resolve_group(tree, deps, tracker, "loadDep")
        errors.extend(await self._for_each_child(children, self.load_deps, tracker))
        tracker.finish()
        self._raise_for(tree, errors)

    async def load_dev_deps(self, tree: TreeNode, tracker: Optional[ProgressTracker] = None) -> None:
        """Resolve the development dependencies of ``tree``.

        Names ``tree`` also declares as production dependencies are skipped.
        The resolved children are then loaded like production ones.

        Raises:
            DependencyResolutionError: If any dependency could not be resolved.
        """
        tracker = tracker or self.tracker
        deps = {
            name: spec
            for name, spec in tree.package.dev_dependencies.items()
            if name not in tree.package.dependencies
        }
        if not deps:
            tracker.finish()
            return
        children, errors = await self._resolve_group(tree, deps, tracker, "loadDevDep")
        errors.extend(await self._for_each_child(children, self.load_deps, tracker))
        tracker.finish()
        self._raise_for(tree, errors)

    async def load_extraneous(self, tree: TreeNode, tracker: Optional[ProgressTracker] = None) -> None:
        """Reconcile children that were attached but never loaded.

        Each such child is linked to ``tree``'s requirements instead of being
        resolved afresh, then reconciled recursively.
        """
        tracker = tracker or self.tracker
        pending = [child for child in tree.children if not child.loaded]
        for child in sorted(pending, key=lambda c: c.package.name):
            await self.mutator.reconcile(child, tree)
        errors = await self._for_each_child(pending, self.load_extraneous, tracker)
        tracker.finish()
        self._raise_for(tree, errors)

    async def load_requested_deps(
        self,
        args: Iterable[str],
        tree: TreeNode,
        save_to_dependencies: Optional[str] = None,
        tracker: Optional[ProgressTracker] = None,
    ) -> list[TreeNode]:
        """Install packages a user asked for by name.

        Args:
            args: ``name`` or ``name@spec`` strings.
            tree: Node to install them for, usually the root.
            save_to_dependencies: ``dependencies``, ``devDependencies`` or
                ``optionalDependencies`` to record the chosen specs in.
            tracker: Progress sink.

        Returns:
            The installed nodes, sorted by name.

        Raises:
            DependencyResolutionError: If a requested package, or anything in
                its subtree, could not be resolved.
        """
        tracker = tracker or self.tracker
        save_target(save_to_dependencies)
        args = list(args)
        fetched = await asyncio.gather(
            *(self._fetch_requested(arg, tree) for arg in args),
            return_exceptions=True,
        )

        errors: list[DeptreeException] = []
        packages: list[PackageManifest] = []
        for arg, result in zip(args, fetched):
            if isinstance(result, Exception):
                name, raw_spec = _split_arg(arg)
                errors.append(UnresolvableRequirementError(name, raw_spec, tree.requiring_path(), cause=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                packages.append(result)

        installed = []
        for pkg in sorted(packages, key=lambda p: p.name):
            group = tracker.new_group(f"loadRequestedDep:{pkg.name}")
            try:
                installed.append(await self.mutator.install_requested(pkg, tree, save_to_dependencies))
            except Exception as e:
                raw_spec = pkg.requested.raw_spec if pkg.requested is not None else ""
                errors.append(UnresolvableRequirementError(pkg.name, raw_spec, tree.requiring_path(), cause=e))
            group.finish()

        errors.extend(await self._for_each_child(installed, self.load_deps, tracker))
        tracker.finish()
        self._raise_for(tree, errors)
        return installed

    async def remove_deps(
        self,
        args: Iterable[str],
        tree: TreeNode,
        save_to_dependencies: Optional[str] = None,
        tracker: Optional[ProgressTracker] = None,
    ) -> list[TreeNode]:
        """Detach the named children of ``tree``.

        Returns:
            The detached nodes, in argument order.
        """
        tracker = tracker or self.tracker
        removed = []
        for name in args:
            item = tracker.new_item(f"removeDep:{name}")
            detached = await self.mutator.detach_requirement(tree, name, save_to_dependencies)
            if not detached:
                logger.debug(f"Nothing named {name} to remove from {tree.location}")
            removed.extend(detached)
            item.finish()
        tracker.finish()
        return removed

    async def recalculate_metadata(self, tree: TreeNode) -> None:
        """Rebuild required-by, phantom and missing-dependency bookkeeping.

        Structure is left alone: every declared dependency and development
        dependency is looked up again and linked to whatever satisfies it.
        Production dependencies nothing satisfies are recorded in
        ``missing_deps``. Specifiers that cannot be realized are skipped.
        """
        if tree.parent is None:
            reset_metadata(tree)

        specs: OrderedSet = OrderedSet()
        for deps in (tree.package.dependencies, tree.package.dev_dependencies):
            specs.update(f"{name}@{spec}" for name, spec in deps.items())
        specs = specs.to_list()

        realized = await asyncio.gather(
            *(self.realizer.realize(spec, tree.path) for spec in specs),
            return_exceptions=True,
        )
        for spec, requested in zip(specs, realized):
            if isinstance(requested, Exception):
                logger.debug(f"Skipping {spec} of {tree.location}: {requested}")
                continue
            if isinstance(requested, BaseException):
                raise requested
            async with self.mutator.lock:
                child = find_requirement(tree, requested.name, requested)
                if child is not None:
                    self.mutator.link_requirement(child, tree)
                elif requested.name in tree.package.dependencies:
                    tree.missing_deps[requested.name] = requested.raw_spec

        for child in sorted(tree.children, key=lambda c: c.package.name):
            await self.recalculate_metadata(child)

    async def _fetch_requested(self, arg: str, tree: TreeNode) -> PackageManifest:
        requested = await self.realizer.realize(arg, tree.path)
        if "@" not in arg.strip()[1:]:
            # bare names follow the shrinkwrap pin, then the declared range
            spec = self._pinned_spec(tree, requested.name)
            if spec is None:
                declared = tree.package.declared_spec(requested.name)
                spec = f"{requested.name}@{declared}" if declared is not None else None
            if spec is not None:
                requested = await self.realizer.realize(spec, tree.path)
        return await self.mutator.realize_package(requested, tree.path)

    def _pinned_spec(self, tree: TreeNode, name: str) -> Optional[str]:
        shrinkwrap = self.mutator.shrinkwrap.read(tree)
        if shrinkwrap is None or name not in shrinkwrap.dependencies:
            return None
        return shrinkwrap.dependencies[name].to_spec(name)

    async def _prepare(self, tree: TreeNode, name: str, raw_spec: str) -> Resolution:
        """Read-only phase for one dependency."""
        requested = await self.realizer.realize(f"{name}@{raw_spec}", tree.path)
        existing = find_requirement(tree, requested.name, requested)
        if existing is not None:
            return Resolution(name, requested, existing=existing)
        package = await self.mutator.realize_package(requested, tree.path)
        return Resolution(name, requested, package=package)

    async def _resolve_group(
        self,
        tree: TreeNode,
        deps: dict[str, str],
        tracker: ProgressTracker,
        label: str,
    ) -> tuple[list[TreeNode], list[DeptreeException]]:
        names = sorted(deps)
        prepared = await asyncio.gather(
            *(self._prepare(tree, name, deps[name]) for name in names),
            return_exceptions=True,
        )

        children: list[TreeNode] = []
        errors: list[DeptreeException] = []
        for name, result in zip(names, prepared):
            group = tracker.new_group(f"{label}:{name}")
            if isinstance(result, Resolution):
                try:
                    children.append(await self.mutator.apply(tree, result))
                except Exception as e:
                    result = e
            if isinstance(result, Exception):
                error = self._wrap(tree, name, deps[name], result)
                if isinstance(error, OptionalDependencyFailed):
                    group.warn("optional", f"Skipping failed optional dependency {error}")
                    group.verbose("optional", f"{name}@{deps[name]}: {result!r}")
                    self.warnings.append(error)
                else:
                    errors.append(error)
            elif isinstance(result, BaseException):
                raise result
            group.finish()
        return children, errors

    async def _for_each_child(
        self,
        children: list[TreeNode],
        load: Callable,
        tracker: ProgressTracker,
    ) -> list[DeptreeException]:
        errors: list[DeptreeException] = []
        for child in sorted(children, key=lambda c: c.package.name):
            try:
                await load(child, tracker.new_group(child.package.name))
            except DependencyResolutionError as e:
                errors.extend(e.errors)
        return errors

    def _wrap(
        self,
        tree: TreeNode,
        name: str,
        raw_spec: str,
        error: Exception,
    ) -> UnresolvableRequirementError:
        if tree.package.is_optional(name):
            return OptionalDependencyFailed(name, raw_spec, tree.requiring_path(), cause=error)
        logger.debug(f"Failed to resolve {name}@{raw_spec} for {tree.location}: {error!r}")
        return UnresolvableRequirementError(name, raw_spec, tree.requiring_path(), cause=error)

    @staticmethod
    def _raise_for(tree: TreeNode, errors: list[DeptreeException]) -> None:
        if not errors:
            return
        if tree.parent is None:
            for error in errors:
                logger.error(str(error))
        raise DependencyResolutionError(
            f"{len(errors)} requirement(s) could not be resolved",
            errors=errors,
            requiring_path=tree.requiring_path(),
        )


def _split_arg(arg: str) -> tuple[str, str]:
    at = arg.find("@", 1)
    if at == -1:
        return arg, ""
    return arg[:at], arg[at + 1:]


def validate_peer_deps(
    tree: TreeNode,
    on_invalid: Callable[[TreeNode, str, str], None],
) -> None:
    """Report the peer dependencies of ``tree`` nothing satisfies.

    Never changes the tree. Peers whose range cannot be parsed are reported
    as unmet.

    Args:
        tree: Node whose ``peer_dependencies`` are checked.
        on_invalid: Called with ``(tree, name, range)`` for each unmet peer.
    """
    for name, required_range in tree.package.peer_dependencies.items():
        try:
            requested = resolve_spec(name, required_range)
        except InvalidSpecError:
            requested = None
        if requested is None or find_requirement(tree, name, requested) is None:
            logger.warning(
                f"{tree.package.id} at {tree.location} requires a peer of "
                f"{name}@{required_range} but none is installed"
            )
            on_invalid(tree, name, required_range)


def collect_unmet_peers(tree: TreeNode) -> list[PeerDependencyUnmet]:
    """Validate the peers of every node in ``tree``, in walk order."""
    unmet: list[PeerDependencyUnmet] = []

    def record(node: TreeNode, name: str, required_range: str) -> None:
        unmet.append(PeerDependencyUnmet(node.location, name, required_range))

    for node in tree.walk():
        validate_peer_deps(node, record)
    return unmet


def find_missing_deps(tree: TreeNode) -> list[MissingProductionDependency]:
    """List the dependencies :meth:`DependencyLoader.recalculate_metadata`
    found unsatisfied, in walk order."""
    missing = []
    for node in tree.walk():
        for name, raw_spec in node.missing_deps.items():
            missing.append(MissingProductionDependency(node.location, name, raw_spec))
    return missing

