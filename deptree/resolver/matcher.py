"""Version matching between requirements and existing tree nodes."""

from typing import TYPE_CHECKING, Optional

from deptree.exceptions import InvalidSpecError
from deptree.resolver.semver import satisfies
from deptree.resolver.spec import RequestedSpec, resolve_spec

if TYPE_CHECKING:
    from deptree.tree.node import TreeNode


def is_prod_dep(tree: "TreeNode", name: str) -> Optional[RequestedSpec]:
    """Return the production requirement ``tree`` declares for ``name``."""
    raw = tree.package.dependencies.get(name)
    if raw is None:
        return None
    return _requested_or_none(name, raw)


def is_dev_dep(tree: "TreeNode", name: str) -> Optional[RequestedSpec]:
    """Return the development requirement ``tree`` declares for ``name``."""
    raw = tree.package.dev_dependencies.get(name)
    if raw is None:
        return None
    return _requested_or_none(name, raw)


def _requested_or_none(name: str, raw: str) -> Optional[RequestedSpec]:
    try:
        return resolve_spec(name, raw)
    except InvalidSpecError:
        return None


def does_child_version_match(child: "TreeNode", requested: RequestedSpec) -> bool:
    """Check whether an existing node satisfies a requirement.

    The first rule that applies decides:

    1. Shrinkwrap-pinned nodes always match.
    2. The node was requested with the identical raw specifier.
    3. The node was requested with the same specifier type and text.
    4. Non-registry requirements (git, tag, url...) match only if the raw
       specifier equals the node's recorded ``_from`` verbatim.
    5. Registry requirements match if the node's version satisfies the range.

    Args:
        child: Candidate node.
        requested: Requirement to satisfy.

    Returns:
        True if ``child`` satisfies ``requested``.
    """
    if child.package.from_shrinkwrap:
        return True
    child_req = child.package.requested
    if child_req is not None and child_req.raw_spec == requested.raw_spec:
        return True
    if child_req is not None and child_req.type == requested.type and child_req.spec == requested.spec:
        return True
    if not requested.is_registry:
        return requested.raw_spec == child.package.resolved_from
    return satisfies(child.package.version, requested.spec)


def is_requirement_satisfied_by(tree: "TreeNode", child: "TreeNode") -> bool:
    """Check whether ``child`` satisfies a dependency ``tree`` declares.

    Production dependencies are checked before development ones.
    """
    if child.package.from_shrinkwrap:
        return True
    name = child.package.name
    requested = is_prod_dep(tree, name)
    if requested is not None and does_child_version_match(child, requested):
        return True
    requested = is_dev_dep(tree, name)
    if requested is None:
        return False
    return does_child_version_match(child, requested)
