"""Placement planning: where a new package may be installed."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from deptree.models.manifest import PackageManifest
    from deptree.tree.node import TreeNode


def has_binary_conflict(tree: "TreeNode", pkg: "PackageManifest") -> bool:
    """Check whether a child of ``tree`` installs a binary ``pkg`` also installs."""
    if not pkg.bin:
        return False
    return any(
        bin_name in pkg.bin
        for child in tree.children
        for bin_name in child.package.bin
    )


def earliest_installable(
    required_by: "TreeNode",
    tree: "TreeNode",
    pkg: "PackageManifest",
) -> Optional["TreeNode"]:
    """Find the highest level at which ``pkg`` can be installed.

    Walks up from ``tree``. A level is unusable if it already has a child of
    that name, a child with a colliding binary, a phantom record for the
    name, or (for levels other than ``required_by``) declares its own
    dependency on the name, because the requirement search would have found
    a compatible copy there. Once one level is proven safe, a failure higher
    up falls back to it.

    Args:
        required_by: Node whose requirement is being installed.
        tree: Level to examine.
        pkg: Package to place.

    Returns:
        Highest safe level, or None if ``tree`` itself is unusable.
    """
    if tree.child_named(pkg.name) is not None:
        return None

    if has_binary_conflict(tree, pkg):
        return None

    if required_by is not tree and pkg.name in tree.package.dependencies:
        return None

    if pkg.name in tree.package.phantom_children:
        return None

    parent = tree.parent
    if parent is None or tree.is_global:
        return tree

    return earliest_installable(required_by, parent, pkg) or tree
