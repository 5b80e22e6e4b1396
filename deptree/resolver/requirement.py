"""Upward search for nodes that already satisfy a requirement."""

from typing import TYPE_CHECKING, Optional

from deptree.resolver.matcher import does_child_version_match
from deptree.resolver.spec import RequestedSpec

if TYPE_CHECKING:
    from deptree.tree.node import TreeNode


def find_requirement(
    tree: "TreeNode",
    name: str,
    requested: RequestedSpec,
) -> Optional["TreeNode"]:
    """Find a node at or above ``tree`` that satisfies a requirement.

    A name match that fails the version check stops the search: a new copy
    has to be installed below that point instead of reusing anything higher.

    Args:
        tree: Node to start searching from.
        name: Required package name.
        requested: Requirement to satisfy.

    Returns:
        Satisfying node, or None if a new node must be created.
    """
    current: Optional["TreeNode"] = tree
    while current is not None:
        if current.package.name == name and current.parent is not None:
            # this is the module itself; on a version mismatch a new copy
            # is needed
            return current if does_child_version_match(current, requested) else None

        name_matches = [
            child for child in current.children
            if child.package.name == name and child.parent is not None
        ]
        if name_matches:
            for child in name_matches:
                if does_child_version_match(child, requested):
                    return child
            return None

        current = current.parent
    return None
