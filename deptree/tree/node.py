"""Dependency tree nodes."""

import weakref
from pathlib import Path
from typing import Iterator, Optional, Union

from deptree.models.manifest import PackageManifest
from deptree.utils import OrderedSet

ROOT_LOCATION = "/"
MODULES_DIR = "node_modules"


class TreeNode:
    """One physically installed package instance.

    The tree owns nodes through ``children``. ``parent`` is a weak back
    reference and ``required_by`` holds non-owning references to the nodes
    whose requirement this node satisfies.

    Attributes:
        package: Manifest plus resolver bookkeeping.
        children: Direct children, unique by package name.
        required_by: Nodes this node satisfies a requirement of.
        loaded: Whether this node's own dependencies were resolved.
        is_global: Relaxes the placement planner below this node.
        is_link: Whether the node is a symlinked package.
        removed: Nodes detached from this node by a removal pass.
        missing_deps: Declared dependencies nothing satisfies, name to spec.
        directly_requested: Installed because a user asked for it.
        save: Dependency map a requested install or removal is saved to.
        path: Physical install path.
        shrinkwrap_checked: Whether the shrinkwrap reader has run.
    """

    def __init__(
        self,
        package: PackageManifest,
        parent: Optional["TreeNode"] = None,
        path: Union[str, Path, None] = None,
        children: Optional[list["TreeNode"]] = None,
        is_link: bool = False,
    ) -> None:
        self.package = package
        self._parent: Optional[weakref.ReferenceType] = None
        self.parent = parent
        self.path = Path(path) if path is not None else Path(".")
        self.children: list[TreeNode] = list(children or [])
        self.required_by: OrderedSet = OrderedSet()
        self.loaded = False
        self.is_global = False
        self.is_link = is_link
        self.removed: list[TreeNode] = []
        self.missing_deps: dict[str, str] = {}
        self.directly_requested = False
        self.save: Optional[str] = None
        self.shrinkwrap_checked = False

    @property
    def parent(self) -> Optional["TreeNode"]:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, value: Optional["TreeNode"]) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def location(self) -> Optional[str]:
        return self.package.location

    def __repr__(self) -> str:
        return f"<TreeNode {self.package.id} at {self.package.location or '?'}>"

    def child_named(self, name: str) -> Optional["TreeNode"]:
        """Return the direct child called ``name``, if any."""
        for child in self.children:
            if child.package.name == name:
                return child
        return None

    def remove_children_named(self, name: str) -> list["TreeNode"]:
        """Detach and return every direct child called ``name``."""
        removed = [child for child in self.children if child.package.name == name]
        self.children = [child for child in self.children if child.package.name != name]
        return removed

    def add_child(self, child: "TreeNode") -> None:
        """Attach ``child``, replacing any existing child of the same name."""
        self.remove_children_named(child.package.name)
        child.parent = self
        self.children.append(child)

    def ancestors(self) -> Iterator["TreeNode"]:
        """Yield the parent chain, nearest first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def root(self) -> "TreeNode":
        node = self
        for node in self.ancestors():
            pass
        return node

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and every descendant, children sorted by name."""
        yield self
        for child in sorted(self.children, key=lambda c: c.package.name):
            yield from child.walk()

    def requiring_path(self) -> list[str]:
        """Locations from the root down to this node."""
        chain = [flat_name_from_tree(self)]
        chain.extend(flat_name_from_tree(node) for node in self.ancestors())
        chain.reverse()
        return chain


def flat_name(path: str, node: TreeNode) -> str:
    return path + node.package.name


def flat_name_from_tree(tree: TreeNode) -> str:
    """Compute the flat location of ``tree`` from its parent chain.

    The root is ``/``; every other node is its parent's location joined with
    its own name.
    """
    parent = tree.parent
    if parent is None:
        return ROOT_LOCATION
    path = flat_name_from_tree(parent)
    if path != ROOT_LOCATION:
        path += "/"
    return flat_name(path, tree)


def child_path(parent: TreeNode, name: str) -> Path:
    """Physical install path of a child called ``name`` under ``parent``."""
    return parent.path / MODULES_DIR / name


def create_node(
    package: PackageManifest,
    parent: Optional[TreeNode] = None,
    path: Union[str, Path, None] = None,
    children: Optional[list[TreeNode]] = None,
    is_link: bool = False,
) -> TreeNode:
    """Create a node and give its package default bookkeeping.

    Args:
        package: Manifest of the node.
        parent: Node it will be attached under.
        path: Physical path; derived from the parent when omitted.
        children: Pre-resolved children (e.g. bundled ones).
        is_link: Whether the package is a symlink.

    Returns:
        The new node, not yet attached to ``parent.children``.
    """
    if path is None and parent is not None:
        path = child_path(parent, package.name)
    node = TreeNode(package, parent=parent, path=path, children=children, is_link=is_link)
    node.package.location = flat_name_from_tree(node)
    return node


def create_root(package: PackageManifest, path: Union[str, Path] = ".") -> TreeNode:
    """Create the root of a tree for a top-level manifest."""
    return create_node(package, path=path)


def reset_metadata(tree: TreeNode) -> None:
    """Clear required-by, phantom and missing-dependency bookkeeping.

    Locations are recomputed from the actual parent chain. Applies to the
    whole subtree.
    """
    seen: set[int] = set()

    def reset(node: TreeNode) -> None:
        if id(node) in seen:
            return
        seen.add(id(node))
        node.package.location = flat_name_from_tree(node)
        node.package.required_by = OrderedSet()
        node.package.phantom_children = {}
        node.required_by = OrderedSet()
        node.missing_deps = {}
        for child in node.children:
            reset(child)

    reset(tree)
