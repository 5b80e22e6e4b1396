"""Serializable snapshots of a resolved tree."""

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from deptree.tree.node import TreeNode


class NodeSnapshot(BaseModel):
    """Observable state of one node and, recursively, its children.

    Field aliases are the stable names used when the snapshot is dumped
    with ``by_alias=True``.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str = ""
    requested_spec: Optional[str] = Field(default=None, alias="requestedSpec")
    resolved_from: Optional[str] = Field(default=None, alias="resolvedFrom")
    location: Optional[str] = None
    required_by_names: list[str] = Field(default_factory=list, alias="requiredByNames")
    phantom_children: dict[str, str] = Field(default_factory=dict, alias="phantomChildren")
    bundled: bool = False
    from_shrinkwrap: bool = Field(default=False, alias="fromShrinkwrap")
    children: list["NodeSnapshot"] = Field(default_factory=list)

    def find(self, location: str) -> Optional["NodeSnapshot"]:
        """Return the snapshot at ``location`` in this subtree."""
        if self.location == location:
            return self
        for child in self.children:
            found = child.find(location)
            if found is not None:
                return found
        return None


def snapshot_tree(root: "TreeNode") -> NodeSnapshot:
    """Capture ``root`` and its subtree, children sorted by name."""
    pkg = root.package
    return NodeSnapshot(
        name=pkg.name,
        version=pkg.version,
        requested_spec=pkg.requested.raw if pkg.requested is not None else None,
        resolved_from=pkg.resolved_from,
        location=pkg.location,
        required_by_names=pkg.required_by.to_list(),
        phantom_children=dict(pkg.phantom_children),
        bundled=pkg.bundled,
        from_shrinkwrap=pkg.from_shrinkwrap,
        children=[
            snapshot_tree(child)
            for child in sorted(root.children, key=lambda c: c.package.name)
        ],
    )


NodeSnapshot.model_rebuild()
