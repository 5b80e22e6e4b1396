"""Inflation of bundled dependencies into tree nodes."""

import logging
from typing import TYPE_CHECKING

from deptree.tree.node import create_node

if TYPE_CHECKING:
    from deptree.tree.node import TreeNode

logger = logging.getLogger(__name__)


class BundledInflater:
    """Creates nodes for the packages a package ships inside itself.

    Bundled manifests come pre-resolved with the parent's metadata, so no
    fetch happens here.
    """

    def inflate(self, node: "TreeNode") -> list["TreeNode"]:
        """Attach ``node``'s bundled packages as its children.

        Nested bundles are inflated recursively.

        Args:
            node: Node whose manifest lists ``bundled_packages``.

        Returns:
            The directly bundled children that were attached.
        """
        created = []
        for manifest in node.package.bundled_packages:
            child = create_node(manifest.model_copy(deep=True), parent=node)
            child.package.bundled = True
            node.add_child(child)
            created.append(child)
            logger.debug(f"Inflated bundled {child.package.id} at {child.location}")
            self.inflate(child)
        return created
