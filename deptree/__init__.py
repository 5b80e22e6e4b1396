"""deptree - dependency tree resolution for npm-style package manifests."""

__version__ = "0.1.0"

from deptree.config import Settings, get_settings
from deptree.exceptions import (
    DependencyResolutionError,
    DeptreeException,
    UnresolvableRequirementError,
)
from deptree.models import NodeSnapshot, PackageManifest, snapshot_tree
from deptree.services import (
    InMemoryRegistry,
    LogTracker,
    MetadataRealizer,
    NullTracker,
)
from deptree.tree.node import TreeNode, create_root
from deptree.tree.mutator import TreeMutator
from deptree.tree.pipeline import (
    DependencyLoader,
    collect_unmet_peers,
    find_missing_deps,
    validate_peer_deps,
)

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "DependencyResolutionError",
    "DeptreeException",
    "UnresolvableRequirementError",
    "NodeSnapshot",
    "PackageManifest",
    "snapshot_tree",
    "InMemoryRegistry",
    "LogTracker",
    "MetadataRealizer",
    "NullTracker",
    "TreeNode",
    "create_root",
    "TreeMutator",
    "DependencyLoader",
    "collect_unmet_peers",
    "find_missing_deps",
    "validate_peer_deps",
]
