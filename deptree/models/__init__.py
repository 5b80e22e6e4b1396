"""Pydantic models for manifests, shrinkwraps and tree snapshots."""

from deptree.models.manifest import PackageManifest, Shrinkwrap, ShrinkwrapEntry
from deptree.models.snapshot import NodeSnapshot, snapshot_tree

__all__ = [
    "PackageManifest",
    "Shrinkwrap",
    "ShrinkwrapEntry",
    "NodeSnapshot",
    "snapshot_tree",
]
