"""Collaborators of the resolver: metadata, shrinkwrap, bundles, progress."""

from deptree.services.metadata import MetadataRealizer
from deptree.services.registry import InMemoryRegistry
from deptree.services.progress import LogTracker, NullTracker, ProgressTracker
from deptree.services.bundled import BundledInflater
from deptree.services.shrinkwrap import ShrinkwrapInflater

__all__ = [
    "MetadataRealizer",
    "InMemoryRegistry",
    "LogTracker",
    "NullTracker",
    "ProgressTracker",
    "BundledInflater",
    "ShrinkwrapInflater",
]
