"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from deptree.config import Settings
from deptree.models.manifest import PackageManifest
from deptree.resolver.spec import resolve_spec
from deptree.services.progress import NullTracker
from deptree.services.registry import InMemoryRegistry
from deptree.tree.node import TreeNode, create_node, create_root
from deptree.tree.pipeline import DependencyLoader


@pytest.fixture
def settings() -> Settings:
    """Create settings isolated from the environment and any .env file.

    Returns:
        Test settings.
    """
    return Settings(_env_file=None, global_install=False, optional=True)


@pytest.fixture
def registry() -> InMemoryRegistry:
    """Create an empty in-memory registry.

    Returns:
        Registry with nothing published.
    """
    return InMemoryRegistry()


@pytest.fixture
def loader(registry: InMemoryRegistry, settings: Settings) -> DependencyLoader:
    """Create a dependency loader over the test registry.

    Args:
        registry: In-memory registry fixture.
        settings: Test settings fixture.

    Returns:
        Loader that reports no progress.
    """
    return DependencyLoader(registry, settings, tracker=NullTracker())


@pytest.fixture
def make_root(tmp_path: Path) -> Callable[..., TreeNode]:
    """Factory for root nodes.

    Args:
        tmp_path: Pytest temporary path fixture, used as the root's path.

    Returns:
        Function building a root from manifest fields.
    """

    def factory(
        dependencies: Optional[dict[str, str]] = None,
        **fields: Any,
    ) -> TreeNode:
        fields.setdefault("name", "root")
        fields.setdefault("version", "1.0.0")
        pkg = PackageManifest.model_validate({"dependencies": dependencies or {}, **fields})
        return create_root(pkg, path=tmp_path)

    return factory


@pytest.fixture
def add_node() -> Callable[..., TreeNode]:
    """Factory attaching a hand-built node under a parent.

    The node records a requirement for its own exact version unless
    ``spec`` is given.

    Returns:
        Function ``(parent, name, version, spec=None, **fields) -> TreeNode``.
    """

    def factory(
        parent: TreeNode,
        name: str,
        version: str,
        spec: Optional[str] = None,
        **fields: Any,
    ) -> TreeNode:
        pkg = PackageManifest.model_validate({"name": name, "version": version, **fields})
        pkg.requested = resolve_spec(name, spec or version)
        node = create_node(pkg, parent=parent)
        parent.add_child(node)
        return node

    return factory
