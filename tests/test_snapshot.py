"""Tests for tree snapshots."""

import pytest

from deptree.models.snapshot import NodeSnapshot, snapshot_tree


@pytest.mark.asyncio
async def test_snapshot_fields(loader, registry, make_root) -> None:
    """Test snapshots carry the observable node fields."""
    registry.publish({"name": "a", "version": "1.0.0", "dependencies": {"b": "^2.0.0"}})
    registry.publish({"name": "b", "version": "2.0.0"})
    root = make_root({"b": "^2.0.0", "a": "^1.0.0"})
    await loader.load_deps(root)

    snapshot = snapshot_tree(root)

    assert [child.name for child in snapshot.children] == ["a", "b"]
    b = snapshot.find("/b")
    assert b.version == "2.0.0"
    assert b.requested_spec == "b@^2.0.0"
    assert b.resolved_from == "b@^2.0.0"
    assert b.required_by_names == ["/", "/a"]
    assert snapshot.find("/a").phantom_children == {"b": "2.0.0"}
    assert snapshot.find("/nope") is None


def test_snapshot_aliases(make_root, add_node) -> None:
    """Test the stable field names used for serialization."""
    root = make_root()
    child = add_node(root, "a", "1.0.0")
    child.package.from_shrinkwrap = True

    dumped = snapshot_tree(root).model_dump(by_alias=True)

    assert set(dumped) == {
        "name",
        "version",
        "requestedSpec",
        "resolvedFrom",
        "location",
        "requiredByNames",
        "phantomChildren",
        "bundled",
        "fromShrinkwrap",
        "children",
    }
    assert dumped["location"] == "/"
    assert dumped["requestedSpec"] is None
    assert dumped["children"][0]["requestedSpec"] == "a@1.0.0"
    assert dumped["children"][0]["fromShrinkwrap"] is True
    assert NodeSnapshot.model_validate(dumped) == snapshot_tree(root)
