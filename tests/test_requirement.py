"""Tests for the upward requirement search."""

from deptree.resolver.requirement import find_requirement
from deptree.resolver.spec import resolve_spec


def test_finds_own_child(make_root, add_node) -> None:
    """Test that a compatible direct child is reused."""
    root = make_root()
    a = add_node(root, "a", "1.0.0")
    c = add_node(a, "c", "1.1.0")
    assert find_requirement(a, "c", resolve_spec("c", "^1.0.0")) is c


def test_finds_ancestor_child(make_root, add_node) -> None:
    """Test that the search climbs to ancestors."""
    root = make_root()
    a = add_node(root, "a", "1.0.0")
    b = add_node(root, "b", "2.0.0")
    assert find_requirement(a, "b", resolve_spec("b", "^2.0.0")) is b


def test_name_mismatch_stops_search(make_root, add_node) -> None:
    """Test that an incompatible copy shadows compatible ones higher up."""
    root = make_root()
    add_node(root, "c", "1.0.0")
    a = add_node(root, "a", "1.0.0")
    add_node(a, "c", "2.0.0")
    x = add_node(a, "x", "1.0.0")
    assert find_requirement(x, "c", resolve_spec("c", "^1.0.0")) is None


def test_not_found(make_root, add_node) -> None:
    """Test that the search ends past the root."""
    root = make_root()
    a = add_node(root, "a", "1.0.0")
    assert find_requirement(a, "zzz", resolve_spec("zzz", "*")) is None


def test_self_match(make_root, add_node) -> None:
    """Test that a node requiring its own name may satisfy itself."""
    root = make_root()
    a = add_node(root, "a", "1.0.0")
    assert find_requirement(a, "a", resolve_spec("a", "^1.0.0")) is a
    assert find_requirement(a, "a", resolve_spec("a", "^2.0.0")) is None


def test_root_is_not_a_candidate(make_root) -> None:
    """Test that the root never satisfies a requirement by name."""
    root = make_root(name="a")
    assert find_requirement(root, "a", resolve_spec("a", "*")) is None


def test_cycle_resolves_to_ancestor(make_root, add_node) -> None:
    """Test that a dependency on an ancestor's name finds the ancestor."""
    root = make_root()
    a = add_node(root, "a", "1.0.0")
    b = add_node(a, "b", "1.0.0")
    assert find_requirement(b, "a", resolve_spec("a", "^1.0.0")) is a
