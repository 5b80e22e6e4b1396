"""Tests for manifest models and shared helpers."""

import json

import pytest

from deptree.exceptions import DeptreeException, UnresolvableRequirementError, format_requiring_path
from deptree.models.manifest import PackageManifest, ShrinkwrapEntry
from deptree.utils import OrderedSet


class TestPackageManifest:
    """Tests for PackageManifest."""

    def test_aliases(self) -> None:
        """Test package.json names populate the model."""
        pkg = PackageManifest.model_validate({
            "name": "a",
            "version": "1.0.0",
            "devDependencies": {"t": "^1.0.0"},
            "peerDependencies": {"p": "^2.0.0"},
            "bundledDependencies": ["b"],
        })
        assert pkg.dev_dependencies == {"t": "^1.0.0"}
        assert pkg.peer_dependencies == {"p": "^2.0.0"}
        assert pkg.bundle_dependencies == ["b"]
        assert pkg.id == "a@1.0.0"

    def test_optional_merged_into_dependencies(self) -> None:
        """Test optional dependencies are also production dependencies."""
        pkg = PackageManifest.model_validate({
            "name": "a",
            "dependencies": {"x": "^1.0.0"},
            "optionalDependencies": {"o": "^2.0.0"},
        })
        assert pkg.dependencies == {"x": "^1.0.0", "o": "^2.0.0"}
        assert pkg.is_optional("o")
        assert not pkg.is_optional("x")

    def test_bin_string(self) -> None:
        """Test a bare bin path is keyed by the unscoped name."""
        pkg = PackageManifest.model_validate({"name": "@scope/tool", "bin": "cli.js"})
        assert pkg.bin == {"tool": "cli.js"}

    def test_bundle_all(self) -> None:
        """Test bundleDependencies true bundles every dependency."""
        pkg = PackageManifest.model_validate({
            "name": "a",
            "dependencies": {"x": "1", "y": "2"},
            "bundleDependencies": True,
        })
        assert pkg.bundle_dependencies == ["x", "y"]

    def test_declared_spec(self) -> None:
        """Test production specs win over dev ones."""
        pkg = PackageManifest.model_validate({
            "name": "a",
            "dependencies": {"x": "^1.0.0"},
            "devDependencies": {"x": "^2.0.0", "t": "^3.0.0"},
        })
        assert pkg.declared_spec("x") == "^1.0.0"
        assert pkg.declared_spec("t") == "^3.0.0"
        assert pkg.declared_spec("nope") is None

    def test_resolver_fields_round_trip(self) -> None:
        """Test resolver bookkeeping survives a dump by alias."""
        pkg = PackageManifest.model_validate({"name": "a", "version": "1.0.0"})
        pkg.required_by.add("/")
        pkg.required_by.add("#DEV:/b")
        pkg.phantom_children["c"] = "1.0.0"

        dumped = pkg.model_dump(by_alias=True, exclude={"requested"})
        assert dumped["_requiredBy"] == ["/", "#DEV:/b"]
        assert dumped["_phantomChildren"] == {"c": "1.0.0"}

        restored = PackageManifest.model_validate(dumped)
        assert restored.required_by == pkg.required_by

    def test_from_file(self, tmp_path) -> None:
        """Test loading a package.json."""
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "a", "version": "2.0.0", "dependencies": {"b": "*"}}), encoding="utf-8")
        pkg = PackageManifest.from_file(path)
        assert pkg.id == "a@2.0.0"
        assert pkg.dependencies == {"b": "*"}


class TestShrinkwrapEntry:
    """Tests for ShrinkwrapEntry.to_spec."""

    def test_prefers_resolved(self) -> None:
        """Test the resolved location wins."""
        entry = ShrinkwrapEntry.model_validate({
            "version": "1.0.0",
            "resolved": "https://r.example/a.tgz",
            "from": "a@^1.0.0",
        })
        assert entry.to_spec("a") == "a@https://r.example/a.tgz"

    def test_url_from(self) -> None:
        """Test a url from is used when nothing was resolved."""
        entry = ShrinkwrapEntry.model_validate({"version": "1.0.0", "from": "git+https://h/a.git"})
        assert entry.to_spec("a") == "a@git+https://h/a.git"

    def test_version(self) -> None:
        """Test the version is the fallback."""
        entry = ShrinkwrapEntry.model_validate({"version": "1.0.0", "from": "a@^1.0.0"})
        assert entry.to_spec("a") == "a@1.0.0"


class TestOrderedSet:
    """Tests for OrderedSet."""

    def test_keeps_first_position(self) -> None:
        """Test re-adding an element does not move it."""
        items = OrderedSet(["b", "a"])
        items.add("b")
        items.add("c")
        assert items.to_list() == ["b", "a", "c"]

    def test_discard_and_update(self) -> None:
        """Test removal and bulk insertion."""
        items = OrderedSet(["a", "b"])
        items.discard("a")
        items.discard("missing")
        items.update(["c", "b"])
        assert list(items) == ["b", "c"]
        assert len(items) == 2
        assert "c" in items

    def test_order_sensitive_equality(self) -> None:
        """Test two ordered sets are equal only in the same order."""
        assert OrderedSet(["a", "b"]) == OrderedSet(["a", "b"])
        assert OrderedSet(["a", "b"]) != OrderedSet(["b", "a"])
        assert OrderedSet(["a", "b"]) == {"b", "a"}

    def test_unhashable(self) -> None:
        """Test ordered sets cannot be hashed."""
        with pytest.raises(TypeError):
            hash(OrderedSet())


class TestExceptions:
    """Tests for exception formatting."""

    def test_requiring_path_in_message(self) -> None:
        """Test the chain of requirers is rendered."""
        error = UnresolvableRequirementError("c", "^1.0.0", ["/", "/a", "/a/b"], cause=KeyError("c"))
        assert str(error).startswith("Cannot resolve 'c@^1.0.0'")
        assert str(error).endswith("(required by / > /a > /a/b)")
        assert error.message.startswith("Cannot resolve")
        assert isinstance(error.cause, KeyError)

    def test_without_path(self) -> None:
        """Test errors without a chain keep their plain message."""
        assert str(DeptreeException("boom")) == "boom"
        assert format_requiring_path([]) == ""
