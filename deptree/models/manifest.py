"""Package manifest data models.

Pydantic models for package.json-style manifests and shrinkwrap pins. The
manifest also carries the fields the resolver maintains while building a
tree (``_requested``, ``_from``, ``_location``, ``_phantomChildren``,
``_requiredBy``...), so a node's package is self-describing.
"""

from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from deptree.resolver.spec import RequestedSpec
from deptree.utils import OrderedSet


class ShrinkwrapEntry(BaseModel):
    """A pinned dependency in a shrinkwrap.

    Attributes:
        version: Pinned version.
        resolved: Exact location the version was fetched from.
        from_: Specifier the pin was originally created from.
        dependencies: Nested pins installed below this one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: str = ""
    resolved: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    dependencies: dict[str, "ShrinkwrapEntry"] = Field(default_factory=dict)

    def to_spec(self, name: str) -> str:
        """Build the ``name@spec`` that reproduces this pin.

        Prefers the resolved location, then a url ``from``, then the version.
        """
        if self.resolved:
            return f"{name}@{self.resolved}"
        if self.from_ and urlparse(self.from_).scheme:
            return f"{name}@{self.from_}"
        return f"{name}@{self.version}"


class Shrinkwrap(BaseModel):
    """A shrinkwrap document: pinned dependencies of one package."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    version: Optional[str] = None
    dependencies: dict[str, ShrinkwrapEntry] = Field(default_factory=dict)


class PackageManifest(BaseModel):
    """Manifest of one package plus resolver bookkeeping.

    Attributes:
        name: Package name.
        version: Package version.
        dependencies: Production dependencies (optional ones merged in).
        dev_dependencies: Development dependencies.
        optional_dependencies: Optional dependencies.
        peer_dependencies: Peer dependencies.
        bundle_dependencies: Names shipped inside the package.
        bin: Executables the package installs, name to path.
        requested: Specifier that caused this resolution.
        resolved_from: Provenance string recorded for reproducibility.
        location: Flat location in the tree (``/`` for the root).
        phantom_children: Names satisfied by an ancestor, name to version.
        required_by: Locations (or ``#USER`` / ``#DEV:<location>``) that
            need this package.
        from_shrinkwrap: Pinned by a shrinkwrap.
        bundled: Installed as part of a parent's bundle.
        shrinkwrap: Pins shipped with the package.
        bundled_packages: Pre-resolved manifests of bundled children.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    version: str = ""
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    optional_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="optionalDependencies"
    )
    peer_dependencies: dict[str, str] = Field(default_factory=dict, alias="peerDependencies")
    bundle_dependencies: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "bundleDependencies", "bundledDependencies", "bundle_dependencies"
        ),
        serialization_alias="bundleDependencies",
    )
    bin: dict[str, str] = Field(default_factory=dict)

    requested: Optional[RequestedSpec] = Field(default=None, alias="_requested")
    resolved_from: Optional[str] = Field(default=None, alias="_from")
    location: Optional[str] = Field(default=None, alias="_location")
    phantom_children: dict[str, str] = Field(default_factory=dict, alias="_phantomChildren")
    required_by: OrderedSet = Field(default_factory=OrderedSet, alias="_requiredBy")
    from_shrinkwrap: bool = Field(default=False, alias="_fromShrinkwrap")
    bundled: bool = Field(default=False, alias="_inBundle")
    shrinkwrap: Optional[Shrinkwrap] = Field(default=None, alias="_shrinkwrap")
    bundled_packages: list["PackageManifest"] = Field(default_factory=list, alias="_bundled")

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data: Any) -> Any:
        """Expand shorthand forms of ``bin`` and ``bundleDependencies``."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        name = data.get("name") or ""
        if isinstance(data.get("bin"), str):
            data["bin"] = {name.rsplit("/", 1)[-1]: data["bin"]}
        for key in ("bundleDependencies", "bundledDependencies", "bundle_dependencies"):
            value = data.get(key)
            if value is True:
                data[key] = list((data.get("dependencies") or {}).keys())
            elif value is False or value is None:
                data.pop(key, None)
        return data

    @model_validator(mode="after")
    def merge_optional_dependencies(self) -> "PackageManifest":
        """Optional dependencies are also production dependencies."""
        for name, spec in self.optional_dependencies.items():
            self.dependencies[name] = spec
        return self

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PackageManifest":
        """Load a manifest from a package.json file.

        Args:
            path: Path to the JSON file.

        Returns:
            Parsed manifest.
        """
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    @property
    def id(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name

    def declared_spec(self, name: str) -> Optional[str]:
        """Return the declared specifier for ``name``, production first."""
        if name in self.dependencies:
            return self.dependencies[name]
        return self.dev_dependencies.get(name)

    def is_optional(self, name: str) -> bool:
        return name in self.optional_dependencies


ShrinkwrapEntry.model_rebuild()
PackageManifest.model_rebuild()
