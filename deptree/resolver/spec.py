"""Package specifier parsing.

Turns ``name@spec`` strings into a typed :class:`RequestedSpec` so callers
can tell registry ranges from git, remote, local and tag requests.
"""

import re
from dataclasses import dataclass
from enum import Enum

from deptree.exceptions import InvalidSpecError
from deptree.resolver.semver import clean_version, is_valid_range


class SpecType(str, Enum):
    """Kinds of package specifiers."""

    VERSION = "version"  # Exact version, e.g. 1.2.3
    RANGE = "range"  # Semver range, e.g. ^1.2.0
    TAG = "tag"  # Dist-tag, e.g. latest
    GIT = "git"  # Git url or hosted shorthand
    REMOTE = "remote"  # Tarball url
    LOCAL = "local"  # Directory or tarball on disk


# Types resolved against registry versions with semver rules
REGISTRY_TYPES = frozenset({SpecType.RANGE, SpecType.VERSION})

_NAME = re.compile(r"^(?:@[a-z0-9][\w.~-]*/)?[a-z0-9_][\w.~-]*$", re.IGNORECASE)
_HOSTED = re.compile(r"^(?:github|gitlab|bitbucket|gist):", re.IGNORECASE)
_SHORTHAND = re.compile(r"^[\w-]+/[\w.-]+(?:#.*)?$")
_TAG = re.compile(r"^[A-Za-z][\w.-]*$")
_LOCAL_PREFIXES = ("file:", "./", "../", "/", "~/")


@dataclass
class RequestedSpec:
    """A parsed package specifier.

    Attributes:
        name: Package name.
        raw_spec: Specifier exactly as written after ``name@``.
        type: Kind of specifier.
        spec: Normalised specifier (cleaned version, trimmed range, url...).
    """

    name: str
    raw_spec: str
    type: SpecType
    spec: str

    @property
    def raw(self) -> str:
        """The full ``name@raw_spec`` string."""
        return f"{self.name}@{self.raw_spec}"

    @property
    def is_registry(self) -> bool:
        """Whether versions are matched with semver rules."""
        return self.type in REGISTRY_TYPES

    def __str__(self) -> str:
        return self.raw


def resolve_spec(name: str, raw_spec: str) -> RequestedSpec:
    """Classify a specifier for a known package name.

    An empty specifier means any version.

    Args:
        name: Package name.
        raw_spec: Specifier as written in a manifest.

    Returns:
        Parsed RequestedSpec.

    Raises:
        InvalidSpecError: If the name or specifier is malformed.
    """
    if not _NAME.match(name or ""):
        raise InvalidSpecError(f"{name}@{raw_spec}", "invalid package name")

    spec = (raw_spec or "").strip()

    if spec == "":
        return RequestedSpec(name, raw_spec, SpecType.RANGE, "*")

    if spec.startswith(("git+", "git://")) or _HOSTED.match(spec) or _SHORTHAND.match(spec):
        return RequestedSpec(name, raw_spec, SpecType.GIT, spec)

    if re.match(r"^https?://", spec, re.IGNORECASE):
        return RequestedSpec(name, raw_spec, SpecType.REMOTE, spec)

    if spec.startswith(_LOCAL_PREFIXES) or spec in (".", ".."):
        local = spec[len("file:"):] if spec.startswith("file:") else spec
        return RequestedSpec(name, raw_spec, SpecType.LOCAL, local)

    version = clean_version(spec)
    if version is not None:
        return RequestedSpec(name, raw_spec, SpecType.VERSION, version)

    if is_valid_range(spec):
        return RequestedSpec(name, raw_spec, SpecType.RANGE, spec)

    if _TAG.match(spec):
        return RequestedSpec(name, raw_spec, SpecType.TAG, spec)

    raise InvalidSpecError(f"{name}@{raw_spec}", "unrecognised specifier")


def parse_package_arg(arg: str) -> RequestedSpec:
    """Parse a ``name@spec`` string.

    Supports scoped names (``@scope/name@^1.0.0``). A bare name is a request
    for the ``latest`` tag.

    Args:
        arg: Package argument.

    Returns:
        Parsed RequestedSpec.

    Raises:
        InvalidSpecError: If the argument is malformed.
    """
    arg = arg.strip()
    at = arg.find("@", 1)
    if at == -1:
        if not _NAME.match(arg):
            raise InvalidSpecError(arg, "invalid package name")
        return RequestedSpec(arg, "", SpecType.TAG, "latest")
    return resolve_spec(arg[:at], arg[at + 1:])
