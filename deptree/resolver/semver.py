"""Semantic versioning utilities.

Versions follow semver ordering: the ``X.Y.Z`` release is compared as a
``packaging`` version, then prerelease identifiers are compared one by one
(numeric identifiers numerically and below alphanumeric ones). A release
sorts above all of its prereleases.

npm-style ranges are parsed into comparator sets. A range is a list of sets
joined by ``||``; a version satisfies the range if it passes every
comparator of any one set.
"""

import operator
import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

_FULL_VERSION = re.compile(
    r"^[v=\s]*(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_PARTIAL_VERSION = re.compile(
    r"^v?(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_HYPHEN_RANGE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OPERATOR_GAP = re.compile(r"(<=|>=|==|!=|~>|<|>|=|\^|~)\s+")
_COMPARATOR = re.compile(r"^(<=|>=|==|!=|~>|<|>|=|\^|~)?(.*)$")

_TESTS = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
    "!=": operator.ne,
}

Identifier = Union[int, str]


def _compare_prerelease(left: tuple[Identifier, ...], right: tuple[Identifier, ...]) -> int:
    if left == right:
        return 0
    # no prerelease ranks above any prerelease
    if not left:
        return 1
    if not right:
        return -1
    for a, b in zip(left, right):
        if a == b:
            continue
        if isinstance(a, int) and isinstance(b, int):
            return -1 if a < b else 1
        if isinstance(a, int):
            return -1
        if isinstance(b, int):
            return 1
        return -1 if a < b else 1
    return -1 if len(left) < len(right) else 1


@total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed ``X.Y.Z[-prerelease]`` version.

    Attributes:
        release: The ``X.Y.Z`` part.
        prerelease: Dot-separated prerelease identifiers, digits as ints.
    """

    release: Version
    prerelease: tuple[Identifier, ...] = field(default=())

    @property
    def major(self) -> int:
        return self.release.major

    @property
    def minor(self) -> int:
        return self.release.minor

    @property
    def patch(self) -> int:
        return self.release.micro

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        if self.release != other.release:
            return self.release < other.release
        return _compare_prerelease(self.prerelease, other.prerelease) < 0

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(part) for part in self.prerelease)
        return text


# Lowest possible version; "<0.0.0-0" matches nothing
_NOTHING = ("<", SemVer(Version("0.0.0"), (0,)))

Comparator = tuple[str, SemVer]
ComparatorSet = list[Comparator]
VersionRange = list[ComparatorSet]


def _identifiers(pre: Optional[str]) -> tuple[Identifier, ...]:
    if not pre:
        return ()
    parts = pre.split(".")
    if any(part == "" for part in parts):
        raise ValueError(f"Invalid prerelease: '{pre}'")
    return tuple(int(part) if part.isdigit() else part for part in parts)


def _bound(major: int, minor: int, patch: int, pre: Optional[str] = None) -> SemVer:
    try:
        release = Version(f"{major}.{minor}.{patch}")
    except InvalidVersion as e:
        raise ValueError(f"Invalid version in range: '{major}.{minor}.{patch}'") from e
    return SemVer(release, _identifiers(pre))


def parse_version(version_str: str) -> SemVer:
    """Parse a version string into a SemVer object.

    A leading ``v`` or ``=`` and build metadata are ignored.

    Args:
        version_str: Version string (e.g., "1.0.0", "v2.1.0-canary.3").

    Returns:
        Parsed SemVer object.

    Raises:
        ValueError: If version string is invalid.
    """
    match = _FULL_VERSION.match(version_str.strip())
    if not match:
        raise ValueError(f"Invalid version string: '{version_str}'")
    major, minor, patch, pre = match.groups()
    return _bound(int(major), int(minor), int(patch), pre)


def clean_version(version_str: str) -> Optional[str]:
    """Return the canonical ``X.Y.Z[-pre]`` form of a full version, or None."""
    try:
        return str(parse_version(version_str))
    except ValueError:
        return None


def is_valid_version(version_str: str) -> bool:
    """Check if a string is a single full version."""
    return clean_version(version_str) is not None


def _is_wild(part: Optional[str]) -> bool:
    return part is None or part in ("x", "X", "*")


def _translate(op: str, version_text: str) -> ComparatorSet:
    """Translate one npm comparator into primitive comparators."""
    if version_text in ("", "*", "x", "X"):
        return [_NOTHING] if op in ("<", "!=") else []

    match = _PARTIAL_VERSION.match(version_text)
    if not match:
        raise ValueError(f"Invalid comparator: '{op}{version_text}'")
    major_s, minor_s, patch_s, pre = match.groups()

    if _is_wild(major_s):
        return [_NOTHING] if op in ("<", "!=") else []
    major = int(major_s)
    minor = None if _is_wild(minor_s) else int(minor_s)
    patch = None if minor is None or _is_wild(patch_s) else int(patch_s)
    full = patch is not None
    low = _bound(major, minor or 0, patch or 0, pre if full else None)

    if op == "^":
        if major > 0 or minor is None:
            high = _bound(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            high = _bound(0, minor + 1, 0)
        else:
            high = _bound(0, 0, patch + 1)
        return [(">=", low), ("<", high)]

    if op in ("~", "~>"):
        if minor is None:
            high = _bound(major + 1, 0, 0)
        else:
            high = _bound(major, minor + 1, 0)
        return [(">=", low), ("<", high)]

    if op in ("", "=", "=="):
        if full:
            return [("=", low)]
        if minor is None:
            return [(">=", low), ("<", _bound(major + 1, 0, 0))]
        return [(">=", low), ("<", _bound(major, minor + 1, 0))]

    if op == "!=":
        if not full:
            raise ValueError(f"Partial version not allowed with '!=': '{version_text}'")
        return [("!=", low)]

    if op == ">":
        if full:
            return [(">", low)]
        if minor is None:
            return [(">=", _bound(major + 1, 0, 0))]
        return [(">=", _bound(major, minor + 1, 0))]

    if op == ">=":
        return [(">=", low)]

    if op == "<":
        return [("<", low)]

    if op == "<=":
        if full:
            return [("<=", low)]
        if minor is None:
            return [("<", _bound(major + 1, 0, 0))]
        return [("<", _bound(major, minor + 1, 0))]

    raise ValueError(f"Unknown operator: '{op}'")


def parse_specifier(spec_str: str) -> ComparatorSet:
    """Parse a single comparator set.

    Supports:
    - Exact: "1.0.0", "=1.0.0" or "==1.0.0"
    - Range: ">=1.0.0 <2.0.0" or ">=1.0.0,<2.0.0"
    - Caret: "^1.0.0" (>=1.0.0 <2.0.0)
    - Tilde: "~1.0.0" (>=1.0.0 <1.1.0)
    - X-range: "1.x", "1.2.*", "1"
    - Hyphen: "1.0.0 - 2.0.0"
    - Wildcard: "*" or ""

    Args:
        spec_str: Comparator set without ``||``.

    Returns:
        List of ``(operator, version)`` comparators; empty matches anything.

    Raises:
        ValueError: If the comparator set is invalid.
    """
    spec_str = spec_str.strip()

    hyphen = _HYPHEN_RANGE.match(spec_str)
    if hyphen:
        low, high = hyphen.groups()
        return _translate(">=", low) + _translate("<=", high)

    comparators: ComparatorSet = []
    normalized = _OPERATOR_GAP.sub(r"\1", spec_str)
    for token in re.split(r"[\s,]+", normalized):
        if not token:
            continue
        op, version_text = _COMPARATOR.match(token).groups()
        comparators.extend(_translate(op or "", version_text))
    return comparators


def parse_range(range_str: str) -> VersionRange:
    """Parse an npm range, splitting ``||`` alternatives.

    Args:
        range_str: Range string (e.g., "^1.0.0 || >=3.0.0").

    Returns:
        List of comparator sets, one per alternative.

    Raises:
        ValueError: If any alternative is invalid.
    """
    return [parse_specifier(part) for part in range_str.split("||")]


def is_valid_range(range_str: str) -> bool:
    """Check if a string parses as a version range."""
    try:
        parse_range(range_str)
    except ValueError:
        return False
    return True


def _in_set(version: SemVer, comparators: ComparatorSet) -> bool:
    if not all(_TESTS[op](version, bound) for op, bound in comparators):
        return False
    if not version.is_prerelease:
        return True
    # a prerelease only matches when a comparator names a prerelease of
    # the same X.Y.Z
    return any(
        bound.is_prerelease and bound.release == version.release
        for _, bound in comparators
    )


def matches(version: SemVer, version_range: VersionRange) -> bool:
    """Check if a parsed version is in any alternative of a range.

    Args:
        version: Version to check.
        version_range: Alternatives from :func:`parse_range`.

    Returns:
        True if version matches the range.
    """
    return any(_in_set(version, comparators) for comparators in version_range)


def satisfies(version_str: str, range_str: str) -> bool:
    """Check if a version string satisfies an npm range.

    Invalid versions or ranges never match.

    Args:
        version_str: Version string.
        range_str: Range string.

    Returns:
        True if the version satisfies the range.
    """
    try:
        version = parse_version(version_str)
        version_range = parse_range(range_str)
    except ValueError:
        return False
    return matches(version, version_range)


def find_best_match(
    versions: list[str],
    range_str: str,
) -> Optional[str]:
    """Find the best (newest) version satisfying a range.

    Args:
        versions: List of available version strings.
        range_str: Range to match against.

    Returns:
        Best matching version string or None if no match.
    """
    matching = [v for v in versions if satisfies(v, range_str)]
    if not matching:
        return None
    return max(matching, key=parse_version)


def is_prerelease(version_str: str) -> bool:
    """Check if a version is a prerelease.

    Args:
        version_str: Version string.

    Returns:
        True if version is a prerelease.
    """
    return parse_version(version_str).is_prerelease
