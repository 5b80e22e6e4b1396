"""Tests for semver utilities."""

import pytest
from packaging.version import Version

from deptree.resolver.semver import (
    SemVer,
    clean_version,
    find_best_match,
    is_prerelease,
    is_valid_range,
    matches,
    parse_range,
    parse_specifier,
    parse_version,
    satisfies,
)


def test_parse_version() -> None:
    """Test version parsing."""
    v = parse_version("1.2.3")
    assert v.major == 1
    assert v.minor == 2
    assert v.patch == 3
    assert v.release == Version("1.2.3")


def test_parse_version_ignores_prefix_and_build() -> None:
    """Test that a leading v and build metadata are ignored."""
    assert parse_version("v1.2.3+build.5") == parse_version("1.2.3")


def test_parse_version_prerelease_identifiers() -> None:
    """Test any dot-separated prerelease identifiers are accepted."""
    v = parse_version("1.0.0-next.3")
    assert v.prerelease == ("next", 3)
    assert str(v) == "1.0.0-next.3"
    assert parse_version("2.0.0-canary.0.abc-1").prerelease == ("canary", 0, "abc-1")


def test_parse_version_invalid() -> None:
    """Test that garbage raises ValueError."""
    for text in ("not-a-version", "1.2", "1.0.0-a..b"):
        with pytest.raises(ValueError):
            parse_version(text)


def test_version_ordering() -> None:
    """Test semver precedence, prereleases included."""
    ordered = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
        "1.0.1-canary.1",
        "1.0.1",
        "1.10.0",
    ]
    parsed = [parse_version(v) for v in ordered]
    assert sorted(reversed(parsed)) == parsed
    assert isinstance(max(parsed), SemVer)


def test_clean_version() -> None:
    """Test canonical version strings."""
    assert clean_version("v1.02.3") == "1.2.3"
    assert clean_version("=2.0.0-beta.1") == "2.0.0-beta.1"
    assert clean_version("1.0.0-next.3") == "1.0.0-next.3"
    assert clean_version("1.2") is None
    assert clean_version("^1.2.3") is None


def test_parse_specifier_exact() -> None:
    """Test exact version specifier."""
    assert parse_specifier("1.0.0") == [("=", parse_version("1.0.0"))]
    assert satisfies("1.0.0", "1.0.0")
    assert not satisfies("1.0.1", "1.0.0")


def test_parse_specifier_caret() -> None:
    """Test caret specifier."""
    assert parse_specifier("^1.2.0") == [
        (">=", parse_version("1.2.0")),
        ("<", parse_version("2.0.0")),
    ]
    assert satisfies("1.9.9", "^1.2.0")
    assert not satisfies("2.0.0", "^1.2.0")


def test_caret_zero_major() -> None:
    """Test that caret ranges below 1.0.0 only float the patch or minor."""
    assert satisfies("0.2.9", "^0.2.3")
    assert not satisfies("0.3.0", "^0.2.3")
    assert satisfies("0.0.3", "^0.0.3")
    assert not satisfies("0.0.4", "^0.0.3")


def test_tilde() -> None:
    """Test tilde specifier."""
    assert satisfies("1.2.0", "~1.2.0")
    assert satisfies("1.2.9", "~1.2.0")
    assert not satisfies("1.3.0", "~1.2.0")


def test_x_range() -> None:
    """Test x-ranges and partial versions."""
    assert satisfies("1.99.0", "1.x")
    assert not satisfies("2.0.0", "1.x")
    assert satisfies("1.2.7", "1.2")
    assert not satisfies("1.3.0", "1.2")


def test_wildcard() -> None:
    """Test wildcard specifier."""
    assert parse_specifier("*") == []
    assert satisfies("99.99.99", "*")
    assert satisfies("1.0.0", "")


def test_comparator_sets() -> None:
    """Test comma and space separated comparator sets."""
    for text in (">=1.0.0,<2.0.0", ">=1.0.0 <2.0.0", ">= 1.0.0 < 2.0.0"):
        assert satisfies("1.0.0", text)
        assert satisfies("1.5.0", text)
        assert not satisfies("2.0.0", text)


def test_hyphen() -> None:
    """Test hyphen ranges are inclusive on both ends."""
    assert satisfies("1.2.3", "1.2.3 - 2.3.4")
    assert satisfies("2.3.4", "1.2.3 - 2.3.4")
    assert not satisfies("2.3.5", "1.2.3 - 2.3.4")


def test_parse_specifier_invalid() -> None:
    """Test that invalid comparators raise ValueError."""
    with pytest.raises(ValueError):
        parse_specifier(">=banana")


def test_parse_range_alternatives() -> None:
    """Test that || produces one set per alternative."""
    alternatives = parse_range("^1.0.0 || ^3.0.0")
    assert len(alternatives) == 2
    assert matches(parse_version("3.1.0"), alternatives)
    assert not matches(parse_version("2.0.0"), alternatives)


def test_is_valid_range() -> None:
    """Test range validity."""
    assert is_valid_range("^1.0.0")
    assert is_valid_range("")
    assert not is_valid_range("latest")


def test_satisfies() -> None:
    """Test string-level matching."""
    assert satisfies("1.4.0", "^1.0.0")
    assert not satisfies("2.0.0", "^1.0.0")
    assert not satisfies("garbage", "^1.0.0")
    assert not satisfies("1.0.0", "garbage")


def test_satisfies_prerelease() -> None:
    """Test that prereleases only match ranges naming one of the same X.Y.Z."""
    assert not satisfies("2.0.0-beta.1", "*")
    assert satisfies("2.0.0-beta.2", ">=2.0.0-beta.1")
    assert not satisfies("2.0.0-beta.1", ">=1.0.0-beta.1")
    assert not satisfies("1.0.0-beta.1", ">=1.0.0-beta.2")
    assert satisfies("1.0.1", ">=1.0.0-beta.1")


def test_satisfies_non_pep440_prerelease() -> None:
    """Test npm prerelease tags that have no PEP 440 spelling."""
    assert satisfies("1.0.0-canary.2", "^1.0.0-canary.1")
    assert not satisfies("1.0.0-canary.0", "^1.0.0-canary.1")
    assert satisfies("1.0.0-next.3", "1.0.0-next.3")
    assert satisfies("1.0.0-next.10", "~1.0.0-next.3")
    assert not satisfies("1.1.0-next.3", "~1.0.0-next.3")


def test_find_best_match() -> None:
    """Test finding best matching version."""
    versions = ["1.0.0", "1.5.0", "1.10.0", "2.0.0"]
    assert find_best_match(versions, "^1.0.0") == "1.10.0"
    assert find_best_match(versions, "~1.5.0") == "1.5.0"
    assert find_best_match(versions, "^3.0.0") is None


def test_find_best_match_prereleases() -> None:
    """Test that prereleases are only picked for ranges naming them."""
    assert find_best_match(["1.0.0", "1.1.0-rc.1"], "^1.0.0") == "1.0.0"
    versions = ["1.0.0-next.2", "1.0.0-next.10", "1.0.0-next.9"]
    assert find_best_match(versions, "^1.0.0-next.2") == "1.0.0-next.10"


def test_is_prerelease() -> None:
    """Test prerelease detection."""
    assert is_prerelease("1.0.0-alpha.1")
    assert is_prerelease("1.0.0-canary.4")
    assert not is_prerelease("1.0.0")
