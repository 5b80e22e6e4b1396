"""Requirement matching, search and placement for deptree."""

from deptree.resolver.semver import (
    find_best_match,
    matches,
    parse_range,
    parse_specifier,
    parse_version,
    satisfies,
)
from deptree.resolver.spec import (
    RequestedSpec,
    SpecType,
    parse_package_arg,
    resolve_spec,
)
from deptree.resolver.matcher import (
    does_child_version_match,
    is_dev_dep,
    is_prod_dep,
    is_requirement_satisfied_by,
)
from deptree.resolver.requirement import find_requirement
from deptree.resolver.placement import earliest_installable

__all__ = [
    "find_best_match",
    "matches",
    "parse_range",
    "parse_specifier",
    "parse_version",
    "satisfies",
    "RequestedSpec",
    "SpecType",
    "parse_package_arg",
    "resolve_spec",
    "does_child_version_match",
    "is_dev_dep",
    "is_prod_dep",
    "is_requirement_satisfied_by",
    "find_requirement",
    "earliest_installable",
]
