"""Semantic versions and npm version ranges."""

from .semver import SemanticVersion
from .ranges import (
    Caret,
    Comparator,
    Conjunction,
    Disjunction,
    DistTag,
    Exact,
    Tilde,
    UrlSource,
    VcsSource,
    VersionRange,
    Wildcard,
    XRange,
    best_match,
    matches,
    max_satisfying,
    parse_range,
)
from .parser import parse_request, split_name_and_range

__all__ = [
    "SemanticVersion",
    "VersionRange",
    "Exact",
    "Comparator",
    "Conjunction",
    "Disjunction",
    "Caret",
    "Tilde",
    "Wildcard",
    "XRange",
    "DistTag",
    "VcsSource",
    "UrlSource",
    "parse_range",
    "matches",
    "max_satisfying",
    "best_match",
    "parse_request",
    "split_name_and_range",
]
