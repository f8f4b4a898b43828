"""npm-style version ranges.

A range is one of a closed set of frozen dataclasses. Semver-valued ranges
answer ``matches`` through ``semantic_version.NpmSpec``, so shorthand
operators, x-ranges, hyphen ranges and prerelease handling follow npm:
a prerelease only satisfies a comparator set that names a prerelease of the
same ``major.minor.patch``. Dist-tag and direct-source ranges are resolved by
indirection (tag table, VCS host, URL) and never match a version directly.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple, TypeVar
from urllib.parse import urlsplit

import semantic_version

from ..errors import InvalidSemVerSyntax, InvalidVersionRangeSyntax, NoMatchingVersion
from .semver import SemanticVersion

T = TypeVar("T")

_COMPARATOR_OPS = frozenset([">", ">=", "<", "<=", "="])
_WILDCARDS = ("x", "X", "*")
_BLOCK = semantic_version.NpmSpec.Parser.NPM_SPEC_BLOCK
_OP_SPACE = re.compile(r"(>=|<=|>|<|=|\^|~)\s*v?(?=[0-9xX*])")
_SCHEME = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*):")
_GITHUB_SHORTHAND = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+)(?:#(?P<ref>.+))?$")
_TAG = re.compile(r"^[A-Za-z][A-Za-z0-9._-]*$")
_HOST_ALIASES = {"github": "github.com", "gitlab": "gitlab.com", "bitbucket": "bitbucket.org"}


@functools.lru_cache(maxsize=None)
def _npm_spec(text: str) -> semantic_version.NpmSpec:
    return semantic_version.NpmSpec(text)


class VersionRange:
    """Base class of all range variants."""

    #: True for ranges that name a concrete source instead of a version set.
    is_direct_source = False

    def matches(self, version: SemanticVersion) -> bool:
        raise NotImplementedError


class _NpmMatched(VersionRange):
    """Ranges whose ``str()`` is npm range text, matched by ``NpmSpec``."""

    def matches(self, version: SemanticVersion) -> bool:
        return _npm_spec(str(self)).match(version.library_version())


@dataclass(frozen=True)
class Exact(VersionRange):
    version: SemanticVersion

    def matches(self, version: SemanticVersion) -> bool:
        return version == self.version

    def __str__(self) -> str:
        return str(self.version)


@dataclass(frozen=True)
class Comparator(_NpmMatched):
    op: str
    version: SemanticVersion

    def __post_init__(self) -> None:
        if self.op not in _COMPARATOR_OPS:
            raise InvalidVersionRangeSyntax(f"{self.op}{self.version}", "unknown operator")

    def matches(self, version: SemanticVersion) -> bool:
        if self.op == "=":
            return version == self.version
        return super().matches(version)

    def __str__(self) -> str:
        return f"{self.op}{self.version}"


@dataclass(frozen=True)
class Conjunction(_NpmMatched):
    """Space-separated comparator set; hyphen ranges land here too."""

    ranges: Tuple[VersionRange, ...]

    def __str__(self) -> str:
        return " ".join(str(r) for r in self.ranges)


@dataclass(frozen=True)
class Disjunction(VersionRange):
    ranges: Tuple[VersionRange, ...]

    def matches(self, version: SemanticVersion) -> bool:
        return any(r.matches(version) for r in self.ranges)

    def __str__(self) -> str:
        return " || ".join(str(r) for r in self.ranges)


@dataclass(frozen=True)
class Caret(_NpmMatched):
    """``^version``; ``parts`` counts the numeric components written (1-3)."""

    version: SemanticVersion
    parts: int = 3

    def __str__(self) -> str:
        return "^" + _render_partial(self.version, self.parts)


@dataclass(frozen=True)
class Tilde(_NpmMatched):
    """``~version``; ``parts`` counts the numeric components written (1-3)."""

    version: SemanticVersion
    parts: int = 3

    def __str__(self) -> str:
        return "~" + _render_partial(self.version, self.parts)


@dataclass(frozen=True)
class XRange(_NpmMatched):
    """A partial version (``1.x``, ``1.2``, ``>1``, ``<=1.2.*``)."""

    op: str
    major: int
    minor: Optional[int] = None

    def __str__(self) -> str:
        if self.minor is None:
            return f"{self.op}{self.major}"
        return f"{self.op}{self.major}.{self.minor}"


@dataclass(frozen=True)
class Wildcard(_NpmMatched):
    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class DistTag(VersionRange):
    tag: str

    def matches(self, version: SemanticVersion) -> bool:
        return False

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class VcsSource(VersionRange):
    host: str
    owner: str
    repo: str
    ref: Optional[str] = None

    is_direct_source = True

    def matches(self, version: SemanticVersion) -> bool:
        return False

    def __str__(self) -> str:
        suffix = f"#{self.ref}" if self.ref else ""
        if self.host == "github.com":
            return f"github:{self.owner}/{self.repo}{suffix}"
        return f"git+https://{self.host}/{self.owner}/{self.repo}.git{suffix}"


@dataclass(frozen=True)
class UrlSource(VersionRange):
    url: str

    is_direct_source = True

    def matches(self, version: SemanticVersion) -> bool:
        return False

    def __str__(self) -> str:
        return self.url


def _render_partial(version: SemanticVersion, parts: int) -> str:
    if parts >= 3:
        return str(version)
    return ".".join(str(n) for n in version.release[:parts])


def _normalize(text: str) -> str:
    """Collapse whitespace and glue operators to their versions (``>= v1`` -> ``>=1``)."""
    text = " ".join(text.split()).replace("~>", "~")
    return _OP_SPACE.sub(r"\1", text)


def _canonical_group(group: str, original: str) -> str:
    group = group.strip()
    if not group:
        return "*"
    if " - " in group:
        bounds = group.split(" - ")
        if len(bounds) != 2:
            raise InvalidVersionRangeSyntax(original, "hyphen range needs two bounds")
        low, high = bounds
        return _OP_SPACE.sub(r"\1", f">={low} <={high}")
    return group


def _parse_block(block: str, original: str) -> VersionRange:
    match = _BLOCK.match(block)
    if not match:
        raise InvalidVersionRangeSyntax(original, f"bad comparator {block!r}")
    op = match.group("op")
    numbers: List[int] = []
    for key in ("major", "minor", "patch"):
        part = match.group(key)
        if part is None or part in _WILDCARDS:
            break
        numbers.append(int(part))

    if not numbers:
        return Wildcard()
    if len(numbers) == 3:
        try:
            version = SemanticVersion.parse(block[match.start("major"):])
        except InvalidSemVerSyntax as exc:
            raise InvalidVersionRangeSyntax(original, exc.message) from exc
        if op in ("", "="):
            return Exact(version)
        if op == "^":
            return Caret(version)
        if op == "~":
            return Tilde(version)
        return Comparator(op, version)

    floor = SemanticVersion(numbers[0], numbers[1] if len(numbers) > 1 else 0, 0)
    if op == "^":
        return Caret(floor, len(numbers))
    if op == "~":
        return Tilde(floor, len(numbers))
    return XRange(op, numbers[0], numbers[1] if len(numbers) > 1 else None)


def _parse_group(group: str, original: str) -> VersionRange:
    ranges = [_parse_block(block, original) for block in group.split(" ")]
    if len(ranges) == 1:
        return ranges[0]
    return Conjunction(tuple(ranges))


def _parse_semver_range(text: str) -> VersionRange:
    groups = [_canonical_group(g, text) for g in _normalize(text).split("||")]
    try:
        _npm_spec(" || ".join(groups))
    except ValueError as exc:
        raise InvalidVersionRangeSyntax(text, str(exc)) from exc
    alternatives = [_parse_group(g, text) for g in groups]
    if len(alternatives) == 1:
        return alternatives[0]
    if any(isinstance(alt, Wildcard) for alt in alternatives):
        return Wildcard()
    return Disjunction(tuple(alternatives))


def _parse_git_url(text: str) -> VcsSource:
    url, _, ref = text.partition("#")
    parts = urlsplit(url)
    host = parts.hostname
    path = parts.path
    if host is None or not path.strip("/"):
        raise InvalidVersionRangeSyntax(text, "invalid repository url")
    # scp-style "git@host:owner/repo" leaves the owner in the port slot
    if ":" in parts.netloc.rsplit("@", 1)[-1]:
        owner_part = parts.netloc.rsplit(":", 1)[1]
        if not owner_part.isdigit():
            path = f"/{owner_part}{path}"
    segments = [s for s in path.split("/") if s]
    if len(segments) != 2:
        raise InvalidVersionRangeSyntax(text, f"invalid repo path {path!r}")
    owner, repo = segments
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return VcsSource(host, owner, repo, ref or None)


def _parse_hosted_shorthand(host: str, rest: str, original: str) -> VcsSource:
    match = _GITHUB_SHORTHAND.match(rest)
    if not match:
        raise InvalidVersionRangeSyntax(original, "invalid repository shorthand")
    repo = match.group("repo")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return VcsSource(host, match.group("owner"), repo, match.group("ref"))


def parse_range(text: str) -> VersionRange:
    """Parse npm dependency range text into a ``VersionRange``.

    Raises:
        InvalidVersionRangeSyntax: when the text fits none of the forms.
    """
    if not isinstance(text, str):
        raise InvalidVersionRangeSyntax(str(text), "expected a string")
    stripped = text.strip()

    scheme_match = _SCHEME.match(stripped)
    if scheme_match:
        scheme = scheme_match.group("scheme").lower()
        if scheme in ("http", "https"):
            return UrlSource(stripped)
        if scheme == "git" or scheme.startswith("git+"):
            return _parse_git_url(stripped)
        if scheme in _HOST_ALIASES:
            rest = stripped[len(scheme) + 1:]
            return _parse_hosted_shorthand(_HOST_ALIASES[scheme], rest, text)
        return UrlSource(stripped)

    if _GITHUB_SHORTHAND.match(stripped):
        return _parse_hosted_shorthand("github.com", stripped, text)

    try:
        return _parse_semver_range(stripped)
    except InvalidVersionRangeSyntax:
        if _TAG.match(stripped):
            return DistTag(stripped)
        raise


def matches(version_range: VersionRange, version: SemanticVersion) -> bool:
    """Return True when ``version`` satisfies ``version_range``."""
    return version_range.matches(version)


def max_satisfying(
    version_range: VersionRange, versions: Iterable[SemanticVersion]
) -> Optional[SemanticVersion]:
    """Highest version in ``versions`` matching the range, or None."""
    matching = [v for v in versions if version_range.matches(v)]
    if not matching:
        return None
    return max(matching)


def best_match(version_range: VersionRange, candidates: Mapping[SemanticVersion, T]) -> T:
    """Select the candidate at the maximum version satisfying the range.

    Raises:
        NoMatchingVersion: when no candidate version matches.
    """
    best = max_satisfying(version_range, candidates.keys())
    if best is None:
        raise NoMatchingVersion(version_range)
    return candidates[best]
