"""Semantic versions with semver 2.0 precedence."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Tuple

import semantic_version

from ..errors import InvalidSemVerSyntax

_LOOSE_PREFIX = re.compile(r"^[=v\s]+")


def _identifier_key(identifier: str) -> Tuple[int, object]:
    # Numeric identifiers always have lower precedence than alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """A parsed semantic version.

    Build metadata is kept for rendering only; it takes no part in equality,
    hashing or ordering.
    """

    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """Parse ``text``; a leading ``v`` or ``=`` is tolerated.

        Raises:
            InvalidSemVerSyntax: if the text is not a full semantic version.
        """
        if not isinstance(text, str):
            raise InvalidSemVerSyntax(str(text), "expected a string")
        candidate = _LOOSE_PREFIX.sub("", text.strip())
        try:
            parsed = semantic_version.Version(candidate)
        except ValueError as exc:
            raise InvalidSemVerSyntax(text, str(exc)) from exc
        return cls(
            major=parsed.major,
            minor=parsed.minor,
            patch=parsed.patch,
            prerelease=tuple(parsed.prerelease),
            build=tuple(parsed.build),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def release(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def precedence_key(self) -> tuple:
        """Sort key implementing semver precedence."""
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        pre = tuple(_identifier_key(ident) for ident in self.prerelease)
        return (self.major, self.minor, self.patch, 0, pre)

    def library_version(self) -> semantic_version.Version:
        """The same version as a ``semantic_version.Version``, for spec matching."""
        return semantic_version.Version(str(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key() == other.precedence_key()

    def __lt__(self, other: "SemanticVersion") -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __hash__(self) -> int:
        return hash(self.precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __repr__(self) -> str:
        return f"SemanticVersion('{self}')"
