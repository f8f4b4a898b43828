"""Errors raised while resolving a dependency graph.

Every failure that can abort the resolution of a single package derives from
``ResolutionError``. The engine catches exactly that type at the top-level
request boundary; anything else is treated as fatal and ends the run.
"""

from __future__ import annotations

from typing import Any, List


class ResolutionError(Exception):
    """Base class for recoverable per-request resolution failures.

    ``trail`` lists the ``name@version`` frames whose resolution the error
    aborted, innermost first.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.trail: List[str] = []

    def add_context(self, frame: str) -> "ResolutionError":
        """Record that resolving ``frame`` was aborted by this error."""
        self.trail.append(frame)
        return self

    def __str__(self) -> str:
        if not self.trail:
            return self.message
        return f"{self.message} (while resolving {' <- '.join(self.trail)})"


class NoMatchingPackage(ResolutionError):
    """No configured registry knows the package."""

    def __init__(self, name: str):
        super().__init__(f"No registry contained package {name!r}")
        self.name = name


class NoMatchingVersion(ResolutionError):
    """No candidate version satisfies the range."""

    def __init__(self, version_range: Any):
        super().__init__(f"No versions satisfy range {str(version_range)!r}")
        self.range = version_range


class NoSuchTag(ResolutionError):
    """The package has no dist-tag of that name."""

    def __init__(self, name: str, tag: str):
        super().__init__(f"Package {name!r} has no tag {tag!r}")
        self.name = name
        self.tag = tag


class TagPointsToInvalidVersion(ResolutionError):
    """A dist-tag names a version missing from the versions table."""

    def __init__(self, name: str, tag: str, version: Any):
        super().__init__(
            f"Tag {tag!r} refers to version {str(version)!r} "
            f"but no such version exists for package {name!r}"
        )
        self.name = name
        self.tag = tag
        self.version = version


class InvalidVersionRangeSyntax(ResolutionError, ValueError):
    """Range text could not be parsed."""

    def __init__(self, text: str, reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid version range {text!r}{detail}")
        self.text = text


class InvalidSemVerSyntax(ResolutionError, ValueError):
    """Version text is not a semantic version."""

    def __init__(self, text: str, reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid semantic version {text!r}{detail}")
        self.text = text


class MissingDistributionInfo(ResolutionError):
    """A fetched manifest carries no tarball URL/hash."""

    def __init__(self, name: str, version: Any):
        super().__init__(
            f"Version information for {name}@{version} did not include dist"
        )
        self.name = name
        self.version = version


class UpstreamFetchError(ResolutionError):
    """A source (registry, VCS host, URL) could not be fetched."""

    def __init__(self, source: str, cause: Any):
        super().__init__(f"Failed to fetch {source}: {cause}")
        self.source = source
        self.cause = cause


class BrokenPackage(ResolutionError):
    """A dependency names a blacklisted package.

    Only ever reported as a diagnostic; the engine drops the edge instead of
    raising it.
    """

    def __init__(self, name: str):
        super().__init__(f"{name} is a known broken package")
        self.name = name


class ManifestParseError(ResolutionError):
    """A package.json (or registry version object) could not be read."""

    def __init__(self, path: str, cause: Any):
        super().__init__(f"Could not parse manifest at {path}: {cause}")
        self.path = path
        self.cause = cause


class ConfigError(ValueError):
    """Invalid resolver configuration."""
