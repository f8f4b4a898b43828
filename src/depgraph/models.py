"""Data models for manifests, package info and resolved packages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

from .constants import Constants
from .versioning.semver import SemanticVersion


@dataclass(frozen=True)
class DistributionInfo:
    """Where a package's tarball lives and its content hash."""
    url: str
    shasum: str
    algorithm: str = Constants.HASH_ALGORITHM


@dataclass(frozen=True)
class PackageMeta:
    """Descriptive metadata carried through to the emitter."""
    description: Optional[str] = None
    homepage: Optional[str] = None
    keywords: Tuple[str, ...] = ()


@dataclass
class PackageManifest:
    """Declared metadata and dependency ranges for one version of a package.

    ``version`` is kept as written; ``semver`` validates it. Dependency ranges
    are kept as text and parsed when the resolver recurses into them.
    """
    name: str
    version: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    dist: Optional[DistributionInfo] = None
    meta: PackageMeta = field(default_factory=PackageMeta)

    @property
    def semver(self) -> SemanticVersion:
        return SemanticVersion.parse(self.version)

    def with_dist(self, dist: DistributionInfo) -> "PackageManifest":
        return replace(self, dist=dist)


@dataclass
class PackageInfo:
    """Every known version of a package plus its dist-tag table."""
    versions: Dict[SemanticVersion, PackageManifest] = field(default_factory=dict)
    tags: Dict[str, SemanticVersion] = field(default_factory=dict)

    def merge(self, other: "PackageInfo") -> "PackageInfo":
        """Union of both tables; entries from ``other`` win on conflict."""
        return PackageInfo(
            versions={**self.versions, **other.versions},
            tags={**self.tags, **other.tags},
        )


@dataclass
class ResolvedPackage:
    """A package pinned to one version with its dependencies pinned too."""
    name: str
    version: SemanticVersion
    dist: Optional[DistributionInfo]
    meta: PackageMeta
    dependencies: Dict[str, SemanticVersion] = field(default_factory=dict)
    dev_dependencies: Optional[Dict[str, SemanticVersion]] = None


@dataclass(frozen=True)
class NewlyResolved:
    """Store entry for a package resolved during this run."""
    package: ResolvedPackage

    def describe(self, version: SemanticVersion) -> str:
        return f"fetched package version {version}"


@dataclass(frozen=True)
class FromExistingOutput:
    """Store entry for an artifact already present in the output directory."""
    artifact: Any

    def describe(self, version: SemanticVersion) -> str:
        return f"already had version {version} in output directory (use --no-cache to override)"


@dataclass(frozen=True)
class FromExtension:
    """Store entry for an artifact provided by a named extension library."""
    extension_name: str
    artifact: Any

    def describe(self, version: SemanticVersion) -> str:
        return f"version {version} provided by extension {self.extension_name}"


StoreEntry = Union[NewlyResolved, FromExistingOutput, FromExtension]


@dataclass(frozen=True)
class FromOutput:
    """Pre-existing artifact scanned from the output directory."""
    artifact: Any


@dataclass(frozen=True)
class FromExtensionDir:
    """Pre-existing artifact scanned from an extension directory."""
    extension_name: str
    artifact: Any


PreExistingPackage = Union[FromOutput, FromExtensionDir]


def to_fully_defined(package: PreExistingPackage) -> StoreEntry:
    """Convert a scanned pre-existing package into a store entry."""
    if isinstance(package, FromOutput):
        return FromExistingOutput(package.artifact)
    if isinstance(package, FromExtensionDir):
        return FromExtension(package.extension_name, package.artifact)
    raise TypeError(f"Not a pre-existing package: {package!r}")
