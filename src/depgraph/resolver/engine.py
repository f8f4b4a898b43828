"""Recursive, memoized, cycle-safe dependency resolution.

For each requested (name, range):

* If the store already holds a trusted version of the name satisfying the
  range, the highest such version is used.
* Otherwise the range picks a source: repository and URL references go to
  their fetcher, everything else is selected from the registry's package
  document (best match or dist-tag).
* The chosen manifest is resolved: each dependency is resolved recursively,
  and the pinned package is written to the store.

A node that is reached again while it is still being resolved closes a
cycle: the resolver logs it and leaves the closing edge out of the
dependency map. Failures inside a dependency abort the enclosing package;
failures of a top-level request are reported and the run continues.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..common.logging_utils import extra_context
from ..config import ResolverConfig
from ..errors import BrokenPackage, MissingDistributionInfo, ResolutionError
from ..models import (
    NewlyResolved,
    PackageManifest,
    PreExistingPackage,
    ResolvedPackage,
    StoreEntry,
    to_fully_defined,
)
from ..repository.github import GitHubClient
from ..sources.base import SourceFetcher
from ..sources.registry import RegistryFetcher
from ..sources.url import UrlFetcher
from ..sources.vcs import VcsFetcher
from ..store import PackageStore
from ..versioning.ranges import DistTag, UrlSource, VcsSource, VersionRange, max_satisfying, parse_range
from ..versioning.semver import SemanticVersion
from .report import RequestOutcome, RunReport
from .session import ResolverSession

logger = logging.getLogger(__name__)


class Resolver:
    """Resolves requests into the session's package store."""

    def __init__(
        self,
        config: ResolverConfig,
        *,
        session: Optional[ResolverSession] = None,
        registry_fetcher: Optional[RegistryFetcher] = None,
        vcs_fetcher: Optional[VcsFetcher] = None,
        url_fetcher: Optional[UrlFetcher] = None,
    ):
        """Initialize the resolver.

        Args:
            config: Run configuration.
            session: Optional existing session (a fresh one is created otherwise).
            registry_fetcher: Override for the registry source.
            vcs_fetcher: Override for the repository source.
            url_fetcher: Override for the URL source.
        """
        self.config = config
        self.session = session or ResolverSession(config)
        self.registry = registry_fetcher or RegistryFetcher(
            self.session.registries,
            timeout=config.timeout,
            cache=self.session.package_infos,
        )
        self.vcs = vcs_fetcher or VcsFetcher(
            GitHubClient(config.github_api_base, config.auth_token, config.timeout),
            timeout=config.timeout,
        )
        self.url = url_fetcher or UrlFetcher(timeout=config.timeout)

    # -- preloading -------------------------------------------------------

    def preload(self, existing: PackageStore[PreExistingPackage]) -> None:
        """Merge pre-existing packages into the store.

        Packages resolved later in the run overwrite these entries.
        """
        with self.session.lock:
            self.session.store.merge(existing.map_values(to_fully_defined))
        logger.info("Preloaded %d existing package versions", len(existing))

    # -- cache path -------------------------------------------------------

    def _trusted(self, entry: StoreEntry) -> bool:
        if isinstance(entry, NewlyResolved):
            return True
        return self.config.uses_cache and self.session.depth >= self.config.cache_depth

    def _from_store(self, name: str, version_range: VersionRange) -> Optional[SemanticVersion]:
        if version_range.is_direct_source or isinstance(version_range, DistTag):
            return None
        candidates = {
            version: entry
            for version, entry in self.session.store.versions(name).items()
            if self._trusted(entry)
        }
        best = max_satisfying(version_range, candidates)
        if best is None:
            return None
        logger.info(
            "Requirement %s version %s already satisfied: %s",
            name,
            version_range,
            candidates[best].describe(best),
            extra=extra_context(event="cache_hit", component="resolver", package=name),
        )
        return best

    # -- resolution -------------------------------------------------------

    def _fetcher_for(self, version_range: VersionRange) -> SourceFetcher:
        if isinstance(version_range, VcsSource):
            return self.vcs
        if isinstance(version_range, UrlSource):
            return self.url
        return self.registry

    def _fetch(self, name: str, version_range: VersionRange) -> PackageManifest:
        fetcher = self._fetcher_for(version_range)
        logger.debug(
            "Fetching %s %s from %s source",
            name,
            version_range,
            fetcher.source_name,
            extra=extra_context(event="fetch", component="resolver", package=name, source=fetcher.source_name),
        )
        return fetcher.fetch(name, version_range)

    def _resolve(self, name: str, version_range: VersionRange) -> Tuple[SemanticVersion, bool]:
        """Resolve a request; the flag is True when the result closed a cycle."""
        cached = self._from_store(name, version_range)
        if cached is not None:
            return cached, False
        manifest = self._fetch(name, version_range)
        version, package = self._resolve_manifest(manifest)
        return version, package is None

    def resolve(self, name: str, version_range: VersionRange) -> SemanticVersion:
        """Resolve (name, range) to an exact version, storing the graph below it.

        Raises:
            ResolutionError: if the package or any of its dependencies fails.
        """
        with self.session.lock:
            return self._resolve(name, version_range)[0]

    def resolve_manifest(self, manifest: PackageManifest) -> SemanticVersion:
        """Resolve an already-chosen manifest and return its version."""
        with self.session.lock:
            return self._resolve_manifest(manifest)[0]

    def _wants_dev_dependencies(self, depth: int) -> bool:
        if not self.session.include_dev_dependencies:
            return False
        return self.config.dev_depth is None or depth < self.config.dev_depth

    def _resolve_dependencies(
        self, name: str, version: SemanticVersion, deps: Dict[str, str], kind: str
    ) -> Dict[str, SemanticVersion]:
        if deps:
            logger.info("%s version %s has %s: %s", name, version, kind, sorted(deps.items()))
        resolved: Dict[str, SemanticVersion] = {}
        for dep_name, range_text in deps.items():
            if dep_name in self.session.blacklist:
                broken = BrokenPackage(dep_name)
                self.session.record_broken((name, version), broken)
                logger.warning(
                    "WARNING: %s; dropping it from %s %s",
                    broken,
                    name,
                    version,
                    extra=extra_context(event="broken_package", component="resolver", package=dep_name),
                )
                continue
            dep_version, closed_cycle = self._resolve(dep_name, parse_range(range_text))
            if closed_cycle:
                continue
            resolved[dep_name] = dep_version
        return resolved

    def _resolve_manifest(
        self, manifest: PackageManifest, *, require_dist: bool = True
    ) -> Tuple[SemanticVersion, Optional[ResolvedPackage]]:
        """Resolve a manifest; the package is None when a cycle was broken."""
        name = manifest.name
        version = manifest.semver
        session = self.session

        if session.is_resolving(name, version):
            path = session.record_cycle(name, version)
            logger.warning(
                "Warning: cycle detected: %s",
                " -> ".join(f"{n}@{v}" for n, v in path),
                extra=extra_context(event="cycle_detected", component="resolver", package=name),
            )
            return version, None

        if manifest.dist is None and require_dist:
            raise MissingDistributionInfo(name, version).add_context(f"{name}@{version}")

        depth = session.depth
        session.mark_resolving(name, version)
        try:
            dependencies = self._resolve_dependencies(
                name, version, manifest.dependencies, "dependencies"
            )
            dev_dependencies = None
            if session.include_dev_dependencies:
                dev_dependencies = {}
                if self._wants_dev_dependencies(depth):
                    dev_dependencies = self._resolve_dependencies(
                        name, version, manifest.dev_dependencies, "dev dependencies"
                    )
        except ResolutionError as exc:
            exc.add_context(f"{name}@{version}")
            raise
        finally:
            session.unmark_resolving(name, version)

        package = ResolvedPackage(
            name=name,
            version=version,
            dist=manifest.dist,
            meta=manifest.meta,
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
        )
        if package.dist is not None:
            session.add_resolved(package)
        return version, package

    def resolve_root_manifest(self, manifest: PackageManifest) -> ResolvedPackage:
        """Resolve a local manifest afresh, ignoring any cached entry for it.

        A result with distribution info stays in the store; one without (a
        plain package.json) is returned only and any prior entry is restored.

        Raises:
            ResolutionError: if the manifest or one of its dependencies fails.
        """
        with self.session.lock:
            version = manifest.semver
            logger.info("Generating expression for package %s, version %s", manifest.name, version)
            previous = self.session.store.lookup(manifest.name, version)
            self.session.delete(manifest.name, version)
            package = None
            try:
                _, package = self._resolve_manifest(manifest, require_dist=False)
            finally:
                if previous is not None and (package is None or package.dist is None):
                    self.session.store.insert(manifest.name, version, previous)
            if package is None:
                raise RuntimeError(f"{manifest.name}@{version} was resolved as part of a cycle")
            return package

    # -- run --------------------------------------------------------------

    def resolve_request(self, name: str, version_range: VersionRange) -> RequestOutcome:
        """Resolve one top-level request, turning failures into an outcome."""
        try:
            version = self.resolve(name, version_range)
        except ResolutionError as exc:
            logger.warning(
                "Failed to build %s@%s: %s",
                name,
                version_range,
                exc,
                extra=extra_context(event="request_failed", component="resolver", package=name),
            )
            return RequestOutcome(name, str(version_range), error=str(exc))
        return RequestOutcome(name, str(version_range), version=version)

    def run(
        self,
        requests: Iterable[Tuple[str, VersionRange]] = (),
        manifests: Iterable[PackageManifest] = (),
    ) -> RunReport:
        """Resolve every request and local manifest, then report.

        Each top-level request is independent: a failure is recorded in the
        report and the remaining requests still run. Errors that are not
        ResolutionErrors propagate and end the run.
        """
        report = RunReport(store=self.session.store)
        for name, version_range in requests:
            report.outcomes.append(self.resolve_request(name, version_range))
        for manifest in manifests:
            try:
                package = self.resolve_root_manifest(manifest)
            except ResolutionError as exc:
                logger.warning("Failed to build %s@%s: %s", manifest.name, manifest.version, exc)
                report.outcomes.append(RequestOutcome(manifest.name, manifest.version, error=str(exc)))
                continue
            report.root_packages.append(package)
            report.outcomes.append(RequestOutcome(manifest.name, manifest.version, version=package.version))
        report.cycle_count = len(self.session.cycles)
        report.broken = [
            f"{error.name} (dependency of {parent}@{parent_version})"
            for (parent, parent_version), error in self.session.broken
        ]
        return report


def parse_requests(tokens: Iterable[Tuple[str, str]]) -> List[Tuple[str, VersionRange]]:
    """Parse (name, range text) pairs.

    Raises:
        InvalidVersionRangeSyntax: on the first malformed range.
    """
    return [(name, parse_range(text)) for name, text in tokens]
