"""npm registry source: package documents, version selection, dist-tags."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional
from urllib.parse import quote

from ..common.http_client import get_json
from ..common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from ..errors import ManifestParseError, NoMatchingPackage, NoSuchTag, TagPointsToInvalidVersion
from ..manifest import package_info_from_json
from ..models import PackageInfo, PackageManifest
from ..versioning.ranges import DistTag, VersionRange, best_match
from .base import SourceFetcher

logger = logging.getLogger(__name__)

_HEADERS = {"Accept": "application/json"}


def package_url(registry: str, name: str) -> str:
    """``{registry}/{name}`` with a scoped name's slash escaped."""
    return f"{registry.rstrip('/')}/{quote(name, safe='@')}"


class RegistryFetcher(SourceFetcher):
    """Queries registries in order of preference; first success wins.

    Package documents are cached (and merged) in ``cache`` so each name is
    fetched at most once per run.
    """

    source_name = "registry"

    def __init__(
        self,
        registries: Iterable[str],
        *,
        timeout: Optional[float] = None,
        cache: Optional[Dict[str, PackageInfo]] = None,
    ):
        """Initialize the fetcher.

        Args:
            registries: Registry base URIs, most preferred first.
            timeout: Per-request timeout in seconds.
            cache: Shared package-info cache (the resolver session's).
        """
        self.registries = list(registries)
        self.timeout = timeout
        self.cache: Dict[str, PackageInfo] = cache if cache is not None else {}

    def _query(self, name: str, registry: str) -> Optional[PackageInfo]:
        """Fetch one registry's document for ``name``; None on any failure."""
        url = package_url(registry, name)
        logger.info("Querying %s for package %s...", safe_url(registry), name)
        with Timer() as timer:
            status, _, data = get_json(url, headers=_HEADERS, timeout=self.timeout)
        if status != 200 or data is None:
            logger.warning(
                "Registry %s did not return package %s (status %s)",
                safe_url(registry),
                name,
                status or "no response",
                extra=extra_context(
                    event="registry_miss",
                    component="registry",
                    status_code=status,
                    duration_ms=timer.duration_ms(),
                    target=safe_url(url),
                )
            )
            return None
        try:
            info = package_info_from_json(data, safe_url(url))
        except ManifestParseError as exc:
            logger.warning("Couldn't parse registry document: %s", exc)
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "Registry document parsed",
                extra=extra_context(
                    event="registry_hit",
                    component="registry",
                    version_count=len(info.versions),
                    tag_count=len(info.tags),
                    target=safe_url(url),
                )
            )
        return info

    def store_package_info(self, name: str, info: PackageInfo) -> PackageInfo:
        """Merge ``info`` into the cached info for ``name``."""
        merged = self.cache.get(name, PackageInfo()).merge(info)
        self.cache[name] = merged
        return merged

    def package_info(self, name: str) -> PackageInfo:
        """All known versions and tags of ``name``, cached for the run.

        Raises:
            NoMatchingPackage: if every configured registry failed.
        """
        cached = self.cache.get(name)
        if cached is not None:
            return cached
        for registry in self.registries:
            info = self._query(name, registry)
            if info is not None:
                return self.store_package_info(name, info)
        raise NoMatchingPackage(name)

    def by_tag(self, name: str, tag: str) -> PackageManifest:
        """Resolve a dist-tag through the package's tag table.

        Raises:
            NoSuchTag: if the tag is absent.
            TagPointsToInvalidVersion: if the tag names an unknown version.
        """
        info = self.package_info(name)
        version = info.tags.get(tag)
        if version is None:
            raise NoSuchTag(name, tag)
        manifest = info.versions.get(version)
        if manifest is None:
            raise TagPointsToInvalidVersion(name, tag, version)
        return manifest

    def fetch(self, name: str, version_range: VersionRange) -> PackageManifest:
        if version_range.is_direct_source:
            raise TypeError(f"Registry cannot resolve source reference {version_range}")
        if isinstance(version_range, DistTag):
            return self.by_tag(name, version_range.tag)
        return best_match(version_range, self.package_info(name).versions)
