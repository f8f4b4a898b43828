"""Direct URL source: a tarball fetched as-is."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from ..errors import UpstreamFetchError
from ..models import PackageManifest
from ..versioning.ranges import UrlSource, VersionRange
from .archive import fetch_archive
from .base import SourceFetcher


class UrlFetcher(SourceFetcher):
    """Fetches http(s) tarball URLs."""

    source_name = "url"

    def __init__(self, *, timeout: Optional[float] = None):
        self.timeout = timeout

    def fetch(self, name: str, version_range: VersionRange) -> PackageManifest:
        if not isinstance(version_range, UrlSource):
            raise TypeError(f"Not a URL reference: {version_range}")
        scheme = urlsplit(version_range.url).scheme.lower()
        if scheme not in ("http", "https"):
            raise UpstreamFetchError(version_range.url, f"unknown uri scheme {scheme}:")
        return fetch_archive(version_range.url, timeout=self.timeout)
