"""The source-fetcher capability shared by registry, VCS and URL sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import PackageManifest
from ..versioning.ranges import VersionRange


class SourceFetcher(ABC):
    """Produces one concrete manifest (with distribution info) for a request."""

    #: Short label naming the source in fetch logs.
    source_name = "source"

    @abstractmethod
    def fetch(self, name: str, version_range: VersionRange) -> PackageManifest:
        """Return the manifest that satisfies ``version_range`` for ``name``.

        Raises:
            ResolutionError: subclasses describing why nothing was found.
        """
