"""Version-control source: repositories pinned to a commit."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import UpstreamFetchError
from ..models import PackageManifest
from ..repository.github import GitHubClient
from ..versioning.ranges import VcsSource, VersionRange
from .archive import fetch_archive
from .base import SourceFetcher

logger = logging.getLogger(__name__)


class VcsFetcher(SourceFetcher):
    """Fetches GitHub repositories by owner/repo/ref.

    Without a ref the default branch is looked up and pinned to its head
    commit, so the recorded URL is reproducible.
    """

    source_name = "vcs"

    def __init__(self, client: Optional[GitHubClient] = None, *, timeout: Optional[float] = None):
        self.client = client or GitHubClient(timeout=timeout)
        self.timeout = timeout

    def resolve_ref(self, source: VcsSource) -> str:
        """Return the ref to fetch, pinning the default branch when absent.

        Raises:
            UpstreamFetchError: if a lookup fails.
        """
        if source.ref:
            return source.ref
        rpath = f"{source.owner}/{source.repo}"
        logger.info("Querying github for default branch of %s...", rpath)
        branch = self.client.get_default_branch(source.owner, source.repo)
        if branch is None:
            raise UpstreamFetchError(rpath, "no default branch")
        logger.info("Querying github for sha of %s/%s...", rpath, branch)
        sha = self.client.get_branch_sha(source.owner, source.repo, branch)
        if sha is None:
            raise UpstreamFetchError(f"{rpath}#{branch}", "no commit for branch")
        logger.info("Branch %s of %s is at %s", branch, rpath, sha)
        return sha

    def fetch(self, name: str, version_range: VersionRange) -> PackageManifest:
        if not isinstance(version_range, VcsSource):
            raise TypeError(f"Not a repository reference: {version_range}")
        if version_range.host != "github.com":
            raise UpstreamFetchError(str(version_range), f"can't handle git source {version_range.host}")
        ref = self.resolve_ref(version_range)
        url = self.client.archive_url(version_range.owner, version_range.repo, ref)
        manifest = fetch_archive(url, timeout=self.timeout, headers=self.client.get_headers())
        if manifest.name != name:
            logger.warning("Repository %s declares name %s, requested as %s", version_range, manifest.name, name)
        return manifest
