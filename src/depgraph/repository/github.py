"""GitHub API client for repository lookups.

Provides the two lookups needed to pin a repository reference to a commit:
the default branch of a repository and the head commit of a branch.
"""
from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import quote

from ..common.http_client import get_json
from ..constants import Constants


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional bearer-token authentication.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub token attached as a bearer credential
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token
        self.timeout = timeout

    def get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_default_branch(self, owner: str, repo: str) -> Optional[str]:
        """Fetch the repository's default branch name.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Branch name, or None on error
        """
        url = f"{self.base_url}/repos/{quote(owner)}/{quote(repo)}"
        status, _, data = get_json(url, headers=self.get_headers(), timeout=self.timeout)
        if status == 200 and isinstance(data, dict):
            branch = data.get("default_branch")
            if isinstance(branch, str) and branch:
                return branch
        return None

    def get_branch_sha(self, owner: str, repo: str, branch: str) -> Optional[str]:
        """Fetch the commit SHA at the head of ``branch``.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch name

        Returns:
            Commit SHA, or None on error
        """
        url = f"{self.base_url}/repos/{quote(owner)}/{quote(repo)}/branches/{quote(branch, safe='')}"
        status, _, data = get_json(url, headers=self.get_headers(), timeout=self.timeout)
        if status == 200 and isinstance(data, dict):
            commit = data.get("commit")
            if isinstance(commit, dict) and isinstance(commit.get("sha"), str):
                return commit["sha"]
        return None

    @staticmethod
    def archive_url(owner: str, repo: str, ref: str) -> str:
        """Tarball URL for ``ref`` (a commit, tag or branch)."""
        return f"{Constants.GITHUB_ARCHIVE_BASE}/{owner}/{repo}/archive/{ref}.tar.gz"
