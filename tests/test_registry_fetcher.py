"""Tests for the npm registry source."""

from unittest.mock import patch

import pytest

from depgraph.errors import NoMatchingPackage, NoMatchingVersion, NoSuchTag, TagPointsToInvalidVersion
from depgraph.sources.registry import RegistryFetcher, package_url
from depgraph.versioning.ranges import DistTag, UrlSource, parse_range

REGISTRY_A = "https://npm.internal/"
REGISTRY_B = "https://registry.npmjs.org/"


def version_object(name, version, deps=None):
    return {
        "name": name,
        "version": version,
        "dependencies": deps or {},
        "dist": {
            "tarball": f"https://registry.npmjs.org/{name}/-/{name}-{version}.tgz",
            "shasum": "f" * 40,
        },
    }


def document(name, versions, tags=None):
    return {
        "name": name,
        "versions": {ver: version_object(name, ver) for ver in versions},
        "dist-tags": tags or {},
    }


class TestPackageUrl:
    """Test registry URL construction."""

    def test_plain_name(self):
        """Test a plain name is appended."""
        assert package_url(REGISTRY_B, "left-pad") == "https://registry.npmjs.org/left-pad"

    def test_scoped_name(self):
        """Test a scoped name keeps '@' and escapes '/'."""
        assert package_url("https://r.example", "@types/node") == "https://r.example/@types%2Fnode"


class TestPackageInfo:
    """Test document retrieval and registry fallback."""

    @patch('depgraph.sources.registry.get_json')
    def test_falls_back_to_next_registry(self, mock_get_json):
        """Test a registry without a response is skipped."""
        mock_get_json.side_effect = [
            (0, {}, None),
            (200, {}, document("left-pad", ["1.0.0"])),
        ]
        fetcher = RegistryFetcher([REGISTRY_A, REGISTRY_B])

        info = fetcher.package_info("left-pad")

        assert len(info.versions) == 1
        urls = [call.args[0] for call in mock_get_json.call_args_list]
        assert urls == ["https://npm.internal/left-pad", "https://registry.npmjs.org/left-pad"]

    @patch('depgraph.sources.registry.get_json')
    def test_first_success_wins(self, mock_get_json):
        """Test later registries are not queried after a success."""
        mock_get_json.return_value = (200, {}, document("a", ["1.0.0"]))
        fetcher = RegistryFetcher([REGISTRY_A, REGISTRY_B])
        fetcher.package_info("a")
        assert mock_get_json.call_count == 1

    @patch('depgraph.sources.registry.get_json')
    def test_no_registry_has_package(self, mock_get_json):
        """Test NoMatchingPackage after every registry fails."""
        mock_get_json.side_effect = [(404, {}, None), (404, {}, None)]
        fetcher = RegistryFetcher([REGISTRY_A, REGISTRY_B])
        with pytest.raises(NoMatchingPackage):
            fetcher.package_info("ghost")

    @patch('depgraph.sources.registry.get_json')
    def test_malformed_document_counts_as_failure(self, mock_get_json):
        """Test a registry returning the wrong shape is skipped."""
        mock_get_json.side_effect = [
            (200, {}, {"error": "weird"}),
            (200, {}, document("a", ["1.0.0"])),
        ]
        fetcher = RegistryFetcher([REGISTRY_A, REGISTRY_B])
        assert len(fetcher.package_info("a").versions) == 1

    @patch('depgraph.sources.registry.get_json')
    def test_documents_are_cached(self, mock_get_json):
        """Test a package document is fetched once per run."""
        mock_get_json.return_value = (200, {}, document("a", ["1.0.0"]))
        cache = {}
        fetcher = RegistryFetcher([REGISTRY_B], cache=cache)
        fetcher.package_info("a")
        fetcher.package_info("a")
        assert mock_get_json.call_count == 1
        assert "a" in cache


class TestFetch:
    """Test version and tag selection."""

    @patch('depgraph.sources.registry.get_json')
    def test_best_match(self, mock_get_json):
        """Test the highest satisfying version is chosen."""
        mock_get_json.return_value = (
            200, {}, document("left-pad", ["1.0.0", "1.1.0", "1.2.0", "2.0.0"])
        )
        fetcher = RegistryFetcher([REGISTRY_B])

        manifest = fetcher.fetch("left-pad", parse_range("^1.0.0"))

        assert manifest.version == "1.2.0"
        assert manifest.dist.url.endswith("left-pad-1.2.0.tgz")

    @patch('depgraph.sources.registry.get_json')
    def test_no_matching_version(self, mock_get_json):
        """Test NoMatchingVersion when nothing satisfies."""
        mock_get_json.return_value = (200, {}, document("a", ["1.0.0"]))
        with pytest.raises(NoMatchingVersion):
            RegistryFetcher([REGISTRY_B]).fetch("a", parse_range("^3.0.0"))

    @patch('depgraph.sources.registry.get_json')
    def test_dist_tag(self, mock_get_json):
        """Test a tag resolves through the tag table."""
        mock_get_json.return_value = (
            200, {}, document("a", ["3.0.0", "3.1.4"], {"latest": "3.1.4"})
        )
        manifest = RegistryFetcher([REGISTRY_B]).fetch("a", DistTag("latest"))
        assert manifest.version == "3.1.4"

    @patch('depgraph.sources.registry.get_json')
    def test_missing_tag(self, mock_get_json):
        """Test NoSuchTag for an unknown tag."""
        mock_get_json.return_value = (200, {}, document("a", ["1.0.0"], {"latest": "1.0.0"}))
        with pytest.raises(NoSuchTag):
            RegistryFetcher([REGISTRY_B]).fetch("a", DistTag("beta"))

    @patch('depgraph.sources.registry.get_json')
    def test_tag_points_to_unknown_version(self, mock_get_json):
        """Test TagPointsToInvalidVersion when the tagged version is absent."""
        mock_get_json.return_value = (200, {}, document("a", ["1.0.0"], {"latest": "9.9.9"}))
        with pytest.raises(TagPointsToInvalidVersion):
            RegistryFetcher([REGISTRY_B]).fetch("a", DistTag("latest"))

    def test_direct_sources_rejected(self):
        """Test the registry refuses repository and URL references."""
        with pytest.raises(TypeError):
            RegistryFetcher([REGISTRY_B]).fetch("a", UrlSource("https://x/a.tgz"))
