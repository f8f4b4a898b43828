"""Tests for semantic version parsing and precedence."""

import pytest

from depgraph.errors import InvalidSemVerSyntax, ResolutionError
from depgraph.versioning.semver import SemanticVersion


def v(text):
    return SemanticVersion.parse(text)


class TestParse:
    """Test version parsing."""

    def test_parses_release_components(self):
        """Test that major, minor and patch are read as integers."""
        version = v("1.12.3")
        assert (version.major, version.minor, version.patch) == (1, 12, 3)
        assert version.prerelease == ()
        assert not version.is_prerelease

    def test_parses_prerelease_and_build(self):
        """Test prerelease and build identifiers."""
        version = v("2.0.0-rc.1+build.5")
        assert version.prerelease == ("rc", "1")
        assert version.build == ("build", "5")
        assert version.is_prerelease

    def test_tolerates_v_prefix(self):
        """Test that a leading 'v' or '=' is accepted."""
        assert v("v1.2.3") == v("1.2.3")
        assert v("=1.2.3") == v("1.2.3")

    @pytest.mark.parametrize("text", ["1.2", "1", "latest", "", "1.2.3.4"])
    def test_rejects_invalid_text(self, text):
        """Test that non-semver text raises InvalidSemVerSyntax."""
        with pytest.raises(InvalidSemVerSyntax):
            v(text)

    def test_invalid_syntax_is_resolution_error(self):
        """Test the error is recoverable at the request boundary."""
        with pytest.raises(ResolutionError):
            v("not-a-version")

    def test_render_round_trips(self):
        """Test that rendering gives back the canonical text."""
        for text in ["0.0.1", "1.2.3-alpha.1", "1.2.3-beta+exp.sha.5114f85"]:
            assert str(v(text)) == text


class TestPrecedence:
    """Test semver 2.0 ordering."""

    def test_numeric_components_compare_numerically(self):
        """Test 1.10.0 sorts above 1.9.0."""
        assert v("1.9.0") < v("1.10.0")
        assert v("2.0.0") > v("1.99.99")

    def test_prerelease_sorts_below_release(self):
        """Test 1.0.0-alpha < 1.0.0."""
        assert v("1.0.0-alpha") < v("1.0.0")

    def test_prerelease_chain(self):
        """Test the reference prerelease ordering chain."""
        chain = [
            "1.0.0-alpha", "1.0.0-alpha.1", "1.0.0-alpha.beta", "1.0.0-beta",
            "1.0.0-beta.2", "1.0.0-beta.11", "1.0.0-rc.1", "1.0.0",
        ]
        versions = [v(text) for text in chain]
        assert sorted(reversed(versions)) == versions

    def test_build_metadata_ignored(self):
        """Test that build metadata takes no part in equality or hashing."""
        assert v("1.0.0+a") == v("1.0.0+b")
        assert hash(v("1.0.0+a")) == hash(v("1.0.0"))
        assert len({v("1.0.0+a"), v("1.0.0")}) == 1

    def test_library_version(self):
        """Test conversion to semantic_version keeps prerelease and build parts."""
        converted = v("2.0.0-rc.1+exp").library_version()
        assert converted.prerelease == ("rc", "1")
        assert converted.build == ("exp",)
        assert (converted.major, converted.minor, converted.patch) == (2, 0, 0)
