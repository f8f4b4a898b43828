"""Tests for resolver configuration."""

import pytest

from depgraph.config import (
    ResolverConfig,
    default_registries,
    from_mapping,
    load_config,
    parse_extensions,
)
from depgraph.constants import Constants
from depgraph.errors import ConfigError


class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        """Test the documented defaults with an empty environment."""
        config = from_mapping({}, env={})
        assert config.registries == (Constants.REGISTRY_URL_NPM,)
        assert config.auth_token is None
        assert config.timeout == 10
        assert config.include_dev_dependencies is False
        assert config.dev_depth == 1
        assert config.cache_depth == 0
        assert config.uses_cache
        assert "websocket-server" in config.blacklist


class TestRegistries:
    """Test registry ordering."""

    def test_order_and_dedup(self):
        """Test configured, then environment, then the default registry."""
        env = {"ADDITIONAL_NPM_REGISTRIES": "https://b.example https://a.example"}
        assert default_registries(["https://a.example"], env) == (
            "https://a.example",
            "https://b.example",
            Constants.REGISTRY_URL_NPM,
        )

    def test_no_default_registry(self):
        """Test the default registry can be left out."""
        config = from_mapping(
            {"registries": ["https://npm.internal/"], "no_default_registry": True}, env={}
        )
        assert config.registries == ("https://npm.internal/",)

    def test_no_registries_at_all(self):
        """Test an empty registry list is rejected."""
        with pytest.raises(ConfigError):
            from_mapping({"no_default_registry": True}, env={})

    def test_invalid_registry_uri(self):
        """Test non-http registries are rejected."""
        with pytest.raises(ConfigError):
            ResolverConfig(registries=("ftp://x",))


class TestValues:
    """Test validation and environment fallbacks."""

    def test_token_from_environment(self):
        """Test GITHUB_TOKEN is used when no token is configured."""
        assert from_mapping({}, env={"GITHUB_TOKEN": "abc"}).auth_token == "abc"
        assert from_mapping({"github_token": "xyz"}, env={"GITHUB_TOKEN": "abc"}).auth_token == "xyz"

    def test_no_cache(self):
        """Test no_cache disables pre-existing packages."""
        config = from_mapping({"no_cache": True, "cache_depth": 3}, env={})
        assert config.cache_depth == -1
        assert not config.uses_cache

    @pytest.mark.parametrize("data", [
        {"timeout": 0},
        {"timeout": "soon"},
        {"cache_depth": "deep"},
        {"dev_depth": True},
        {"blacklist": "one"},
        {"registries": 5},
    ])
    def test_invalid_values(self, data):
        """Test invalid values raise ConfigError."""
        with pytest.raises(ConfigError):
            from_mapping(data, env={})

    def test_unlimited_dev_depth(self):
        """Test a null dev_depth means no limit."""
        assert from_mapping({"dev_depth": None}, env={}).dev_depth is None


class TestLoadConfig:
    """Test YAML configuration files."""

    def test_resolver_section(self, tmp_path):
        """Test the resolver section is used when present."""
        path = tmp_path / "depgraph.yml"
        path.write_text(
            "resolver:\n"
            "  registries:\n"
            "    - https://npm.internal/\n"
            "  timeout: 30\n"
            "  dev_dependencies: true\n"
            "  blacklist: [bad-pkg]\n"
        )
        config = load_config(str(path), env={})
        assert config.registries[0] == "https://npm.internal/"
        assert config.timeout == 30.0
        assert config.include_dev_dependencies
        assert config.blacklist == frozenset({"bad-pkg"})

    def test_top_level_mapping(self, tmp_path):
        """Test a file without a resolver section."""
        path = tmp_path / "c.yaml"
        path.write_text("cache_depth: 2\n")
        assert load_config(str(path), env={}).cache_depth == 2

    def test_missing_file(self, tmp_path):
        """Test a missing file is a ConfigError."""
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yml"), env={})

    def test_malformed_file(self, tmp_path):
        """Test malformed YAML is a ConfigError."""
        path = tmp_path / "bad.yml"
        path.write_text("resolver: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path), env={})

    def test_no_path(self):
        """Test defaults without a file."""
        assert load_config(None, env={}).registries == (Constants.REGISTRY_URL_NPM,)


class TestParseExtensions:
    """Test [NAME=]PATH extension directives."""

    def test_named_and_unnamed(self):
        """Test explicit names and basename defaults."""
        assert parse_extensions(["base=/opt/nix/base", "/srv/libs/extra/"]) == {
            "base": "/opt/nix/base",
            "extra": "/srv/libs/extra/",
        }

    def test_duplicate_name(self):
        """Test a name can only be used once."""
        with pytest.raises(ConfigError):
            parse_extensions(["lib=/a", "/b/lib"])

    @pytest.mark.parametrize("spec", ["a=b=c", "=path", "name="])
    def test_malformed(self, spec):
        """Test malformed directives are rejected."""
        with pytest.raises(ConfigError):
            parse_extensions([spec])
