"""Resolver configuration.

The engine consumes an immutable ``ResolverConfig``. It is built from a
mapping (typically a YAML file's ``resolver`` section) with environment
fallbacks for the GitHub token and extra registries.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import urlsplit

import yaml

from .constants import Constants
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverConfig:
    """Settings for one resolution run.

    Attributes:
        registries: Registry base URLs in order of preference.
        auth_token: Optional bearer token for VCS API calls.
        timeout: Per-request timeout in seconds.
        include_dev_dependencies: Whether dev dependencies are resolved.
        dev_depth: Dependency depth below which dev dependencies are followed
            (None for no limit).
        blacklist: Names skipped as known-broken dependencies.
        cache_depth: Depth from which pre-existing store entries are trusted;
            negative disables them entirely.
        github_api_base: GitHub REST API root.
    """

    registries: Tuple[str, ...] = (Constants.REGISTRY_URL_NPM,)
    auth_token: Optional[str] = None
    timeout: float = Constants.REQUEST_TIMEOUT
    include_dev_dependencies: bool = False
    dev_depth: Optional[int] = Constants.DEFAULT_DEV_DEPTH
    blacklist: FrozenSet[str] = frozenset(Constants.DEFAULT_BLACKLIST)
    cache_depth: int = Constants.DEFAULT_CACHE_DEPTH
    github_api_base: str = Constants.GITHUB_API_BASE

    def __post_init__(self) -> None:
        if not self.registries:
            raise ConfigError("At least one registry must be configured")
        for registry in self.registries:
            parts = urlsplit(registry)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ConfigError(f"Invalid registry URI: {registry}")
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")

    @property
    def uses_cache(self) -> bool:
        return self.cache_depth >= 0


def default_registries(
    configured: Iterable[str] = (),
    env: Optional[Mapping[str, str]] = None,
    include_default: bool = True,
) -> Tuple[str, ...]:
    """Configured registries, then ADDITIONAL_NPM_REGISTRIES, then npmjs.org."""
    env = os.environ if env is None else env
    ordered: List[str] = list(configured)
    ordered.extend(env.get(Constants.ENV_ADDITIONAL_REGISTRIES, "").split())
    if include_default:
        ordered.append(Constants.REGISTRY_URL_NPM)
    seen = set()
    result = []
    for registry in ordered:
        if registry not in seen:
            seen.add(registry)
            result.append(registry)
    return tuple(result)


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def from_mapping(data: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> ResolverConfig:
    """Build a ResolverConfig from a plain mapping.

    Recognized keys: registries, no_default_registry, github_token, timeout,
    dev_dependencies, dev_depth, blacklist, cache_depth, no_cache,
    github_api_base.

    Raises:
        ConfigError: on unknown types or invalid values.
    """
    env = os.environ if env is None else env
    registries = data.get("registries") or []
    if isinstance(registries, str):
        registries = registries.split()
    if not isinstance(registries, list):
        raise ConfigError("registries must be a list of URLs")

    token = data.get("github_token") or env.get(Constants.ENV_GITHUB_TOKEN) or None

    blacklist = data.get("blacklist", list(Constants.DEFAULT_BLACKLIST))
    if not isinstance(blacklist, (list, tuple, set, frozenset)):
        raise ConfigError("blacklist must be a list of package names")

    cache_depth = _as_int(data.get("cache_depth", Constants.DEFAULT_CACHE_DEPTH), "cache_depth")
    if data.get("no_cache"):
        cache_depth = -1

    dev_depth = data.get("dev_depth", Constants.DEFAULT_DEV_DEPTH)
    if dev_depth is not None:
        dev_depth = _as_int(dev_depth, "dev_depth")

    try:
        timeout = float(data.get("timeout", Constants.REQUEST_TIMEOUT))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"timeout must be a number, got {data.get('timeout')!r}") from exc

    return ResolverConfig(
        registries=default_registries(
            registries, env, include_default=not data.get("no_default_registry", False)
        ),
        auth_token=token,
        timeout=timeout,
        include_dev_dependencies=bool(data.get("dev_dependencies", False)),
        dev_depth=dev_depth,
        blacklist=frozenset(blacklist),
        cache_depth=cache_depth,
        github_api_base=str(data.get("github_api_base", Constants.GITHUB_API_BASE)).rstrip("/"),
    )


def load_config_mapping(path: Optional[str]) -> Dict[str, Any]:
    """Read the resolver settings mapping from a YAML (or JSON) file.

    A ``resolver`` section is used when present, otherwise the whole document.

    Raises:
        ConfigError: if the file is missing or malformed.
    """
    if not path:
        return {}
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to load config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping")
    section = data.get("resolver", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'resolver' section of {path} must be a mapping")
    logger.debug("Loaded configuration from %s", path)
    return dict(section)


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> ResolverConfig:
    """Load configuration from a file; defaults plus environment without one.

    Raises:
        ConfigError: if the file is missing, malformed or holds invalid values.
    """
    return from_mapping(load_config_mapping(path), env)


def parse_extensions(specs: Iterable[str]) -> Dict[str, str]:
    """Parse ``[NAME=]PATH`` extension directives.

    Without a name, the directory's basename is used.

    Raises:
        ConfigError: on malformed directives or a name used twice.
    """
    extensions: Dict[str, str] = {}
    for spec in specs:
        parts = spec.split("=")
        if len(parts) == 1:
            path = parts[0]
            name = os.path.basename(os.path.normpath(path))
        elif len(parts) == 2:
            name, path = parts
        else:
            raise ConfigError(f"Invalid extension syntax: {spec}")
        if not name or not path:
            raise ConfigError(f"Invalid extension syntax: {spec}")
        if name in extensions:
            raise ConfigError(
                f"Extension name {name!r} used for both {extensions[name]} and {path}"
            )
        extensions[name] = path
    return extensions
