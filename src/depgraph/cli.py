"""Command-line entry point: build the config, resolve, print the report."""

from __future__ import annotations

import logging
import sys
from typing import Any, List, Optional

from .args import parse_args
from .common.logging_utils import configure_logging
from .config import ResolverConfig, from_mapping, load_config_mapping, parse_extensions
from .constants import Constants, ExitCodes
from .errors import ConfigError, InvalidVersionRangeSyntax, ManifestParseError
from .manifest import load_package_json
from .models import PackageManifest
from .preload import load_existing
from .resolver import Resolver
from .versioning.parser import parse_request

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def build_config(args: Any, env=None) -> ResolverConfig:
    """Merge config file values with CLI overrides (CLI wins).

    Raises:
        ConfigError: if the file or any resulting value is invalid.
    """
    data = load_config_mapping(getattr(args, "CONFIG", None))
    if args.REGISTRIES:
        data["registries"] = list(args.REGISTRIES) + list(data.get("registries") or [])
    if args.NO_DEFAULT_REGISTRY:
        data["no_default_registry"] = True
    if args.NO_CACHE:
        data["no_cache"] = True
    if args.CACHE_DEPTH is not None:
        data["cache_depth"] = args.CACHE_DEPTH
    if args.DEV_DEPENDENCIES:
        data["dev_dependencies"] = True
    if args.DEV_DEPTH is not None:
        data["dev_depth"] = args.DEV_DEPTH
    if args.TIMEOUT is not None:
        data["timeout"] = args.TIMEOUT
    if args.GITHUB_TOKEN:
        data["github_token"] = args.GITHUB_TOKEN
    if args.BLACKLIST:
        listed = data.get("blacklist", list(Constants.DEFAULT_BLACKLIST))
        if isinstance(listed, (list, tuple, set, frozenset)):
            data["blacklist"] = list(listed) + list(args.BLACKLIST)
    return from_mapping(data, env)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if not args.PACKAGES and not args.PACKAGE_FILES:
        logger.error("Nothing to do: give at least one --package or --file")
        return ExitCodes.FILE_ERROR.value

    try:
        config = build_config(args)
        extensions = parse_extensions(args.EXTEND)
        requests = [parse_request(token) for token in args.PACKAGES]
        manifests: List[PackageManifest] = [load_package_json(path) for path in args.PACKAGE_FILES]
    except (ConfigError, InvalidVersionRangeSyntax, ManifestParseError) as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value

    resolver = Resolver(config)
    if config.uses_cache and (args.OUTPUT or extensions):
        resolver.preload(load_existing(args.OUTPUT, extensions))

    report = resolver.run(requests, manifests)
    for line in report.render():
        print(line)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
