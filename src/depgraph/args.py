"""Argument parsing functionality for depgraph."""

import argparse

from .constants import Constants


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="depgraph",
        description="Resolve npm packages into a pinned, fully specified dependency graph",
        add_help=True,
    )

    parser.add_argument("-p", "--package",
                        dest="PACKAGES",
                        help="Package to resolve, as NAME[@RANGE] (supports multiples)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-f", "--file",
                        dest="PACKAGE_FILES",
                        help="Path to a package.json (or its directory) to resolve (supports multiples)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Output directory whose existing packages are reused",
                        action="store", type=str)
    parser.add_argument("-e", "--extend",
                        dest="EXTEND",
                        help="Reuse packages at PATH, optionally called NAME: [NAME=]PATH (supports multiples)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--no-cache",
                        dest="NO_CACHE",
                        help="Resolve everything from scratch, ignoring existing packages",
                        action="store_true")
    parser.add_argument("--cache-depth",
                        dest="CACHE_DEPTH",
                        help=("Depth at which to use cache. Packages at dependency depth DEPTH "
                              "and deeper are pulled from the cache; negative disables it"),
                        action="store", type=int)
    parser.add_argument("--dev-dependencies",
                        dest="DEV_DEPENDENCIES",
                        help="Also resolve development dependencies",
                        action="store_true")
    parser.add_argument("--dev-depth",
                        dest="DEV_DEPTH",
                        help="Depth to which to fetch dev dependencies (default: %d)" % Constants.DEFAULT_DEV_DEPTH,
                        action="store", type=int)
    parser.add_argument("-r", "--registry",
                        dest="REGISTRIES",
                        help="npm registry to query, in order of preference (supports multiples)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--no-default-registry",
                        dest="NO_DEFAULT_REGISTRY",
                        help="Do not include the default npmjs.org registry",
                        action="store_true")
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Time requests out after SECONDS seconds",
                        action="store", type=float)
    parser.add_argument("--github-token",
                        dest="GITHUB_TOKEN",
                        help="Token to use for github access (also read from GITHUB_TOKEN)",
                        action="store", type=str)
    parser.add_argument("--blacklist",
                        dest="BLACKLIST",
                        help="Package name to treat as broken and skip, added to the default list (supports multiples)",
                        action="append", type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store", type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
