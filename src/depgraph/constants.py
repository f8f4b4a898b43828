"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    EXIT_WARNINGS = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    GITHUB_API_BASE = "https://api.github.com"
    GITHUB_ARCHIVE_BASE = "https://github.com"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_ADDITIONAL_REGISTRIES = "ADDITIONAL_NPM_REGISTRIES"
    ENV_LOG_LEVEL = "DEPGRAPH_LOG_LEVEL"
    PACKAGE_JSON_FILE = "package.json"
    PACKAGES_DIR = "nodePackages"
    ARTIFACT_SUFFIX = ".nix"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 10  # Default timeout in seconds for all HTTP requests
    HASH_ALGORITHM = "sha1"  # npm registry "shasum" format
    DEFAULT_BLACKLIST = ("websocket-server",)
    DEFAULT_CACHE_DEPTH = 0
    DEFAULT_DEV_DEPTH = 1
