"""Source fetchers: npm registries, version-control hosts and raw URLs."""

from .base import SourceFetcher
from .registry import RegistryFetcher
from .vcs import VcsFetcher
from .url import UrlFetcher

__all__ = [
    "SourceFetcher",
    "RegistryFetcher",
    "VcsFetcher",
    "UrlFetcher",
]
