"""Keyed store of resolved packages: name -> exact version -> entry."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .models import NewlyResolved, ResolvedPackage
from .versioning.semver import SemanticVersion

T = TypeVar("T")
U = TypeVar("U")


class PackageStore(Generic[T]):
    """Mapping of package name to a mapping of exact version to entry.

    Holds at most one entry per (name, version); inserting again overwrites.
    No ordering between names or versions is implied.
    """

    def __init__(self, entries: Optional[Dict[str, Dict[SemanticVersion, T]]] = None):
        """Initialize the store.

        Args:
            entries: Optional initial nested mapping; copied, not aliased.
        """
        self._entries: Dict[str, Dict[SemanticVersion, T]] = {}
        for name, versions in (entries or {}).items():
            if versions:
                self._entries[name] = dict(versions)

    def insert(self, name: str, version: SemanticVersion, entry: T) -> None:
        """Insert or overwrite the entry for (name, version)."""
        self._entries.setdefault(name, {})[version] = entry

    def lookup(self, name: str, version: SemanticVersion) -> Optional[T]:
        """Get the entry for (name, version), or None."""
        return self._entries.get(name, {}).get(version)

    def delete(self, name: str, version: SemanticVersion) -> None:
        """Remove (name, version) if present."""
        versions = self._entries.get(name)
        if versions is None:
            return
        versions.pop(version, None)
        if not versions:
            del self._entries[name]

    def member(self, name: str, version: SemanticVersion) -> bool:
        return version in self._entries.get(name, {})

    def versions(self, name: str) -> Dict[SemanticVersion, T]:
        """All stored versions of ``name`` (a copy; empty when unknown)."""
        return dict(self._entries.get(name, {}))

    def map_values(self, func: Callable[[T], U]) -> "PackageStore[U]":
        """Return a new store with ``func`` applied to every entry."""
        return PackageStore({
            name: {version: func(entry) for version, entry in versions.items()}
            for name, versions in self._entries.items()
        })

    def merge(self, other: "PackageStore[T]") -> None:
        """Insert every entry of ``other``, overwriting on conflict."""
        for name, version, entry in other.items():
            self.insert(name, version, entry)

    def names(self) -> List[str]:
        return list(self._entries)

    def items(self) -> Iterator[Tuple[str, SemanticVersion, T]]:
        for name, versions in list(self._entries.items()):
            for version, entry in list(versions.items()):
                yield name, version, entry

    def new_packages(self) -> Iterator[ResolvedPackage]:
        """Packages resolved during this run, for the emitter."""
        for _, _, entry in self.items():
            if isinstance(entry, NewlyResolved):
                yield entry.package

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return sum(len(versions) for versions in self._entries.values())
