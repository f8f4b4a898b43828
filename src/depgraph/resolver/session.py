"""Mutable state of one resolution run.

Created once per run and threaded through every resolver call. The store
and the currently-resolving set are only changed through the narrow methods
below so their invariants are enforced in one place.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Set, Tuple

from ..config import ResolverConfig
from ..errors import BrokenPackage
from ..models import NewlyResolved, PackageInfo, ResolvedPackage, StoreEntry
from ..store import PackageStore
from ..versioning.semver import SemanticVersion

logger = logging.getLogger(__name__)

NodeKey = Tuple[str, SemanticVersion]


class ResolverSession:
    """Store, caches, cycle-detection set and diagnostics of a run."""

    def __init__(self, config: ResolverConfig, store: Optional[PackageStore[StoreEntry]] = None):
        """Initialize the session.

        Args:
            config: Immutable run configuration.
            store: Optional pre-populated store.
        """
        self.config = config
        self.registries: List[str] = list(config.registries)
        self.auth_token = config.auth_token
        self.blacklist = frozenset(config.blacklist)
        self.include_dev_dependencies = config.include_dev_dependencies
        self.store: PackageStore[StoreEntry] = store if store is not None else PackageStore()
        self.package_infos: Dict[str, PackageInfo] = {}
        self.stack: List[NodeKey] = []
        self.cycles: List[List[NodeKey]] = []
        self.broken: List[Tuple[NodeKey, BrokenPackage]] = []
        self._resolving: Set[NodeKey] = set()
        # Guards the store and the resolving set: one mutator at a time.
        self.lock = threading.RLock()

    @property
    def depth(self) -> int:
        """Dependency depth of the request being processed (top level is 0)."""
        return len(self.stack)

    def is_resolving(self, name: str, version: SemanticVersion) -> bool:
        return (name, version) in self._resolving

    def mark_resolving(self, name: str, version: SemanticVersion) -> None:
        """Enter the Resolving state for (name, version)."""
        key = (name, version)
        if key in self._resolving:
            raise RuntimeError(f"{name}@{version} is already being resolved")
        logger.info("Resolving %s version %s", name, version)
        self._resolving.add(key)
        self.stack.append(key)

    def unmark_resolving(self, name: str, version: SemanticVersion) -> None:
        """Leave the Resolving state for (name, version)."""
        key = (name, version)
        self._resolving.discard(key)
        if self.stack and self.stack[-1] == key:
            self.stack.pop()
        elif key in self.stack:
            self.stack.remove(key)

    def add_resolved(self, package: ResolvedPackage) -> None:
        """Store a freshly resolved package, overwriting any previous entry."""
        if package.dist is None:
            raise ValueError(f"{package.name}@{package.version} has no distribution info")
        self.store.insert(package.name, package.version, NewlyResolved(package))
        logger.info("Finished resolving %s %s", package.name, package.version)

    def delete(self, name: str, version: SemanticVersion) -> None:
        self.store.delete(name, version)

    def record_cycle(self, name: str, version: SemanticVersion) -> List[NodeKey]:
        """Remember the path that closes a cycle at (name, version)."""
        key = (name, version)
        start = self.stack.index(key) if key in self.stack else 0
        path = self.stack[start:] + [key]
        self.cycles.append(path)
        return path

    def record_broken(self, parent: NodeKey, error: BrokenPackage) -> None:
        self.broken.append((parent, error))
