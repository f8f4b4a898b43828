"""Per-request outcomes collected over a run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..constants import ExitCodes
from ..models import ResolvedPackage, StoreEntry
from ..store import PackageStore
from ..versioning.semver import SemanticVersion


@dataclass
class RequestOutcome:
    """Result of one top-level request: a pinned version or a failure reason."""
    name: str
    requested: str
    version: Optional[SemanticVersion] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.ok:
            return f"{self.name}@{self.requested}: resolved to {self.version}"
        return f"{self.name}@{self.requested}: FAILED ({self.error})"


@dataclass
class RunReport:
    """Everything a run produced, handed to the emitter and printed to the user."""
    store: PackageStore[StoreEntry]
    outcomes: List[RequestOutcome] = field(default_factory=list)
    root_packages: List[ResolvedPackage] = field(default_factory=list)
    cycle_count: int = 0
    broken: List[str] = field(default_factory=list)

    @property
    def failures(self) -> List[RequestOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        if self.succeeded:
            return ExitCodes.SUCCESS.value
        return ExitCodes.EXIT_WARNINGS.value

    def render(self) -> List[str]:
        """Human-readable summary lines."""
        lines = [outcome.describe() for outcome in self.outcomes]
        new_count = sum(1 for _ in self.store.new_packages())
        lines.append(f"{new_count} new packages resolved, {len(self.store)} in store")
        if self.cycle_count:
            lines.append(f"{self.cycle_count} dependency cycles broken")
        lines.extend(f"skipped broken dependency: {reason}" for reason in self.broken)
        return lines
