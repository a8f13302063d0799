"""Progress accounting shared by the tasks of one run."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import WalkError

if TYPE_CHECKING:
    from .config import WalkConfig
    from .ignore import IgnoreRule


@dataclass(frozen=True)
class ProgressCounts:
    """Point-in-time view of the run counters."""

    total: int = 0
    success: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.success + self.failed

    @property
    def settled(self) -> bool:
        """True once every resolved file has been accounted for."""
        return self.processed == self.total


@dataclass(frozen=True)
class ProgressSnapshot:
    """Final report handed to progress hooks: run options merged with counters."""

    root: Path
    pattern: str
    concurrency: int
    ignore: IgnoreRule
    processed: int
    total: int
    success: int
    failed: int

    @property
    def ignored(self) -> int:
        return self.total - self.processed

    @classmethod
    def build(cls, config: WalkConfig, counts: ProgressCounts) -> ProgressSnapshot:
        return cls(
            **config.describe(),
            processed=counts.processed,
            total=counts.total,
            success=counts.success,
            failed=counts.failed,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "pattern": self.pattern,
            "concurrency": self.concurrency,
            "ignore": self.ignore,
            "processed": self.processed,
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
        }


class ProgressState:
    """Counters for one run, mutated by concurrently finishing tasks.

    ``total`` is fixed once the file list is known. ``success`` and ``failed``
    only grow, and all increments go through a single lock so none are lost.
    """

    def __init__(self) -> None:
        self._total: int | None = None
        self._success = 0
        self._failed = 0
        self._lock = asyncio.Lock()

    @property
    def total(self) -> int:
        return self._total or 0

    def set_total(self, total: int) -> None:
        """Fix the number of resolved files. Allowed exactly once."""
        if self._total is not None:
            raise WalkError("total has already been set for this run")
        if total < 0:
            raise WalkError(f"total must be >= 0, got {total}")
        self._total = total

    async def increment_success(self) -> None:
        async with self._lock:
            self._check_room()
            self._success += 1

    async def increment_failure(self) -> None:
        async with self._lock:
            self._check_room()
            self._failed += 1

    def _check_room(self) -> None:
        if self._total is None:
            raise WalkError("total must be set before tasks report progress")
        if self._success + self._failed >= self._total:
            raise WalkError("more tasks settled than files were resolved")

    def snapshot(self) -> ProgressCounts:
        return ProgressCounts(total=self.total, success=self._success, failed=self._failed)
