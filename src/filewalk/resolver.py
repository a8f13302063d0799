"""Resolve a root directory and glob pattern into the files of a run."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import ResolutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class FileSetResolver(Protocol):
    """Interface for turning (root, pattern) into an ordered list of files."""

    async def resolve(self, root: Path, pattern: str) -> list[Path]:
        """Resolve matching files.

        Args:
            root: Directory the pattern is evaluated against.
            pattern: Glob pattern relative to root.

        Returns:
            Absolute file paths in a stable order.

        """
        ...


class GlobResolver:
    """Resolves files with pathlib globbing.

    Dotfiles are included and directories are dropped. Results are sorted so
    that repeated runs over an unchanged tree see the same order.
    """

    async def resolve(self, root: Path, pattern: str) -> list[Path]:
        return await asyncio.to_thread(self.resolve_sync, root, pattern)

    def resolve_sync(self, root: Path, pattern: str) -> list[Path]:
        """Blocking variant of resolve, used by the CLI scan command."""
        root = Path(root).expanduser().resolve()

        if not root.exists():
            raise ResolutionError(f"Root directory does not exist: {root}")
        if not root.is_dir():
            raise ResolutionError(f"Root is not a directory: {root}")

        try:
            files = sorted(path for path in root.glob(pattern) if path.is_file())
        except PermissionError as e:
            raise ResolutionError(f"Permission denied resolving {pattern!r} under {root}: {e}") from e
        except (OSError, ValueError, NotImplementedError) as e:
            raise ResolutionError(f"Cannot resolve {pattern!r} under {root}: {e}") from e

        logger.debug("Resolved %d files for %r under %s", len(files), pattern, root)
        return files
