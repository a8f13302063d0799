"""File system watcher that triggers a new walk when the tree changes."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .ignore import should_ignore

if TYPE_CHECKING:
    from watchdog.events import FileSystemEvent

    from .ignore import IgnoreRule

logger = logging.getLogger(__name__)


class ChangeEventHandler(FileSystemEventHandler):
    """Forwards file changes that are not excluded by the ignore rule."""

    def __init__(self, ignore: IgnoreRule, callback: Callable[[Path], None]) -> None:
        """Initialize the event handler.

        Args:
            ignore: Rule for paths whose changes are dropped.
            callback: Function called with the changed path.

        """
        super().__init__()
        self.ignore = ignore
        self.callback = callback

    def on_created(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileCreatedEvent) and not event.is_directory:
            self._check_path(Path(str(event.src_path)))

    def on_modified(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileModifiedEvent) and not event.is_directory:
            self._check_path(Path(str(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileMovedEvent) and not event.is_directory:
            self._check_path(Path(str(event.dest_path)))

    def _check_path(self, path: Path) -> None:
        if should_ignore(self.ignore, path):
            return
        logger.debug("Detected change: %s", path)
        self.callback(path)


class TreeWatcher:
    """Watches a root directory and queues changed paths for the event loop."""

    def __init__(self, root: Path, ignore: IgnoreRule) -> None:
        """Initialize the watcher.

        Args:
            root: Directory watched recursively.
            ignore: Rule for paths whose changes are dropped.

        """
        self.root = root
        self.ignore = ignore
        self._observer: Observer | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: asyncio.Queue[Path] = asyncio.Queue()

    def _on_change(self, path: Path) -> None:
        # Called from the observer thread
        if self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._pending.put_nowait, path)

    def start(self) -> None:
        """Start watching. Must be called from a running event loop."""
        if self._observer is not None:
            return

        self._loop = asyncio.get_running_loop()
        self._observer = Observer()
        self._observer.schedule(ChangeEventHandler(self.ignore, self._on_change), str(self.root), recursive=True)
        self._observer.start()
        logger.info("Watching directory: %s", self.root)

    def stop(self) -> None:
        """Stop watching."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None
            self._loop = None
            logger.info("File watcher stopped")

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    async def wait_for_change(self, timeout: float | None = None) -> Path | None:
        """Wait for the next changed path.

        Args:
            timeout: Maximum time to wait.

        Returns:
            Changed path, or None on timeout.

        """
        try:
            if timeout is not None:
                return await asyncio.wait_for(self._pending.get(), timeout=timeout)
            return await self._pending.get()
        except TimeoutError:
            return None

    def clear_pending(self) -> int:
        """Drop all queued changes.

        Returns:
            Number of changes dropped.

        """
        count = 0
        while not self._pending.empty():
            try:
                self._pending.get_nowait()
                count += 1
            except asyncio.QueueEmpty:
                break
        return count
