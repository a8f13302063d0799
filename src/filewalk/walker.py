"""Walk engine: resolve files, run the processor on each, report progress."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar, Union

from .config import WalkConfig
from .context import FileContext, FileContextFactory
from .errors import ConfigurationError, ResolutionError, WalkError
from .executor import BoundedExecutor
from .fileio import AsyncFileIO, FileIO
from .hooks import Hook, HookDispatcher, HookEvent
from .ignore import should_ignore
from .progress import ProgressCounts, ProgressSnapshot, ProgressState
from .resolver import FileSetResolver, GlobResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

Processor = Callable[[FileContext], Union[Awaitable[T], T]]

# Marker returned by tasks for files skipped by the ignore rule
_IGNORED = object()


class WalkState(Enum):
    """Lifecycle of a single run."""

    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    FINALIZING = "finalizing"
    DONE = "done"


_ACTIVE_STATES = frozenset({WalkState.RESOLVING, WalkState.RUNNING, WalkState.FINALIZING})


class Walk:
    """Runs a processor over every file matched by a root and glob pattern.

    Hook registrations and ``data`` live as long as the instance; each call
    to ``run`` gets fresh progress counters.
    """

    def __init__(
        self,
        config: WalkConfig | None = None,
        *,
        resolver: FileSetResolver | None = None,
        io: FileIO | None = None,
    ) -> None:
        """Initialize the walker.

        Args:
            config: Walk options. Defaults to ``WalkConfig()``.
            resolver: File set resolver. Defaults to pathlib globbing.
            io: Read/write primitives. Defaults to aiofiles.

        """
        self.config = config or WalkConfig()
        self.resolver = resolver or GlobResolver()
        self.io = io or AsyncFileIO()
        self.hooks = HookDispatcher()
        self.state = WalkState.IDLE

        # Free-form storage shared by processors and hooks
        self.data: dict[str, Any] = {}

        self.last_snapshot: ProgressSnapshot | None = None
        self._progress: ProgressState | None = None

    @property
    def progress(self) -> ProgressCounts:
        """Counters of the current or most recent run."""
        if self._progress is None:
            return ProgressCounts()
        return self._progress.snapshot()

    def on_hook(self, event: HookEvent | str, callback: Hook) -> Walk:
        self.hooks.register(event, callback)
        return self

    def on_start(self, callback: Hook) -> Walk:
        return self.on_hook(HookEvent.START, callback)

    def on_end(self, callback: Hook) -> Walk:
        return self.on_hook(HookEvent.END, callback)

    def on_progress(self, callback: Hook) -> Walk:
        return self.on_hook(HookEvent.PROGRESS, callback)

    async def run(self, processor: Processor[T] | None, *, timeout: float | None = None) -> list[T]:
        """Process every resolved file and return the successful results.

        Args:
            processor: Callable receiving a FileContext; may be sync or async.
            timeout: Optional limit in seconds for the whole run.

        Returns:
            Values returned by the processor, in file order. Failed and
            ignored files contribute no entry.

        Raises:
            ConfigurationError: If no processor is given.
            ResolutionError: If the file set cannot be resolved.
            WalkError: If this walker is already running.
            TimeoutError: If the run exceeds ``timeout``.

        """
        if processor is None:
            raise ConfigurationError("Missing processor")
        if not callable(processor):
            raise ConfigurationError(f"Processor must be callable, got {type(processor).__name__}")
        if self.state in _ACTIVE_STATES:
            raise WalkError("Walk is already running")

        try:
            if timeout is None:
                return await self._run(processor)
            async with asyncio.timeout(timeout):
                return await self._run(processor)
        except BaseException:
            self._set_state(WalkState.IDLE)
            raise

    async def _run(self, processor: Processor[T]) -> list[T]:
        progress = ProgressState()
        self._progress = progress
        self.last_snapshot = None

        self._set_state(WalkState.RESOLVING)
        files = await self._resolve()
        progress.set_total(len(files))

        self._set_state(WalkState.RUNNING)
        await self.hooks.trigger(HookEvent.START, self)

        logger.info(
            "Walking %d files under %s (pattern=%r, concurrency=%d)",
            len(files),
            self.config.root,
            self.config.pattern,
            self.config.concurrency,
        )

        factory = FileContextFactory(self.io, self)
        executor = BoundedExecutor(self.config.concurrency)
        outcomes = await executor.run(
            [functools.partial(self._process_file, path, processor, factory, progress) for path in files]
        )
        results = [o.value for o in outcomes if not o.failed and o.value is not _IGNORED]

        self._set_state(WalkState.FINALIZING)
        counts = progress.snapshot()
        snapshot = ProgressSnapshot.build(self.config, counts)
        self.last_snapshot = snapshot
        await self.hooks.trigger(HookEvent.END, self)
        await self.hooks.trigger(HookEvent.PROGRESS, snapshot)

        logger.info(
            "Walk finished: total=%d, success=%d, failed=%d, ignored=%d (peak concurrency %d)",
            snapshot.total,
            snapshot.success,
            snapshot.failed,
            snapshot.ignored,
            executor.peak_in_flight,
        )
        self._set_state(WalkState.DONE)
        return results

    async def _resolve(self) -> list[Path]:
        try:
            return list(await self.resolver.resolve(self.config.root, self.config.pattern))
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Cannot resolve files under {self.config.root}: {e}") from e

    async def _process_file(
        self,
        path: Path,
        processor: Processor[T],
        factory: FileContextFactory,
        progress: ProgressState,
    ) -> Any:
        """Run the processor for one file and record the outcome."""
        try:
            if should_ignore(self.config.ignore, path):
                logger.debug("Ignoring %s", path)
                return _IGNORED

            result = processor(factory.create(path))
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            await progress.increment_failure()
            logger.warning("Failed to process %s: %s", path, e)
            logger.debug("Processor error for %s", path, exc_info=True)
            raise

        await progress.increment_success()
        return result

    def _set_state(self, state: WalkState) -> None:
        if state is not self.state:
            logger.debug("Walk state: %s -> %s", self.state.value, state.value)
            self.state = state


async def walk(
    processor: Processor[T] | None = None,
    config: WalkConfig | None = None,
    *,
    on_start: Hook | None = None,
    on_end: Hook | None = None,
    on_progress: Hook | None = None,
    timeout: float | None = None,
    resolver: FileSetResolver | None = None,
    io: FileIO | None = None,
    **options: Any,
) -> list[T]:
    """Build a Walk, register the given hooks and run it once.

    The processor may be passed positionally or as ``exec=``. Remaining
    keyword options (root, pattern, concurrency, ignore) override fields of
    ``config``; options set to None keep the configured value.

    Raises:
        ConfigurationError: If no processor is given or an option is unknown.

    """
    exec_option = options.pop("exec", None)
    callback = processor if processor is not None else exec_option
    if callback is None:
        raise ConfigurationError("Missing processor")

    walk_config = config or WalkConfig()
    if options:
        walk_config = walk_config.replace(**options)

    walker = Walk(walk_config, resolver=resolver, io=io)
    if on_start is not None:
        walker.on_start(on_start)
    if on_end is not None:
        walker.on_end(on_end)
    if on_progress is not None:
        walker.on_progress(on_progress)

    return await walker.run(callback, timeout=timeout)
