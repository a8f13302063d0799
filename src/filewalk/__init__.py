"""Bounded-concurrency file tree walker."""

from .config import WalkConfig
from .context import FileContext, FileContextFactory
from .errors import ConfigurationError, FileAccessError, ResolutionError, WalkError
from .executor import BoundedExecutor, TaskOutcome
from .fileio import AsyncFileIO, FileIO
from .hooks import HookDispatcher, HookEvent
from .ignore import PatternRule, PredicateRule, coerce_ignore, should_ignore
from .progress import ProgressCounts, ProgressSnapshot, ProgressState
from .resolver import FileSetResolver, GlobResolver
from .walker import Walk, WalkState, walk

__version__ = "0.1.0"

__all__ = [
    "AsyncFileIO",
    "BoundedExecutor",
    "ConfigurationError",
    "FileAccessError",
    "FileContext",
    "FileContextFactory",
    "FileIO",
    "FileSetResolver",
    "GlobResolver",
    "HookDispatcher",
    "HookEvent",
    "PatternRule",
    "PredicateRule",
    "ProgressCounts",
    "ProgressSnapshot",
    "ProgressState",
    "ResolutionError",
    "TaskOutcome",
    "Walk",
    "WalkConfig",
    "WalkError",
    "WalkState",
    "coerce_ignore",
    "should_ignore",
    "walk",
]
