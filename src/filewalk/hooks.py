"""Lifecycle hooks fired around a walk."""

from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Hook = Callable[[Any], Any]


class HookEvent(Enum):
    """Points in a run where registered callbacks are invoked."""

    START = "start"  # Before any file is processed; receives the Walk
    END = "end"  # After every file has settled; receives the Walk
    PROGRESS = "progress"  # After every file has settled; receives a ProgressSnapshot


class HookDispatcher:
    """Keeps callbacks per event and runs them as a barrier.

    Callbacks registered for the same event run concurrently. ``trigger``
    returns only when all of them have finished, even when one of them fails.
    The first error raised by a callback then propagates to the caller.
    """

    def __init__(self) -> None:
        self._hooks: dict[HookEvent, list[Hook]] = {event: [] for event in HookEvent}

    def register(self, event: HookEvent | str, callback: Hook) -> None:
        """Append a callback to an event's list.

        Args:
            event: Event kind, or its string value ("start", "end", "progress").
            callback: Sync or async callable taking the event payload.

        Raises:
            ConfigurationError: If the event is unknown or the callback is not callable.

        """
        if not callable(callback):
            raise ConfigurationError(f"Hook for {event} must be callable")
        try:
            kind = HookEvent(event)
        except ValueError as e:
            raise ConfigurationError(f"Unknown hook event: {event!r}") from e
        self._hooks[kind].append(callback)

    def callbacks(self, event: HookEvent) -> list[Hook]:
        return list(self._hooks[event])

    async def trigger(self, event: HookEvent, payload: Any) -> None:
        """Run all callbacks for an event and wait for them to finish."""
        hooks = self._hooks[event]
        if not hooks:
            return

        logger.debug("Triggering %d %s hook(s)", len(hooks), event.value)
        results = await asyncio.gather(
            *(self._invoke(hook, payload) for hook in hooks),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    @staticmethod
    async def _invoke(hook: Hook, payload: Any) -> None:
        result = hook(payload)
        if inspect.isawaitable(result):
            await result
