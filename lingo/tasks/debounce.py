"""
Debounced Task Scheduler.

Keyed, cancellable deferred tasks on the running event loop. Scheduling
a key that already has a pending task cancels the old one first, so only
a timer that survives the full delay fires. Fired tasks run
fire-and-forget: the scheduler holds a reference until they finish and
logs their failures.

Usage:
    from lingo.tasks.debounce import DebounceScheduler

    scheduler = DebounceScheduler()
    scheduler.schedule(note_id, lambda: save(note_id), delay=1.0)
    scheduler.flush(note_id)       # fire now if pending
    scheduler.cancel(note_id)      # defuse without firing
    await scheduler.drain()        # wait for fired tasks
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

from lingo.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

TaskFactory = Callable[[], Awaitable[Any]]


class DebounceHandle:
    """A pending deferred task for one key."""

    def __init__(self, key: Hashable, factory: TaskFactory) -> None:
        self.key = key
        self.factory = factory
        self.timer: asyncio.TimerHandle | None = None
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
        self.cancelled = True


class DebounceScheduler:
    """Per-key debounce timers with fire-and-forget execution."""

    def __init__(self) -> None:
        self._pending: dict[Hashable, DebounceHandle] = {}
        self._in_flight: set[asyncio.Task] = set()

    def schedule(self, key: Hashable, factory: TaskFactory, delay: float) -> DebounceHandle:
        """
        (Re)start the timer for key.

        Args:
            key: Identity of the debounced work (e.g. a note id)
            factory: Zero-argument callable returning the coroutine to run
            delay: Seconds the timer must survive before firing

        Returns:
            Handle for the newly installed timer
        """
        self.cancel(key)

        loop = asyncio.get_running_loop()
        handle = DebounceHandle(key, factory)
        handle.timer = loop.call_later(delay, self._fire, handle)
        self._pending[key] = handle
        return handle

    def cancel(self, key: Hashable) -> bool:
        """Defuse the pending timer for key. Returns True if one was pending."""
        handle = self._pending.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        log_with_source(logger, "tasks", "debug", "Debounced task cancelled", key=str(key))
        return True

    def flush(self, key: Hashable) -> asyncio.Task | None:
        """Fire the pending task for key immediately, if there is one."""
        handle = self._pending.get(key)
        if handle is None:
            return None
        if handle.timer is not None:
            handle.timer.cancel()
        return self._fire(handle)

    def pending(self, key: Hashable) -> bool:
        return key in self._pending

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def drain(self) -> None:
        """Wait until every fired task has completed."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _fire(self, handle: DebounceHandle) -> asyncio.Task | None:
        if not handle.active:
            return None
        if self._pending.get(handle.key) is handle:
            del self._pending[handle.key]
        handle.fired = True

        task = asyncio.ensure_future(handle.factory())
        self._in_flight.add(task)
        task.add_done_callback(self._on_done)
        log_with_source(logger, "tasks", "debug", "Debounced task fired", key=str(handle.key))
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_with_source(
                logger,
                "tasks",
                "error",
                "Debounced task failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
