"""
Cancellable timers on the asyncio event loop.

A TaskScope owns every pending timer and every tick task it started, so a
single ``cancel_all()`` leaves nothing behind that could touch torn-down
state. Callbacks may be plain functions or coroutine functions; coroutine
callbacks run as tasks owned by the handle that fired them.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledHandle:
    """One-shot or fixed-rate repeating timer."""

    def __init__(
        self,
        scope: "TaskScope",
        callback: Callable[..., Any],
        args: tuple[Any, ...],
        delay: float,
        period: Optional[float] = None,
        name: str = "",
    ):
        self._scope = scope
        self._callback = callback
        self._args = args
        self._period = period
        self._name = name or getattr(callback, "__name__", "timer")
        self._loop = asyncio.get_running_loop()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._cancelled = False
        self._fired = 0
        self._start = self._loop.time() + delay
        self._arm()

    def __repr__(self) -> str:
        kind = f"every {self._period}s" if self._period is not None else "once"
        return f"ScheduledHandle({self._name!r}, {kind}, fired={self._fired}, cancelled={self._cancelled})"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> int:
        return self._fired

    @property
    def repeating(self) -> bool:
        return self._period is not None

    @property
    def done(self) -> bool:
        if self._cancelled:
            return True
        return not self.repeating and self._fired > 0 and not self._tasks

    def _arm(self) -> None:
        # Fixed rate: the n-th tick is due at start + n * period, regardless
        # of how long earlier ticks took.
        due = self._start + (self._fired * self._period if self._period else 0.0)
        self._timer = self._loop.call_at(due, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._cancelled:
            return
        self._fired += 1
        if self._period is not None:
            self._arm()

        if inspect.iscoroutinefunction(self._callback):
            task = self._loop.create_task(self._callback(*self._args))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
            return
        try:
            self._callback(*self._args)
        except Exception:
            logger.exception(f"Timer callback {self._name} failed")
        if self._period is None:
            self._scope._discard(self)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if self._period is None and not self._tasks:
            self._scope._discard(self)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Timer task {self._name} failed: {exc!r}")

    def cancel(self) -> None:
        """Stop future ticks and cancel in-flight tick tasks.

        A tick task that cancels its own handle is left to finish its
        current step.
        """
        if self._cancelled:
            return
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None  # No running loop
        for task in list(self._tasks):
            if task is not current:
                task.cancel()
        self._scope._discard(self)


class TaskScope:
    def __init__(self, name: str = "scope"):
        self._name = name
        self._handles: set[ScheduledHandle] = set()

    def __len__(self) -> int:
        return len(self._handles)

    @property
    def active(self) -> bool:
        return bool(self._handles)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        handle = ScheduledHandle(self, callback, args, delay=delay)
        self._handles.add(handle)
        return handle

    def call_every(
        self, period: float, callback: Callable[..., Any], *args: Any, immediate: bool = True,
    ) -> ScheduledHandle:
        """Run ``callback`` every ``period`` seconds, first tick now if ``immediate``."""
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        handle = ScheduledHandle(
            self, callback, args, delay=0.0 if immediate else period, period=period,
        )
        self._handles.add(handle)
        return handle

    def cancel_all(self) -> int:
        """Cancel every pending handle. Returns how many were cancelled."""
        handles = list(self._handles)
        for handle in handles:
            handle.cancel()
        self._handles.clear()
        if handles:
            logger.debug(f"{self._name}: cancelled {len(handles)} timer(s)")
        return len(handles)

    def _discard(self, handle: ScheduledHandle) -> None:
        self._handles.discard(handle)
