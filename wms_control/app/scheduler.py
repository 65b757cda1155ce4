from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...

    def now(self) -> float: ...


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer

    def now(self) -> float:
        return time.monotonic()


class Debouncer:
    """Coalesces bursts of triggers into one call after a quiet interval."""

    def __init__(self, scheduler: Scheduler, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.delay_seconds = delay_seconds
        self.callback = callback
        self._lock = threading.Lock()
        self._handle: TimerHandle | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._handle = self.scheduler.call_later(self.delay_seconds, lambda: self._fire(generation))

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._handle = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A cancelled threading.Timer can still be mid-flight.
            if generation != self._generation:
                return
            self._handle = None
        self.callback()


class PeriodicTask:
    def __init__(self, scheduler: Scheduler, interval_seconds: float, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.interval_seconds = interval_seconds
        self.callback = callback
        self._lock = threading.Lock()
        self._handle: TimerHandle | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule_locked()

    def cancel(self) -> None:
        with self._lock:
            self._running = False
            if self._handle is not None:
                self._handle.cancel()
            self._handle = None

    def _schedule_locked(self) -> None:
        self._handle = self.scheduler.call_later(self.interval_seconds, self._tick)

    def _tick(self) -> None:
        if not self._running:
            return
        try:
            self.callback()
        finally:
            with self._lock:
                if self._running:
                    self._schedule_locked()
