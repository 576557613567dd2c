"""Cancellable interval timers driving the status poller."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class IntervalTimer(Protocol):
    """Start/stop timer invoking a callback at a fixed cadence."""

    def start(self, callback: TickCallback) -> None:
        """Begin ticking; the first tick fires immediately."""
        raise NotImplementedError

    def stop(self) -> None:
        """Stop ticking. Safe to call more than once and from inside a tick."""
        raise NotImplementedError

    @property
    def running(self) -> bool:
        raise NotImplementedError


class ThreadingIntervalTimer:
    """Runs ticks on one daemon thread, waiting on an event between them.

    Ticks run sequentially on the timer thread, so a slow tick delays the
    next one instead of overlapping it.
    """

    def __init__(self, interval_seconds: float, *, name: str = "docbase-poller") -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.interval_seconds = interval_seconds
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self, callback: TickCallback) -> None:
        if self._thread is not None:
            raise RuntimeError("Timer already started")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(callback,),
            daemon=True,
            name=self._name,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval_seconds * 2, 1.0))

    def _loop(self, callback: TickCallback) -> None:
        while not self._stop.is_set():
            try:
                callback()
            except Exception:
                logger.exception("Timer tick failed")
            if self._stop.wait(timeout=self.interval_seconds):
                return
