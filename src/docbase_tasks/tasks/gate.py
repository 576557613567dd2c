"""Single-flight admission control for job sessions."""

from __future__ import annotations

import threading


class ConcurrencyGate:
    """At most one active job per orchestrator."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._held = False

    def try_acquire(self) -> bool:
        with self._lock:
            if self._held:
                return False
            self._held = True
            return True

    def release(self) -> None:
        with self._lock:
            self._held = False

    def is_active(self) -> bool:
        with self._lock:
            return self._held
