from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from planner.config import settings


class Debouncer:
    """
    Coalesces bursts of calls: only the last call within ``wait_ms`` runs.

    Each call restarts the timer with the newest arguments. ``flush()`` runs a
    pending call immediately, ``cancel()`` drops it.
    """

    def __init__(self, fn: Callable[..., Any], wait_ms: Optional[int] = None) -> None:
        self.fn = fn
        self.wait_ms = settings.debounce_ms if wait_ms is None else wait_ms
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple] = None
        self._generation = 0
        self._lock = threading.Lock()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.wait_ms / 1000, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def _take(self, generation: Optional[int] = None) -> Optional[tuple]:
        with self._lock:
            # a timer that lost the race against a newer call must not fire
            if generation is not None and generation != self._generation:
                return None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending, self._pending = self._pending, None
            return pending

    def _fire(self, generation: Optional[int] = None) -> None:
        pending = self._take(generation)
        if pending is not None:
            args, kwargs = pending
            self.fn(*args, **kwargs)

    def flush(self) -> None:
        self._fire()

    def cancel(self) -> None:
        self._take()
