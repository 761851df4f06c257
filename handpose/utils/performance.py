"""
Frame rate tracking for the preview overlay.
"""

import time
import threading
from collections import deque
from typing import Callable, Optional


class FPSCounter:
    """
    Rolling-window frame rate of processed frames.

    Safe to tick from the capture thread and read from the UI thread.

    Example:
        >>> counter = FPSCounter(window_size=30)
        >>> counter.tick()
        >>> print(f"{counter.fps:.1f} fps")
    """

    def __init__(self, window_size: int = 30, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.perf_counter
        self._ticks: deque = deque(maxlen=window_size)
        self._total = 0
        self._lock = threading.Lock()

    def tick(self) -> None:
        """Record one processed frame."""
        with self._lock:
            self._ticks.append(self._clock())
            self._total += 1

    def reset(self) -> None:
        with self._lock:
            self._ticks.clear()
            self._total = 0

    @property
    def fps(self) -> float:
        """Frames per second over the current window."""
        with self._lock:
            if len(self._ticks) < 2:
                return 0.0
            span = self._ticks[-1] - self._ticks[0]
            return (len(self._ticks) - 1) / span if span > 0 else 0.0

    @property
    def total_frames(self) -> int:
        with self._lock:
            return self._total
