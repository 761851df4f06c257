"""
Single-slot "latest value" cell for handing results between threads.
"""

import threading
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class LatestValue(Generic[T]):
    """
    Holds only the most recent value published by a producer thread.

    Publishing never blocks on the consumer: a value that has not been
    taken yet is overwritten by the next one. The consumer waits on
    ``wait()`` (the redraw trigger) and then calls ``take()``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._value: Optional[T] = None
        self._pending = False

    def put(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._pending = True
            self._event.set()

    def take(self) -> Tuple[bool, Optional[T]]:
        """Return ``(True, value)`` if a new value is pending, else ``(False, None)``."""
        with self._lock:
            if not self._pending:
                return False, None
            value = self._value
            self._value = None
            self._pending = False
            self._event.clear()
            return True, value

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a value is pending or the timeout expires."""
        return self._event.wait(timeout)

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._pending = False
            self._event.clear()
