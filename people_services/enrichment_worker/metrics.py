"""
Processed-records counter shared between the worker loop and the HTTP app
"""

import threading


class ProcessedCounter:
    """
    Monotonic in-memory counter of successfully enriched records

    Advisory only; it resets on restart. The lock keeps increments exact
    when the status app is served from another thread.
    """

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value
