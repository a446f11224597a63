"""Utility helpers for streamfuse."""

import itertools
import time


class Timer:
    """High-resolution timer for measuring optimization runs."""

    def __init__(self):
        self.start_ns = 0
        self.end_ns = 0

    def __enter__(self):
        self.start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *exc):
        self.end_ns = time.perf_counter_ns()

    @property
    def elapsed_ns(self) -> int:
        return self.end_ns - self.start_ns

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_ns / 1_000_000.0


class OrdinalClock:
    """
    Monotonic event counter used as the fusion timestamp source.

    Each call returns the next ordinal, starting at ``start``:

        >>> clock = OrdinalClock()
        >>> clock(), clock(), clock()
        (0, 1, 2)
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)

    def __call__(self) -> int:
        return next(self._counter)


def format_ns(ns: float) -> str:
    """Format nanoseconds into a human-readable string."""
    if ns < 1_000:
        return f"{ns:.0f} ns"
    elif ns < 1_000_000:
        return f"{ns / 1_000:.1f} µs"
    elif ns < 1_000_000_000:
        return f"{ns / 1_000_000:.2f} ms"
    else:
        return f"{ns / 1_000_000_000:.3f} s"
