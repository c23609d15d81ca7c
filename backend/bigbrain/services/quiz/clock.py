"""Question clock.

Remaining time is a pure function of the stored start timestamp, the
question duration and the current wall-clock time, so every poller computes
the same value without coordination. Nothing here stores remaining time.
"""

import time


def now() -> float:
    return time.time()


def remaining(started_at: float, duration: float, at: float) -> float:
    return max(0.0, duration - (at - started_at))


def elapsed(started_at: float, duration: float, at: float) -> float:
    """Seconds since ``started_at``, clamped to [0, duration]."""
    return min(float(duration), max(0.0, at - started_at))


def is_open(started_at, duration: float, at: float) -> bool:
    if started_at is None:
        return False
    return remaining(started_at, duration, at) > 0
