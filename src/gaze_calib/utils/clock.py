import time
from typing import Callable

# Returns a monotonic timestamp in milliseconds.
Clock = Callable[[], float]


def monotonic_ms() -> float:
    # Integer ns keeps precision, convert once at the end
    return time.monotonic_ns() / 1_000_000
