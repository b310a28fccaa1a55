from .clock import Clock, monotonic_ms
from .logging import ThrottledLogger

__all__ = ["Clock", "monotonic_ms", "ThrottledLogger"]
