import time
import logging
from typing import Callable


class ThrottledLogger:
    """
    Wraps a logger so a message repeated at poll rate is emitted at most once
    per interval, prefixed with how many times it occurred since the last emit.
    """
    def __init__(
        self,
        logger: logging.Logger,
        interval_sec: float = 5.0,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._time = time_func
        self._last_log_time: float | None = None
        self._counter = 0

    @property
    def suppressed(self) -> int:
        """Occurrences counted but not yet emitted."""
        return self._counter

    def warning(self, message: str, *args, **kwargs) -> bool:
        """Counts the occurrence and logs it if the interval has elapsed. Returns True if emitted."""
        self._counter += 1
        now = self._time()

        if self._last_log_time is None or now - self._last_log_time >= self._interval:
            self._logger.warning("[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0
            return True
        return False
