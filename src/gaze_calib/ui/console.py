import logging
from typing import Optional

from ..models import CalibrationFrame, Frame, RunFrame

logger = logging.getLogger(__name__)


class ConsoleView:
    """
    Headless GazeView that reports progress through logging.

    Calibration frames are logged only when their status line changes. Run
    frames are logged every `run_log_every` frames so a 20 Hz stream stays
    readable.
    """

    def __init__(self, run_log_every: int = 20):
        if run_log_every <= 0:
            raise ValueError("run_log_every must be positive.")
        self._run_log_every = run_log_every
        self._last_status: Optional[str] = None
        self._run_frames = 0
        self.is_open = False

    async def open(self) -> None:
        self.is_open = True

    async def render(self, frame: Frame) -> None:
        if isinstance(frame, CalibrationFrame):
            status = frame.status_text
            if status != self._last_status:
                logger.info("%s at (%.2f, %.2f)", status, *frame.target)
                self._last_status = status
        elif isinstance(frame, RunFrame):
            if self._run_frames % self._run_log_every == 0:
                logger.info(
                    "Gaze (%.3f, %.3f) raw (%.3f, %.3f)",
                    frame.position.x, frame.position.y, frame.raw.x, frame.raw.y,
                )
            self._run_frames += 1

    async def close(self) -> None:
        self.is_open = False
