from dataclasses import dataclass
from typing import Union

from .calibration import Target
from .gaze import GazeSample


@dataclass(slots=True, frozen=True)
class CalibrationFrame:
    """What the display shows while a calibration target is active."""
    target: Target
    step_number: int
    total_steps: int
    seconds_remaining: int
    is_collecting: bool

    @property
    def status_text(self) -> str:
        state = "collecting" if self.is_collecting else "get ready"
        return f"Calibration {self.step_number}/{self.total_steps} • {state} • {self.seconds_remaining}s"


@dataclass(slots=True, frozen=True)
class RunFrame:
    """What the display shows once calibrated: the mapped gaze point."""
    position: GazeSample
    raw: GazeSample


Frame = Union[CalibrationFrame, RunFrame]
