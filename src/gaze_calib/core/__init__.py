from .engine import fit_axis, fit_calibration, apply_calibration
from .protocols import GazeSampler, GazeView
from .runner import SessionRunner
from .session import CalibrationSession
from .state import SessionPhase

__all__ = [
    "fit_axis",
    "fit_calibration",
    "apply_calibration",
    "GazeSampler",
    "GazeView",
    "SessionRunner",
    "CalibrationSession",
    "SessionPhase",
]
