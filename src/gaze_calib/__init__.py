from .core import CalibrationSession, SessionPhase, SessionRunner, fit_calibration
from .models import AffineCalibration, GazeSample

__all__ = [
    "CalibrationSession",
    "SessionPhase",
    "SessionRunner",
    "fit_calibration",
    "AffineCalibration",
    "GazeSample",
]
