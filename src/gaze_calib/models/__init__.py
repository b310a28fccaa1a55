from .gaze import GazeSample, CENTER_SAMPLE, clamp_unit
from .calibration import Target, CalibrationStep, AxisFit, AffineCalibration
from .frames import CalibrationFrame, RunFrame, Frame

__all__ = [
    "GazeSample",
    "CENTER_SAMPLE",
    "clamp_unit",
    "Target",
    "CalibrationStep",
    "AxisFit",
    "AffineCalibration",
    "CalibrationFrame",
    "RunFrame",
    "Frame",
]
