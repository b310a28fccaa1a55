from .app import AppSettings, CalibrationSettings, DisplaySettings, SamplerSettings, SessionSettings
from .utils import LoggingConfig

__all__ = [
    "AppSettings",
    "CalibrationSettings",
    "DisplaySettings",
    "SamplerSettings",
    "SessionSettings",
    "LoggingConfig",
]
