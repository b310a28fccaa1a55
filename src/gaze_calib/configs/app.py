import logging
from pathlib import Path
from importlib.metadata import version
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, PositiveInt, PositiveFloat, field_validator, model_validator, Field

from .utils import LoggingConfig

logger = logging.getLogger(__name__)


class SessionSettings(BaseModel):
    """Timing of the calibration session. All durations are in milliseconds."""
    poll_interval_ms: PositiveInt = Field(50, description="Timer period; 50 ms is 20 Hz.")
    poll_timeout_ms: int = Field(40, ge=0, description="Longest a tick waits for the sampler.")
    settle_window_ms: int = Field(1000, ge=0, description="Samples ignored at the start of each target.")
    step_window_ms: PositiveInt = Field(5000, description="How long each target is shown.")
    degenerate_epsilon: PositiveFloat = Field(1e-9, description="Variance below which an axis keeps scale 1.0.")

    @model_validator(mode='after')
    def validate_windows(self) -> "SessionSettings":
        if self.settle_window_ms >= self.step_window_ms:
            raise ValueError('Settle window must be shorter than the step window.')
        if self.poll_timeout_ms > self.poll_interval_ms:
            raise ValueError('Poll timeout must not exceed the poll interval.')
        return self


class CalibrationSettings(BaseModel):
    """Settings for the calibration procedure."""
    points_to_calibrate: list[tuple[float, float]] = Field(
        default=[
            (0.5, 0.5),  # center
            (0.9, 0.5),  # middle right
            (0.9, 0.1),  # top right
            (0.5, 0.1),  # top middle
            (0.1, 0.1),  # top left
            (0.1, 0.5),  # middle left
            (0.1, 0.9),  # bottom left
            (0.5, 0.9),  # bottom middle
            (0.9, 0.9),  # bottom right
        ],
        min_length=1,
        description="Ordered normalized (0-1) screen coordinates to use as calibration targets."
    )

    @field_validator('points_to_calibrate')
    @classmethod
    def validate_normalized(cls, points: list[tuple[float, float]]) -> list[tuple[float, float]]:
        for x, y in points:
            if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
                raise ValueError(f'Calibration point ({x}, {y}) is outside [0, 1].')
        return points


class SamplerSettings(BaseModel):
    kind: Literal["dummy", "zmq"] = "zmq"
    endpoint: str = "tcp://localhost:5556"
    dummy_failure_rate: float = Field(0.05, ge=0.0, le=1.0)


class DisplaySettings(BaseModel):
    """Where frames are rendered. Pixel size is detected when left unset."""
    headless: bool = False
    width_px: Optional[PositiveInt] = None
    height_px: Optional[PositiveInt] = None


class AppSettings(BaseSettings):
    """
    Main application settings, loaded from environment variables and defaults.
    """
    # Data
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "calibrations", description="Path to directory where calibration reports are stored.")
    save_calibration: bool = True

    # Session
    session: SessionSettings = Field(default_factory=SessionSettings)
    calibration: CalibrationSettings = Field(default_factory=CalibrationSettings)

    # Collaborators
    sampler: SamplerSettings = Field(default_factory=SamplerSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    __version__: str = version("gaze-calib")

    model_config = SettingsConfigDict(
        env_prefix="GAZE__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )
