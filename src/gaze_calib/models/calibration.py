from dataclasses import dataclass

from .gaze import GazeSample, clamp_unit

Target = tuple[float, float]


@dataclass(slots=True, frozen=True)
class CalibrationStep:
    """
    One closed calibration step: the target that was displayed and the
    average raw gaze measured while the user looked at it.

    `sample_count` is 0 when nothing was collected and `measured` fell back
    to the last known sample.
    """
    target: Target
    measured: tuple[float, float]
    sample_count: int


@dataclass(slots=True, frozen=True)
class AxisFit:
    """1-D affine transform `target = scale * measured + offset`."""
    scale: float = 1.0
    offset: float = 0.0

    def apply(self, value: float) -> float:
        return clamp_unit(self.scale * value + self.offset)


@dataclass(slots=True, frozen=True)
class AffineCalibration:
    """Independent per-axis affine mapping from raw gaze to screen space."""
    x: AxisFit
    y: AxisFit

    def apply(self, sample: GazeSample) -> GazeSample:
        """Maps a raw sample to a calibrated point, clamped to [0, 1]²."""
        return GazeSample(self.x.apply(sample.x), self.y.apply(sample.y))

    def to_dict(self) -> dict:
        return {
            "x": {"scale": self.x.scale, "offset": self.x.offset},
            "y": {"scale": self.y.scale, "offset": self.y.offset},
        }
