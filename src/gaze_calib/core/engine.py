import logging
from typing import Sequence

from ..models import AffineCalibration, AxisFit, CalibrationStep, GazeSample

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-9


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def fit_axis(
    measured: Sequence[float],
    target: Sequence[float],
    epsilon: float = DEFAULT_EPSILON,
    axis: str = "?",
) -> AxisFit:
    """
    Ordinary least squares fit of `target ≈ scale * measured + offset`.

    If the measured values have no spread (variance below `epsilon`) the
    scale falls back to 1.0 and only the offset is fitted.

    Raises:
        ValueError: if the sequences are empty or of different lengths.
    """
    if not measured:
        raise ValueError("Cannot fit an axis without any samples.")
    if len(measured) != len(target):
        raise ValueError(
            f"Measured and target lengths differ ({len(measured)} != {len(target)})."
        )

    m = _mean(measured)
    t = _mean(target)

    var = 0.0
    cov = 0.0
    for mi, ti in zip(measured, target):
        var += (mi - m) * (mi - m)
        cov += (mi - m) * (ti - t)

    if abs(var) < epsilon:
        logger.warning(
            "Degenerate calibration data on %s axis (variance %.3g). Using identity scale.",
            axis, var,
        )
        scale = 1.0
    else:
        scale = cov / var

    return AxisFit(scale=scale, offset=t - scale * m)


def fit_calibration(
    steps: Sequence[CalibrationStep],
    epsilon: float = DEFAULT_EPSILON,
) -> AffineCalibration:
    """Fits both axes independently from the closed calibration steps."""
    calibration = AffineCalibration(
        x=fit_axis(
            [s.measured[0] for s in steps], [s.target[0] for s in steps], epsilon, axis="x"
        ),
        y=fit_axis(
            [s.measured[1] for s in steps], [s.target[1] for s in steps], epsilon, axis="y"
        ),
    )
    logger.info(
        "Calibration fitted from %d points: x=(%.4f, %.4f) y=(%.4f, %.4f)",
        len(steps),
        calibration.x.scale, calibration.x.offset,
        calibration.y.scale, calibration.y.offset,
    )
    return calibration


def apply_calibration(calibration: AffineCalibration, sample: GazeSample) -> GazeSample:
    return calibration.apply(sample)
