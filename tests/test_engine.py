import itertools
import statistics

import pytest

from gaze_calib.core.engine import fit_axis, fit_calibration, apply_calibration
from gaze_calib.models import AffineCalibration, AxisFit, CalibrationStep, GazeSample

from conftest import DEFAULT_TARGETS


def make_steps(measured, targets=DEFAULT_TARGETS):
    return [CalibrationStep(target=t, measured=m, sample_count=80) for t, m in zip(targets, measured)]


def test_fit_axis_matches_reference_ols():
    measured = [0.42, 0.61, 0.63, 0.40, 0.22, 0.25, 0.21, 0.44, 0.66]
    target = [0.5, 0.9, 0.9, 0.5, 0.1, 0.1, 0.1, 0.5, 0.9]

    fit = fit_axis(measured, target)
    slope, intercept = statistics.linear_regression(measured, target)

    assert fit.scale == pytest.approx(slope, rel=1e-9)
    assert fit.offset == pytest.approx(intercept, abs=1e-9)


def test_fit_axis_minimizes_squared_error():
    measured = [0.3, 0.55, 0.58, 0.31, 0.12, 0.1, 0.15, 0.33, 0.6]
    target = [0.5, 0.9, 0.9, 0.5, 0.1, 0.1, 0.1, 0.5, 0.9]
    fit = fit_axis(measured, target)

    def sse(a, b):
        return sum((t - (a * m + b)) ** 2 for m, t in zip(measured, target))

    best = sse(fit.scale, fit.offset)
    for da, db in itertools.product((-0.01, 0.0, 0.01), repeat=2):
        assert best <= sse(fit.scale + da, fit.offset + db) + 1e-12


def test_fit_axis_recovers_exact_affine_relation():
    target = [0.5, 0.9, 0.9, 0.5, 0.1, 0.1, 0.1, 0.5, 0.9]
    measured = [0.8 * t + 0.1 for t in target]

    fit = fit_axis(measured, target)

    assert fit.scale == pytest.approx(1.25)
    assert fit.offset == pytest.approx(-0.125)


def test_degenerate_axis_uses_identity_scale(caplog):
    target = [0.5, 0.9, 0.9, 0.5, 0.1, 0.1, 0.1, 0.5, 0.9]
    measured = [0.37] * 9

    with caplog.at_level("WARNING"):
        fit = fit_axis(measured, target, axis="x")

    assert fit.scale == 1.0
    assert fit.offset == pytest.approx(statistics.fmean(target) - 0.37)
    assert "Degenerate" in caplog.text


def test_fit_is_bit_identical_on_rerun():
    measured = [(0.48, 0.52), (0.71, 0.50), (0.69, 0.31), (0.47, 0.30), (0.27, 0.33),
                (0.30, 0.49), (0.26, 0.72), (0.50, 0.70), (0.72, 0.69)]
    steps = make_steps(measured)

    assert fit_calibration(steps) == fit_calibration(steps)


def test_fit_calibration_axes_are_independent():
    # y measurements are shuffled relative to x; x fit must not change
    xs = [0.45, 0.7, 0.7, 0.45, 0.2, 0.2, 0.2, 0.45, 0.7]
    steps_a = make_steps([(x, 0.5) for x in xs])
    steps_b = make_steps([(x, y) for x, y in zip(xs, [0.1, 0.9, 0.3, 0.5, 0.2, 0.8, 0.4, 0.6, 0.7])])

    assert fit_calibration(steps_a).x == fit_calibration(steps_b).x


def test_end_to_end_two_varying_points():
    # Every step measured on target except (0.9, 0.9), which read (0.7, 0.7)
    measured = list(DEFAULT_TARGETS)
    measured[-1] = (0.7, 0.7)
    steps = make_steps(measured)

    calibration = fit_calibration(steps)
    xs = [m[0] for m in measured]
    slope, intercept = statistics.linear_regression(xs, [t[0] for t in DEFAULT_TARGETS])

    assert calibration.x.scale == pytest.approx(slope)
    assert calibration.x.offset == pytest.approx(intercept, abs=1e-12)
    assert calibration.y.scale == pytest.approx(calibration.x.scale)

    center = calibration.apply(GazeSample(0.5, 0.5))
    assert center.x == pytest.approx(0.5, abs=0.05)
    assert center.y == pytest.approx(0.5, abs=0.05)

    corner = calibration.apply(GazeSample(0.7, 0.7))
    # Pulled toward the true target (0.9, 0.9)
    assert 0.7 < corner.x < 0.9
    assert 0.7 < corner.y < 0.9


def test_fit_rejects_empty_or_mismatched_input():
    with pytest.raises(ValueError):
        fit_axis([], [])
    with pytest.raises(ValueError):
        fit_axis([0.1, 0.2], [0.1])


def test_apply_clamps_to_unit_square():
    calibration = AffineCalibration(x=AxisFit(3.0, -1.0), y=AxisFit(-2.5, 1.8))
    grid = [i / 10 for i in range(11)]

    for nx, ny in itertools.product(grid, grid):
        point = apply_calibration(calibration, GazeSample(nx, ny))
        assert 0.0 <= point.x <= 1.0
        assert 0.0 <= point.y <= 1.0

    assert calibration.apply(GazeSample(0.0, 0.0)) == GazeSample(0.0, 1.0)
    assert calibration.apply(GazeSample(1.0, 1.0)) == GazeSample(1.0, 0.0)


def test_apply_is_affine_inside_range():
    calibration = AffineCalibration(x=AxisFit(1.25, -0.125), y=AxisFit(2.0, -0.5))
    point = calibration.apply(GazeSample(0.5, 0.4))

    assert point.x == pytest.approx(0.5)
    assert point.y == pytest.approx(0.3)


def test_calibration_to_dict():
    calibration = AffineCalibration(x=AxisFit(1.5, -0.2), y=AxisFit(0.9, 0.05))

    assert calibration.to_dict() == {
        "x": {"scale": 1.5, "offset": -0.2},
        "y": {"scale": 0.9, "offset": 0.05},
    }


def _assert_grid_clamped(calibration):
    grid = [i / 20 for i in range(21)]
    for nx, ny in itertools.product(grid, grid):
        point = calibration.apply(GazeSample(nx, ny))
        assert 0.0 <= point.x <= 1.0
        assert 0.0 <= point.y <= 1.0


@pytest.mark.parametrize("measured", [
    # One point read short of its target
    [t if t != (0.9, 0.9) else (0.7, 0.7) for t in DEFAULT_TARGETS],
    # Compressed around the center: steep fitted scale pushes the edges out of range
    [(0.4 + 0.2 * tx, 0.45 + 0.1 * ty) for tx, ty in DEFAULT_TARGETS],
    # Inverted x axis, as from an unmirrored camera
    [(1.0 - tx, ty) for tx, ty in DEFAULT_TARGETS],
    # No spread on y: identity scale with an offset
    [(tx, 0.8) for tx, _ in DEFAULT_TARGETS],
])
def test_fitted_calibrations_stay_in_unit_square(measured):
    calibration = fit_calibration(make_steps(measured))

    _assert_grid_clamped(calibration)


def test_steep_fit_reaches_both_clamp_bounds():
    measured = [(0.4 + 0.2 * tx, 0.45 + 0.1 * ty) for tx, ty in DEFAULT_TARGETS]
    calibration = fit_calibration(make_steps(measured))

    assert calibration.x.scale == pytest.approx(5.0)
    assert calibration.y.scale == pytest.approx(10.0)
    assert calibration.apply(GazeSample(0.0, 0.0)) == GazeSample(0.0, 0.0)
    assert calibration.apply(GazeSample(1.0, 1.0)) == GazeSample(1.0, 1.0)


def test_degenerate_fit_clamps_offset(caplog):
    calibration = fit_calibration(make_steps([(tx, 0.8) for tx, _ in DEFAULT_TARGETS]))

    assert calibration.y.scale == 1.0
    assert calibration.y.offset == pytest.approx(-0.3)
    assert calibration.apply(GazeSample(0.5, 0.1)).y == 0.0
