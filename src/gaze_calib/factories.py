from typing import Optional

from .acquisition import DummySampler, ZMQSampler
from .configs import AppSettings
from .core import CalibrationSession, GazeSampler, GazeView, SessionRunner
from .utils.clock import Clock, monotonic_ms


def create_sampler(settings: AppSettings) -> GazeSampler:
    """Creates the gaze sampler selected in the settings."""
    if settings.sampler.kind == "dummy":
        return DummySampler(failure_rate=settings.sampler.dummy_failure_rate)

    return ZMQSampler(
        endpoint=settings.sampler.endpoint,
        # A reply later than one tick is useless, the next poll supersedes it
        timeout_s=settings.session.poll_interval_ms / 1000,
    )


def create_session(settings: AppSettings, clock: Clock = monotonic_ms) -> CalibrationSession:
    cfg = settings.session
    return CalibrationSession(
        targets=settings.calibration.points_to_calibrate,
        settle_window_ms=cfg.settle_window_ms,
        step_window_ms=cfg.step_window_ms,
        clock=clock,
        epsilon=cfg.degenerate_epsilon,
    )


def create_runner(
    settings: AppSettings,
    view: GazeView,
    sampler: Optional[GazeSampler] = None,
    clock: Clock = monotonic_ms,
) -> SessionRunner:
    """Wires a fresh session, sampler and view into a runner."""
    return SessionRunner(
        session=create_session(settings, clock),
        sampler=sampler if sampler is not None else create_sampler(settings),
        view=view,
        interval_s=settings.session.poll_interval_ms / 1000,
        poll_timeout_s=settings.session.poll_timeout_ms / 1000,
        report_dir=settings.data_dir if settings.save_calibration else None,
    )
