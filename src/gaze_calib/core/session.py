import logging
from typing import Optional, Sequence

from .engine import DEFAULT_EPSILON, fit_calibration
from .state import SessionPhase
from ..models import (
    CENTER_SAMPLE,
    AffineCalibration,
    CalibrationFrame,
    CalibrationStep,
    Frame,
    GazeSample,
    RunFrame,
    Target,
)
from ..utils.clock import Clock, monotonic_ms

logger = logging.getLogger(__name__)


class CalibrationSession:
    """
    Finite-state machine for one calibration-then-run session.

    Each call to `tick` consumes at most one fresh sample and returns the frame
    the display should show. Time comes from the injected `clock` (milliseconds),
    so the whole sequence can be replayed deterministically.

    While CALIBRATING, every target is shown for `step_window_ms`. Samples that
    arrive during the first `settle_window_ms` are ignored to let the eyes land
    on the new target; the rest are averaged into a `CalibrationStep`. After the
    last target the calibration is fitted and the session moves to RUNNING for
    good.
    """

    def __init__(
        self,
        targets: Sequence[Target],
        settle_window_ms: float = 1000.0,
        step_window_ms: float = 5000.0,
        clock: Clock = monotonic_ms,
        epsilon: float = DEFAULT_EPSILON,
    ):
        if not targets:
            raise ValueError("At least one calibration target is required.")
        if not 0 <= settle_window_ms < step_window_ms:
            raise ValueError("settle_window_ms must be in [0, step_window_ms).")

        self._targets: tuple[Target, ...] = tuple(targets)
        self._settle_ms = settle_window_ms
        self._step_ms = step_window_ms
        self._clock = clock
        self._epsilon = epsilon

        self._phase = SessionPhase.CALIBRATING
        self._index = 0
        self._step_origin: Optional[float] = None
        self._buffer: list[GazeSample] = []
        self._steps: list[CalibrationStep] = []
        self._last_sample: GazeSample = CENTER_SAMPLE
        self._calibration: Optional[AffineCalibration] = None

    # --- State ---

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def targets(self) -> tuple[Target, ...]:
        return self._targets

    @property
    def step_index(self) -> int:
        return self._index

    @property
    def steps(self) -> tuple[CalibrationStep, ...]:
        return tuple(self._steps)

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    @property
    def last_sample(self) -> GazeSample:
        return self._last_sample

    @property
    def calibration(self) -> Optional[AffineCalibration]:
        """The fitted calibration, or None until every target was processed."""
        return self._calibration

    @property
    def is_started(self) -> bool:
        return self._step_origin is not None

    # --- Transitions ---

    def start(self) -> None:
        """Starts timing the first calibration target."""
        if self.is_started:
            logger.warning("Session already started.")
            return
        self._step_origin = self._clock()
        logger.info("Calibration started with %d targets.", len(self._targets))

    def tick(self, sample: Optional[GazeSample]) -> Frame:
        """
        Advances the session by one timer tick.

        Args:
            sample: The freshly polled sample, or None if the poll failed or is
                    still in flight. None keeps the previous sample; timing
                    advances regardless.
        """
        if self._step_origin is None:
            raise RuntimeError("Session must be started before ticking.")

        now = self._clock()
        if sample is not None:
            self._last_sample = sample

        if self._phase is SessionPhase.CALIBRATING:
            elapsed = now - self._step_origin

            if sample is not None and self._settle_ms <= elapsed < self._step_ms:
                self._buffer.append(sample)

            if elapsed >= self._step_ms:
                self._close_step(now)

        if self._phase is SessionPhase.RUNNING:
            return self._run_frame()
        return self._calibration_frame(now)

    def _close_step(self, now: float) -> None:
        measured = self._average_buffer()
        step = CalibrationStep(
            target=self._targets[self._index],
            measured=measured.as_tuple(),
            sample_count=len(self._buffer),
        )
        self._steps.append(step)

        if step.sample_count == 0:
            logger.warning(
                "No samples collected for target %d %s; using last known sample %s.",
                self._index + 1, step.target, step.measured,
            )
        else:
            logger.debug(
                "Step %d/%d closed: target=%s measured=(%.4f, %.4f) from %d samples.",
                self._index + 1, len(self._targets), step.target,
                step.measured[0], step.measured[1], step.sample_count,
            )

        self._buffer.clear()
        self._index += 1
        self._step_origin = now

        if self._index >= len(self._targets):
            self._finish()

    def _finish(self) -> None:
        if len(self._steps) != len(self._targets):
            raise RuntimeError(
                f"Cannot fit calibration: {len(self._steps)} steps for {len(self._targets)} targets."
            )
        self._calibration = fit_calibration(self._steps, self._epsilon)
        self._phase = SessionPhase.RUNNING
        logger.info("Calibration complete, session is running.")

    def _average_buffer(self) -> GazeSample:
        if not self._buffer:
            return self._last_sample
        n = len(self._buffer)
        return GazeSample(
            sum(s.x for s in self._buffer) / n,
            sum(s.y for s in self._buffer) / n,
        )

    # --- Frames ---

    def _calibration_frame(self, now: float) -> CalibrationFrame:
        elapsed = now - self._step_origin
        # Whole seconds, counting down to 0 over the step.
        remaining = int(self._step_ms // 1000) - int(elapsed // 1000)
        return CalibrationFrame(
            target=self._targets[self._index],
            step_number=self._index + 1,
            total_steps=len(self._targets),
            seconds_remaining=max(0, remaining),
            is_collecting=elapsed >= self._settle_ms,
        )

    def _run_frame(self) -> RunFrame:
        return RunFrame(
            position=self._calibration.apply(self._last_sample),
            raw=self._last_sample,
        )
