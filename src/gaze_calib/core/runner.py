import asyncio
import datetime
import json
import logging
from pathlib import Path
from typing import Optional

from .protocols import GazeSampler, GazeView
from .session import CalibrationSession
from .state import SessionPhase
from ..acquisition import SamplerUnavailable
from ..models import GazeSample
from ..utils.logging import ThrottledLogger

logger = logging.getLogger(__name__)


class SessionRunner:
    """
    Drives a CalibrationSession at a fixed cadence: Sampler -> Session -> View.

    Polling is fire-and-continue. Only one poll is in flight at a time and a
    tick waits at most `poll_timeout_s` for it; a slow poll stays in flight and
    is picked up by a later tick while the current one proceeds on stale data.
    """

    def __init__(
        self,
        session: CalibrationSession,
        sampler: GazeSampler,
        view: GazeView,
        interval_s: float = 0.05,
        poll_timeout_s: float = 0.04,
        report_dir: Optional[Path] = None,
    ):
        """
        Args:
            session: The state machine to drive. Started by the runner.
            sampler: Source of raw gaze samples.
            view: Receives one frame per tick.
            interval_s: Tick period.
            poll_timeout_s: Longest a tick waits for the in-flight poll.
            report_dir: Where to write calibration_result.json. None disables it.
        """
        if interval_s <= 0:
            raise ValueError("interval_s must be positive.")
        if poll_timeout_s < 0:
            raise ValueError("poll_timeout_s must not be negative.")

        self.session = session
        self.sampler = sampler
        self.view = view
        self._interval_s = interval_s
        self._poll_timeout_s = poll_timeout_s
        self._report_dir = report_dir

        self._stop_event = asyncio.Event()
        self._poll_task: Optional[asyncio.Task] = None
        self._failure_logger = ThrottledLogger(logger, interval_sec=5.0)
        self.ticks = 0

    @property
    def report_path(self) -> Optional[Path]:
        if self._report_dir is None:
            return None
        return self._report_dir / "calibration_result.json"

    async def run(self) -> None:
        """Runs the session until `stop` is called."""
        logger.info("Starting SessionRunner...")
        self._stop_event.clear()
        await self.sampler.start()
        await self.view.open()
        self.session.start()

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        try:
            while not self._stop_event.is_set():
                # Absolute deadlines so slow ticks don't accumulate drift
                self.ticks += 1
                target_time = start_time + self.ticks * self._interval_s
                sleep_duration = target_time - loop.time()
                if sleep_duration > 0:
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=sleep_duration)
                        break
                    except asyncio.TimeoutError:
                        pass

                await self.tick()

        except asyncio.CancelledError:
            logger.info("Runner loop cancelled.")
            raise
        finally:
            await self._shutdown()

    async def tick(self) -> None:
        """One timer tick: harvest a sample, advance the session, render."""
        was_calibrating = self.session.phase is SessionPhase.CALIBRATING

        sample = await self._poll()
        frame = self.session.tick(sample)

        if was_calibrating and self.session.phase is SessionPhase.RUNNING:
            await self._save_report()

        await self.view.render(frame)

    def stop(self) -> None:
        """Signals the loop to exit after the current tick."""
        self._stop_event.set()

    async def _poll(self) -> Optional[GazeSample]:
        if self._poll_task is None:
            self._poll_task = asyncio.create_task(self.sampler.poll_gaze())

        done, _ = await asyncio.wait({self._poll_task}, timeout=self._poll_timeout_s)
        if not done:
            # Still in flight; this tick uses stale data
            return None

        task, self._poll_task = self._poll_task, None
        try:
            return task.result()
        except SamplerUnavailable as e:
            self._failure_logger.warning("Gaze sampler unavailable: %s", e)
        except Exception as e:
            self._failure_logger.warning("Gaze sampler error: %r", e)
        return None

    async def _save_report(self) -> None:
        path = self.report_path
        if path is None:
            return

        calibration = self.session.calibration
        report = calibration.to_dict()
        report["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
        report["points"] = [
            {
                "target": {"x": step.target[0], "y": step.target[1]},
                "measured": {"x": step.measured[0], "y": step.measured[1]},
                "sample_count": step.sample_count,
            }
            for step in self.session.steps
        ]

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(report, indent=2), encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
            logger.info(f"Calibration report saved to {path}")
        except OSError:
            logger.exception(f"Failed to save calibration report to {path}")

    async def _shutdown(self) -> None:
        logger.info("Stopping SessionRunner...")
        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            except Exception:
                # Its outcome no longer matters
                logger.debug("In-flight poll failed during shutdown.", exc_info=True)
            self._poll_task = None

        try:
            await self.sampler.close()
        finally:
            await self.view.close()
        logger.info("SessionRunner stopped.")
