import asyncio
import logging
import math
import random
import time
from typing import Callable, Optional

from ..models import GazeSample, clamp_unit
from .base import SamplerUnavailable

logger = logging.getLogger(__name__)


class DummySampler:
    """
    A GazeSampler that simulates a webcam gaze estimate for development.

    The simulated gaze travels a circular path on screen. What the sampler
    reports is that path seen through a fixed per-axis distortion (the kind of
    compressed, off-center range a webcam estimate has), plus Gaussian jitter.
    A fraction of polls can be made to fail to exercise the stale-data path.
    """

    def __init__(
        self,
        radius: float = 0.35,
        center: tuple[float, float] = (0.5, 0.5),
        speed: float = 0.1,
        distortion: tuple[float, float, float, float] = (0.6, 0.15, 0.5, 0.3),
        jitter: float = 0.01,
        failure_rate: float = 0.0,
        latency_s: float = 0.0,
        seed: Optional[int] = None,
        time_func: Callable[[], float] = time.monotonic,
    ):
        """
        Initializes the DummySampler.

        Args:
            radius: The radius of the circular on-screen path.
            center: The (x, y) center of the path.
            speed: Revolutions per second along the path.
            distortion: (ax, bx, ay, by) so that reported = a * true + b per axis.
            jitter: Standard deviation of the Gaussian noise added to each axis.
            failure_rate: Probability in [0, 1] that a poll raises SamplerUnavailable.
            latency_s: Simulated round-trip delay of each poll.
            seed: Seed for the noise and failure generator.
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1].")

        self._radius = radius
        self._center_x, self._center_y = center
        self._speed = speed
        self._ax, self._bx, self._ay, self._by = distortion
        self._jitter = jitter
        self._failure_rate = failure_rate
        self._latency_s = latency_s
        self._rng = random.Random(seed)
        self._time = time_func
        self._start_time: Optional[float] = None

    async def start(self) -> None:
        self._start_time = self._time()
        logger.info("DummySampler started (failure rate %.0f%%).", self._failure_rate * 100)

    async def poll_gaze(self) -> GazeSample:
        if self._start_time is None:
            raise SamplerUnavailable("DummySampler is not started.")
        if self._latency_s > 0:
            await asyncio.sleep(self._latency_s)
        if self._rng.random() < self._failure_rate:
            raise SamplerUnavailable("Simulated dropout.")

        angle = (self._time() - self._start_time) * self._speed * 2 * math.pi
        true_x = self._center_x + self._radius * math.cos(angle)
        true_y = self._center_y + self._radius * math.sin(angle)

        return GazeSample(
            clamp_unit(self._ax * true_x + self._bx + self._rng.gauss(0.0, self._jitter)),
            clamp_unit(self._ay * true_y + self._by + self._rng.gauss(0.0, self._jitter)),
        )

    async def close(self) -> None:
        self._start_time = None
        logger.info("DummySampler has stopped.")
