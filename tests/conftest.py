import asyncio
from collections import deque

import pytest

from gaze_calib.models import GazeSample

DEFAULT_TARGETS = [
    (0.5, 0.5), (0.9, 0.5), (0.9, 0.1),
    (0.5, 0.1), (0.1, 0.1), (0.1, 0.5),
    (0.1, 0.9), (0.5, 0.9), (0.9, 0.9),
]


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class FakeSampler:
    """
    Scripted GazeSampler. Each poll consumes the next scripted item: a sample
    is returned, an exception is raised. When the script is exhausted the
    default sample is returned. If `gate` is set, polls wait on it first.
    """

    def __init__(self, script=(), default=GazeSample(0.4, 0.6)):
        self.script = deque(script)
        self.default = default
        self.gate: asyncio.Event | None = None
        self.polls = 0
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def poll_gaze(self) -> GazeSample:
        self.polls += 1
        if self.gate is not None:
            await self.gate.wait()
        item = self.script.popleft() if self.script else self.default
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class RecordingView:
    def __init__(self, on_frame=None):
        self.frames = []
        self.opened = False
        self.closed = False
        self._on_frame = on_frame

    async def open(self) -> None:
        self.opened = True

    async def render(self, frame) -> None:
        self.frames.append(frame)
        if self._on_frame:
            self._on_frame(frame)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def targets():
    return list(DEFAULT_TARGETS)


@pytest.fixture
def view():
    return RecordingView()
