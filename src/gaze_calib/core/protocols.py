from typing import Protocol, runtime_checkable

from ..models import Frame, GazeSample


@runtime_checkable
class GazeSampler(Protocol):
    """
    The only seam between the vision pipeline and the calibration logic.

    `poll_gaze` returns the latest normalized gaze estimate or raises
    `SamplerUnavailable`. It may be slow; callers must tolerate staleness.
    """
    async def start(self) -> None: ...

    async def poll_gaze(self) -> GazeSample: ...

    async def close(self) -> None: ...


@runtime_checkable
class GazeView(Protocol):
    """
    Defines the methods required for any UI that renders session frames.
    Whether it's Tkinter or a console log, it must support these calls.
    """
    async def open(self) -> None: ...

    async def render(self, frame: Frame) -> None: ...

    async def close(self) -> None: ...
