from enum import Enum, auto


class SessionPhase(Enum):
    """
    The phases of a gaze session.

    A session starts in CALIBRATING and moves to RUNNING exactly once, after
    the last calibration target has been processed. There is no way back.
    """
    CALIBRATING = auto()  # Targets are shown and raw gaze is collected.
    RUNNING = auto()  # Calibration is fitted, live gaze is mapped to screen.
