from typing import Any

from ..models import GazeSample, clamp_unit


class SamplerUnavailable(Exception):
    """
    Raised when a gaze sampler cannot provide a sample for this poll.

    Covers transport failures, timeouts and malformed payloads. It is always
    recovered by the caller, which keeps the previous sample.
    """


def parse_gaze_payload(payload: Any) -> GazeSample:
    """
    Converts a sampler reply of the form {"x": float, "y": float} into a sample.

    Coordinates are clamped to [0, 1].

    Raises:
        SamplerUnavailable: if the payload is not a mapping or an axis is
                            missing or not numeric.
    """
    if not isinstance(payload, dict):
        raise SamplerUnavailable(f"Expected a mapping, got {type(payload).__name__}.")

    coords = []
    for axis in ("x", "y"):
        value = payload.get(axis)
        # bool is an int subclass but never a valid coordinate
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SamplerUnavailable(f"Missing or non-numeric '{axis}' in payload: {payload!r}")
        if value != value:
            raise SamplerUnavailable(f"NaN '{axis}' in payload.")
        coords.append(clamp_unit(float(value)))

    return GazeSample(coords[0], coords[1])
