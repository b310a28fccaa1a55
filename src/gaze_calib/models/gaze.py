from dataclasses import dataclass


def clamp_unit(value: float) -> float:
    """Clamps a value to the normalized [0, 1] range."""
    return min(1.0, max(0.0, value))


@dataclass(slots=True, frozen=True)
class GazeSample:
    """
    A single normalized gaze estimate as reported by a sampler.

    Both coordinates are fractions of the image (or screen) axis, in [0, 1],
    with the origin at the top-left corner.
    """
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


# The sampler reports this when it cannot find a face or both eyes.
CENTER_SAMPLE = GazeSample(0.5, 0.5)
