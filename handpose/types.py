"""
Shared types for the hand pose demo.

Centralizes the point and color types passed between capture, detection
and the view so the modules do not import each other for them.
"""

from typing import NamedTuple, Tuple


class Point(NamedTuple):
    """A 2-D coordinate, either normalized (0.0-1.0) or in view pixels."""
    x: float
    y: float

    def to_pixel(self) -> Tuple[int, int]:
        """Round to integer pixel coordinates for OpenCV drawing calls."""
        return (int(round(self.x)), int(round(self.y)))


class Size(NamedTuple):
    width: int
    height: int


class Color(NamedTuple):
    """RGBA color with float components in 0.0-1.0."""
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_list(cls, values) -> "Color":
        """Build from a YAML list of 3 or 4 floats."""
        values = list(values)
        if len(values) == 3:
            values.append(1.0)
        return cls(*(float(v) for v in values[:4]))

    def to_bgr(self) -> Tuple[int, int, int]:
        """Convert to an OpenCV BGR tuple (0-255)."""
        return (
            int(round(self.blue * 255)),
            int(round(self.green * 255)),
            int(round(self.red * 255)),
        )


# Named colors used by the view
ORANGE = Color(1.0, 0.5, 0.0)
WHITE_HALF = Color(0.9999018312, 1.0, 0.9998798966, 0.5)
ERROR_RED = Color(0.85, 0.1, 0.1)
