"""
Detection data models - regions, draw styles, cascade detectors and overlays.
"""

from dataclasses import dataclass, field
from typing import Any

Color = tuple[int, int, int]  # BGR, as used by OpenCV drawing calls


def color_from_rgb(value: int) -> Color:
    """Convert a 0xRRGGBB integer into an OpenCV BGR tuple."""
    value = int(value)
    red = (value >> 16) & 0xFF
    green = (value >> 8) & 0xFF
    blue = value & 0xFF
    return (blue, green, red)


@dataclass(frozen=True)
class Rect:
    """Axis aligned region in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_xywh(cls, values) -> "Rect":
        x, y, w, h = (int(v) for v in values[:4])
        return cls(x, y, w, h)

    @property
    def top_left(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> tuple[int, int]:
        return (self.x + self.width, self.y + self.height)

    def scaled(self, factor: int) -> "Rect":
        """Multiply every coordinate by factor (working buffer -> full frame)."""
        return Rect(
            self.x * factor,
            self.y * factor,
            self.width * factor,
            self.height * factor,
        )


@dataclass(frozen=True)
class DrawStyle:
    """How a detector's regions are drawn on the live view."""

    annotation: str = ""
    color: Color = (0, 255, 0)
    thickness: int = 2
    render_as_circle: bool = False


@dataclass(frozen=True)
class DetectionParams:
    """
    Parameters for multi-scale cascade detection.

    Size fractions are relative to the searched frame. The all-zero value
    means "let the engine use its defaults".
    """

    scale_factor: float = 0.0
    min_neighbors: int = 0
    flags: int = 0
    min_width_fraction: float = 0.0
    min_height_fraction: float = 0.0
    max_width_fraction: float = 0.0
    max_height_fraction: float = 0.0

    def is_default(self) -> bool:
        return self == DetectionParams()

    def min_size(self, width: int, height: int) -> tuple[int, int]:
        return (
            int(width * self.min_width_fraction),
            int(height * self.min_height_fraction),
        )

    def max_size(self, width: int, height: int) -> tuple[int, int]:
        return (
            int(width * self.max_width_fraction),
            int(height * self.max_height_fraction),
        )


@dataclass
class Detector:
    """
    A configured region detector (face, upper body, eye, ...).

    Attributes:
        name: Detector name, also used for region crop filenames
        source_file: Cascade definition file
        draw_style: Live view draw style
        params: Detection parameters
        highest_count_seen: Most regions seen in a single frame this session
        artifacts_written: Region crops written so far this session
        engine: Loaded detection engine handle (None until loaded)
    """

    name: str
    source_file: str
    draw_style: DrawStyle = field(default_factory=DrawStyle)
    params: DetectionParams = field(default_factory=DetectionParams)
    highest_count_seen: int = 0
    artifacts_written: int = 0
    engine: Any = field(default=None, repr=False, compare=False)

    def observe(self, count: int) -> bool:
        """
        Record the number of regions found in a frame.

        Returns True only when count is a new high-water mark for the session.
        """
        if count <= self.highest_count_seen:
            return False
        self.highest_count_seen = count
        return True

    def reserve_indices(self, count: int) -> range:
        """Reserve count file indices after the ones already written."""
        indices = range(self.artifacts_written, self.artifacts_written + count)
        self.artifacts_written += count
        return indices


@dataclass(frozen=True)
class FrameOverlay:
    """A region to draw on the live view, in full resolution coordinates."""

    rect: Rect
    draw_style: DrawStyle
