"""
Geometry value types shared by the transform pipeline.

View-space rectangles are in points with a top-left origin. Normalized
rectangles live in the unit square and carry their vertical convention
explicitly, since the recognizer reports boxes bottom-left while rendering
works top-left.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in view (UI) space, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_origin_size(cls, origin: Point, size: Size) -> "Rect":
        return cls(origin.x, origin.y, size.width, size.height)

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def with_center(self, center: Point) -> "Rect":
        """Move the rect so that its center is at the given point."""
        return Rect(
            center.x - self.width / 2.0,
            center.y - self.height / 2.0,
            self.width,
            self.height
        )

    def scaled_about_center(self, sx: float, sy: float) -> "Rect":
        """Scale the rect's size while keeping its center fixed."""
        center = self.center
        return Rect(0.0, 0.0, self.width * sx, self.height * sy).with_center(center)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


class CoordinateOrigin(Enum):
    """Vertical axis convention of a normalized rectangle."""
    TOP_LEFT = "top_left"        # Rendering / layer convention
    BOTTOM_LEFT = "bottom_left"  # Recognizer convention


@dataclass(frozen=True)
class NormalizedRect:
    """
    Rectangle in the unit square with an explicit vertical convention.

    Attributes:
        x, y: Origin corner (top-left or bottom-left, see origin).
        width, height: Size as a fraction of the reference frame.
        origin: Which corner (x, y) refers to.
    """
    x: float
    y: float
    width: float
    height: float
    origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT

    @classmethod
    def unit(cls, origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT) -> "NormalizedRect":
        """Full unit square."""
        return cls(0.0, 0.0, 1.0, 1.0, origin)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def flipped_vertically(self) -> "NormalizedRect":
        """Express the same area in the opposite vertical convention."""
        if self.origin is CoordinateOrigin.TOP_LEFT:
            target = CoordinateOrigin.BOTTOM_LEFT
        else:
            target = CoordinateOrigin.TOP_LEFT
        return NormalizedRect(self.x, 1.0 - self.y - self.height, self.width, self.height, target)

    def is_close(self, other: "NormalizedRect", tolerance: float = 1e-9) -> bool:
        """Compare coordinates within a tolerance (conventions must match)."""
        return (
            self.origin is other.origin and
            abs(self.x - other.x) <= tolerance and
            abs(self.y - other.y) <= tolerance and
            abs(self.width - other.width) <= tolerance and
            abs(self.height - other.height) <= tolerance
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


class Orientation(Enum):
    """The four cardinal capture/UI orientations."""
    PORTRAIT = "portrait"
    PORTRAIT_UPSIDE_DOWN = "portraitUpsideDown"
    LANDSCAPE_LEFT = "landscapeLeft"
    LANDSCAPE_RIGHT = "landscapeRight"

    @classmethod
    def parse(cls, value: str) -> "Orientation":
        """
        Parse an orientation name (case-insensitive, '-'/'_' ignored).

        Raises:
            ValueError: If the name is not one of the four orientations.
        """
        key = value.replace("_", "").replace("-", "").lower()
        for orientation in cls:
            if orientation.value.lower() == key:
                return orientation
        raise ValueError(f"Unknown orientation: {value}")

    @classmethod
    def from_device_orientation(cls, device_orientation: str) -> Optional["Orientation"]:
        """
        Map a device orientation to the capture orientation.

        Device and capture landscape orientations are mirrored: a device held
        landscape-left captures landscape-right, and vice versa. Face-up,
        face-down and unknown device orientations have no capture
        orientation.

        Args:
            device_orientation: Device orientation name.

        Returns:
            Matching Orientation, or None.
        """
        try:
            orientation = cls.parse(device_orientation)
        except ValueError:
            return None

        if orientation is cls.LANDSCAPE_LEFT:
            return cls.LANDSCAPE_RIGHT
        if orientation is cls.LANDSCAPE_RIGHT:
            return cls.LANDSCAPE_LEFT
        return orientation
