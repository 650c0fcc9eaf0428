"""
Affine transform composition for the region-of-interest pipeline.

Recognition runs on a buffer whose orientation never changes, inside a
normalized region of interest with a bottom-left origin. Boxes it reports
must be expanded from ROI-local to full-frame coordinates, flipped to a
top-left origin, and rotated to the current UI orientation before they can
be drawn. This module builds those transforms.

Concatenation follows the "apply left, then right" convention:
``a.concatenating(b)`` maps a point through ``a`` first and ``b`` second.
"""

import math
from typing import Optional

import numpy as np

from .geometry import CoordinateOrigin, NormalizedRect, Orientation, Rect, Size


def _snap(value: float, tolerance: float = 1e-12) -> float:
    """Snap values within tolerance of an integer (quarter turns are exact)."""
    nearest = round(value)
    return float(nearest) if abs(value - nearest) < tolerance else value


class AffineTransform:
    """
    2D affine map with six coefficients.

    Maps (x, y) to (a*x + c*y + tx, b*x + d*y + ty). Stored as a 3x3
    homogeneous matrix acting on column vectors.
    """

    __slots__ = ("_matrix",)

    def __init__(
        self,
        a: float = 1.0,
        b: float = 0.0,
        c: float = 0.0,
        d: float = 1.0,
        tx: float = 0.0,
        ty: float = 0.0
    ):
        self._matrix = np.array([
            [a, c, tx],
            [b, d, ty],
            [0.0, 0.0, 1.0]
        ], dtype=np.float64)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "AffineTransform":
        """Create from a 3x3 (or 2x3) homogeneous matrix."""
        m = np.asarray(matrix, dtype=np.float64)
        return cls(m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> "AffineTransform":
        return cls(tx=tx, ty=ty)

    @classmethod
    def scale(cls, sx: float, sy: float) -> "AffineTransform":
        return cls(a=sx, d=sy)

    @classmethod
    def rotation(cls, angle: float) -> "AffineTransform":
        """Counter-clockwise rotation by angle (radians) about the origin."""
        cos_a = _snap(math.cos(angle))
        sin_a = _snap(math.sin(angle))
        return cls(a=cos_a, b=sin_a, c=-sin_a, d=cos_a)

    @property
    def matrix(self) -> np.ndarray:
        """Copy of the 3x3 homogeneous matrix."""
        return self._matrix.copy()

    @property
    def coefficients(self) -> tuple[float, float, float, float, float, float]:
        """Coefficients as (a, b, c, d, tx, ty)."""
        m = self._matrix
        return (
            float(m[0, 0]), float(m[1, 0]),
            float(m[0, 1]), float(m[1, 1]),
            float(m[0, 2]), float(m[1, 2])
        )

    @property
    def is_identity(self) -> bool:
        return bool(np.array_equal(self._matrix, np.eye(3)))

    def concatenating(self, other: "AffineTransform") -> "AffineTransform":
        """Transform that applies self first, then other."""
        return AffineTransform.from_matrix(other._matrix @ self._matrix)

    def translated_by(self, tx: float, ty: float) -> "AffineTransform":
        """Transform that translates first, then applies self."""
        return AffineTransform.translation(tx, ty).concatenating(self)

    def scaled_by(self, sx: float, sy: float) -> "AffineTransform":
        """Transform that scales first, then applies self."""
        return AffineTransform.scale(sx, sy).concatenating(self)

    def rotated_by(self, angle: float) -> "AffineTransform":
        """Transform that rotates first, then applies self."""
        return AffineTransform.rotation(angle).concatenating(self)

    def inverted(self) -> "AffineTransform":
        """
        Get the inverse transform.

        Raises:
            ValueError: If the transform is singular.
        """
        try:
            return AffineTransform.from_matrix(np.linalg.inv(self._matrix))
        except np.linalg.LinAlgError as e:
            raise ValueError(f"Affine transform is not invertible: {self}") from e

    def apply_to_point(self, x: float, y: float) -> tuple[float, float]:
        m = self._matrix
        return (
            float(m[0, 0] * x + m[0, 1] * y + m[0, 2]),
            float(m[1, 0] * x + m[1, 1] * y + m[1, 2])
        )

    def apply_to_points(self, points: np.ndarray) -> np.ndarray:
        """Apply to an (N, 2) array of points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
        return (homogeneous @ self._matrix.T)[:, :2]

    def apply_to_rect(
        self,
        rect: NormalizedRect,
        origin: Optional[CoordinateOrigin] = None
    ) -> NormalizedRect:
        """
        Map a rectangle and return the bounding box of its image.

        Args:
            rect: Rectangle to transform.
            origin: Vertical convention of the result. Defaults to the
                    input's convention; pass the target convention when the
                    transform changes it.

        Returns:
            Axis-aligned bounding box of the four transformed corners.
        """
        corners = np.array([
            [rect.x, rect.y],
            [rect.max_x, rect.y],
            [rect.max_x, rect.max_y],
            [rect.x, rect.max_y]
        ], dtype=np.float64)
        mapped = self.apply_to_points(corners)
        min_xy = mapped.min(axis=0)
        max_xy = mapped.max(axis=0)
        return NormalizedRect(
            float(min_xy[0]),
            float(min_xy[1]),
            float(max_xy[0] - min_xy[0]),
            float(max_xy[1] - min_xy[1]),
            origin or rect.origin
        )

    def is_close(self, other: "AffineTransform", tolerance: float = 1e-9) -> bool:
        return bool(np.allclose(self._matrix, other._matrix, rtol=0.0, atol=tolerance))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return bool(np.array_equal(self._matrix, other._matrix))

    def __hash__(self) -> int:
        return hash(self.coefficients)

    def __repr__(self) -> str:
        a, b, c, d, tx, ty = self.coefficients
        return f"AffineTransform(a={a:g}, b={b:g}, c={c:g}, d={d:g}, tx={tx:g}, ty={ty:g})"


# Bottom-left <-> top-left: (x, y) -> (x, 1 - y)
VERTICAL_FLIP = AffineTransform.scale(1.0, -1.0).translated_by(0.0, -1.0)

# Buffer orientation -> UI orientation, one fixed transform per orientation.
# Each maps the unit square onto itself; landscape-right is the buffer's own.
ORIENTATION_TRANSFORMS: dict[Orientation, AffineTransform] = {
    # (x, y) -> (y, 1 - x)
    Orientation.PORTRAIT: AffineTransform.translation(0.0, 1.0).rotated_by(-math.pi / 2),
    # (x, y) -> (1 - y, x)
    Orientation.PORTRAIT_UPSIDE_DOWN: AffineTransform.translation(1.0, 0.0).rotated_by(math.pi / 2),
    # (x, y) -> (1 - x, 1 - y)
    Orientation.LANDSCAPE_LEFT: AffineTransform.translation(1.0, 1.0).rotated_by(math.pi),
    Orientation.LANDSCAPE_RIGHT: AffineTransform.identity(),
}


def to_normalized(rect: Rect, reference_size: Size) -> NormalizedRect:
    """
    Normalize a view-space rectangle against a reference frame size.

    Args:
        rect: Rectangle in view space (top-left origin).
        reference_size: Size of the reference frame the rect lives in.

    Returns:
        Rectangle in the unit square, top-left convention.

    Raises:
        ValueError: If either reference dimension is not positive.
    """
    width = float(reference_size.width)
    height = float(reference_size.height)
    if width <= 0 or height <= 0:
        raise ValueError(f"Reference frame size must be positive, got {width}x{height}")

    return NormalizedRect(
        rect.x / width,
        rect.y / height,
        rect.width / width,
        rect.height / height,
        CoordinateOrigin.TOP_LEFT
    )


def orientation_transform(orientation: Orientation) -> AffineTransform:
    """Get the fixed buffer-to-UI transform for an orientation."""
    return ORIENTATION_TRANSFORMS[orientation]


def compose_roi_to_render_transform(
    normalized_roi: NormalizedRect,
    vertical_flip: AffineTransform = VERTICAL_FLIP,
    orientation_transform: AffineTransform = ORIENTATION_TRANSFORMS[Orientation.PORTRAIT]
) -> AffineTransform:
    """
    Build the transform from ROI-local recognition space to render space.

    A point is first expanded from ROI-local normalized coordinates to
    full-frame normalized coordinates, then flipped to the render vertical
    convention, then rotated to the UI orientation. Swapping any two steps
    silently misplaces every drawn box.

    Args:
        normalized_roi: ROI in recognition convention (bottom-left origin).
        vertical_flip: Vertical convention fix-up.
        orientation_transform: Buffer-to-UI orientation transform.

    Returns:
        Composed transform.
    """
    roi_to_global = AffineTransform.translation(
        normalized_roi.x, normalized_roi.y
    ).scaled_by(normalized_roi.width, normalized_roi.height)

    return roi_to_global.concatenating(vertical_flip).concatenating(orientation_transform)


def layer_rect_from_normalized(rect: NormalizedRect, layer_size: Size) -> Rect:
    """
    Scale a full-frame normalized rectangle to layer (pixel) coordinates.

    Bottom-left rectangles are flipped first; layers are top-left.
    """
    if rect.origin is CoordinateOrigin.BOTTOM_LEFT:
        rect = rect.flipped_vertically()
    return Rect(
        rect.x * layer_size.width,
        rect.y * layer_size.height,
        rect.width * layer_size.width,
        rect.height * layer_size.height
    )
