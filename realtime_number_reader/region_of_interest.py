"""
Region-of-interest manager for RealtimeNumberReader.

Owns the user-movable ROI rectangle in view space and keeps its normalized
representation and the ROI-to-render transform in sync with it. Every setter
recomputes the derived values before returning, so readers never see a
transform that lags behind the rectangle, orientation or reference size.
"""

from dataclasses import dataclass
from typing import Optional

from .affine_transform import (
    AffineTransform,
    VERTICAL_FLIP,
    compose_roi_to_render_transform,
    orientation_transform,
    to_normalized,
)
from .config import ROI_MIN_SIDE
from .geometry import NormalizedRect, Orientation, Point, Rect, Size
from .logger import get_logger

logger = get_logger("RegionOfInterest")


@dataclass(frozen=True)
class RegionOfInterestState:
    """
    Snapshot of the ROI inputs and their derived values.

    Attributes:
        rect_in_view_space: ROI rectangle in view points (top-left origin).
        orientation: Current UI orientation.
        reference_frame_size: Size of the view the rect is expressed in.
        normalized_roi: rect_in_view_space over reference_frame_size (top-left).
        recognition_roi: normalized_roi in the recognizer's bottom-left convention.
        active_transform: ROI-local recognition space -> render space.
    """
    rect_in_view_space: Rect
    orientation: Orientation
    reference_frame_size: Size
    normalized_roi: NormalizedRect
    recognition_roi: NormalizedRect
    active_transform: AffineTransform


class RegionOfInterestManager:
    """
    Holds one region of interest and its coordinate-space mappings.

    Also applies raw pan and pinch deltas from the gesture layer.

    Attributes:
        min_side: Smallest allowed ROI side (view points) after pinching.
    """

    def __init__(
        self,
        rect: Rect,
        reference_frame_size: Size,
        orientation: Orientation = Orientation.PORTRAIT,
        min_side: float = ROI_MIN_SIDE
    ):
        """
        Initialize ROI manager.

        Args:
            rect: Starting ROI rectangle in view space.
            reference_frame_size: Size of the view the rect is expressed in.
            orientation: Starting UI orientation.
            min_side: Smallest allowed ROI side after pinching.

        Raises:
            ValueError: If the reference frame size is not positive.
        """
        self.min_side = min_side
        self._starting_rect = rect
        self._pan_start_center: Optional[Point] = None

        self._orientation_transform = orientation_transform(orientation)
        self._state = self._derive(rect, orientation, reference_frame_size)

        logger.debug(
            f"ROI initialized: rect={rect.as_tuple()}, "
            f"reference={reference_frame_size.width}x{reference_frame_size.height}, "
            f"orientation={orientation.value}"
        )

    def _derive(
        self,
        rect: Rect,
        orientation: Orientation,
        reference_frame_size: Size
    ) -> RegionOfInterestState:
        """Recompute every derived value from the three inputs."""
        normalized = to_normalized(rect, reference_frame_size)
        recognition = normalized.flipped_vertically()
        transform = compose_roi_to_render_transform(
            recognition, VERTICAL_FLIP, self._orientation_transform
        )
        return RegionOfInterestState(
            rect_in_view_space=rect,
            orientation=orientation,
            reference_frame_size=reference_frame_size,
            normalized_roi=normalized,
            recognition_roi=recognition,
            active_transform=transform
        )

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_rect(self, rect: Rect) -> None:
        """Move or resize the ROI."""
        state = self._state
        self._state = self._derive(rect, state.orientation, state.reference_frame_size)
        logger.debug(f"ROI rect: {rect.as_tuple()} -> {self._state.normalized_roi.as_tuple()}")

    def set_orientation(self, orientation: Orientation) -> None:
        """Change the UI orientation."""
        if orientation is self._state.orientation:
            return
        state = self._state
        self._orientation_transform = orientation_transform(orientation)
        self._state = self._derive(state.rect_in_view_space, orientation, state.reference_frame_size)
        logger.info(f"Orientation changed to {orientation.value}")

    def set_reference_frame_size(self, size: Size) -> None:
        """
        Change the reference frame size.

        Raises:
            ValueError: If the size is not positive. State is left unchanged.
        """
        state = self._state
        self._state = self._derive(state.rect_in_view_space, state.orientation, size)
        logger.debug(f"Reference frame size: {size.width}x{size.height}")

    # -------------------------------------------------------------------------
    # Readers
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RegionOfInterestState:
        """Immutable snapshot of the current state."""
        return self._state

    @property
    def rect(self) -> Rect:
        return self._state.rect_in_view_space

    @property
    def orientation(self) -> Orientation:
        return self._state.orientation

    def current_transform(self) -> AffineTransform:
        return self._state.active_transform

    def current_normalized_roi(self) -> NormalizedRect:
        return self._state.normalized_roi

    def current_recognition_roi(self) -> NormalizedRect:
        """Normalized ROI in the recognizer's bottom-left convention."""
        return self._state.recognition_roi

    # -------------------------------------------------------------------------
    # Gestures
    # -------------------------------------------------------------------------

    def begin_pan(self) -> None:
        """Remember the ROI center at the start of a pan gesture."""
        self._pan_start_center = self.rect.center

    def update_pan(self, translation_x: float, translation_y: float) -> None:
        """
        Move the ROI by the pan translation accumulated since begin_pan().

        Args:
            translation_x: Total horizontal translation in view points.
            translation_y: Total vertical translation in view points.
        """
        if self._pan_start_center is None:
            self.begin_pan()

        start = self._pan_start_center
        new_center = Point(start.x + translation_x, start.y + translation_y)
        self.set_rect(self.rect.with_center(new_center))

    def end_pan(self) -> None:
        """Finish a pan gesture."""
        if self._pan_start_center is not None:
            logger.info(f"Pan ended: new origin ({self.rect.x:.0f}, {self.rect.y:.0f})")
        self._pan_start_center = None

    def pinch(self, scale: float) -> None:
        """
        Scale the ROI about its center.

        Each call carries the incremental factor since the previous pinch
        event (the gesture layer resets its scale to 1 after reporting).

        Args:
            scale: Incremental scale factor (> 0).
        """
        if scale <= 0:
            logger.warning(f"Ignoring non-positive pinch scale: {scale}")
            return

        scaled = self.rect.scaled_about_center(scale, scale)
        width = max(self.min_side, scaled.width)
        height = max(self.min_side, scaled.height)
        if width != scaled.width or height != scaled.height:
            scaled = Rect(0.0, 0.0, width, height).with_center(self.rect.center)

        self.set_rect(scaled)

    def reset(self) -> None:
        """Restore the starting rectangle."""
        self._pan_start_center = None
        self.set_rect(self._starting_rect)
        logger.info(f"ROI reset to {self._starting_rect.as_tuple()}")
