"""
Box overlay drawing for RealtimeNumberReader.

Draws render-space boxes and region outlines onto BGR images with OpenCV.
"""

from typing import Iterable, Optional

import cv2
import numpy as np

from .config import OverlaySettings
from .geometry import Rect, Size
from .profile_loader import RegionPreset
from .text_recognizer import RenderBox


def _pixel_corners(rect: Rect, width: int, height: int) -> tuple[tuple[int, int], tuple[int, int]]:
    """Round a rect to pixel corners clamped to the image."""
    x1 = max(0, min(width - 1, int(round(rect.x))))
    y1 = max(0, min(height - 1, int(round(rect.y))))
    x2 = max(0, min(width - 1, int(round(rect.x + rect.width))))
    y2 = max(0, min(height - 1, int(round(rect.y + rect.height))))
    return (x1, y1), (x2, y2)


def draw_render_boxes(
    image: np.ndarray,
    boxes: Iterable[RenderBox],
    settings: Optional[OverlaySettings] = None
) -> np.ndarray:
    """
    Draw render-space boxes on an image.

    Boxes are blended at the configured opacity, like translucent layers.

    Args:
        image: BGR image to draw on (modified in place).
        boxes: Boxes in full-frame normalized render space.
        settings: Overlay settings. Uses defaults if None.

    Returns:
        The image with boxes drawn.
    """
    settings = settings or OverlaySettings()
    h, w = image.shape[:2]
    layer_size = Size(w, h)

    layer = image.copy()
    drawn = 0
    for box in boxes:
        top_left, bottom_right = _pixel_corners(box.to_layer_rect(layer_size), w, h)
        cv2.rectangle(layer, top_left, bottom_right, box.color, settings.box_thickness)
        drawn += 1

    if drawn:
        image[:] = cv2.addWeighted(layer, settings.box_opacity, image, 1.0 - settings.box_opacity, 0)
    return image


def draw_region(
    image: np.ndarray,
    rect: Rect,
    preset: RegionPreset,
    label: Optional[str] = None,
    view_size: Optional[Size] = None,
    settings: Optional[OverlaySettings] = None
) -> np.ndarray:
    """
    Draw a region outline and its debug label.

    Args:
        image: BGR image to draw on (modified in place).
        rect: Region rectangle in view space.
        preset: Region preset (border color and width, label position).
        label: Debug label text. Defaults to the region id.
        view_size: View size the rect is expressed in; scaled to the image
                   size when given.
        settings: Overlay settings. Uses defaults if None.

    Returns:
        The image with the region drawn.
    """
    settings = settings or OverlaySettings()
    h, w = image.shape[:2]

    sx = w / view_size.width if view_size else 1.0
    sy = h / view_size.height if view_size else 1.0
    scaled = Rect(rect.x * sx, rect.y * sy, rect.width * sx, rect.height * sy)

    top_left, bottom_right = _pixel_corners(scaled, w, h)
    thickness = max(1, int(round(preset.border_width)))
    cv2.rectangle(image, top_left, bottom_right, preset.border_color, thickness)

    text = f"[{preset.id}]: {label}" if label else preset.id
    label_pos = (
        int(preset.debug_label_position.x * sx),
        int(preset.debug_label_position.y * sy)
    )
    cv2.putText(
        image, text, label_pos,
        cv2.FONT_HERSHEY_SIMPLEX, settings.label_scale, settings.label_color, 1, cv2.LINE_AA
    )
    return image
