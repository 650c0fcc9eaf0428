"""
Per-region text recognition session.

Routes one frame of recognizer observations through number extraction and
temporal tracking, keeps the frame's boxes for rendering, and reports a
confirmed number once it has been seen consistently. Each independently
tracked region gets its own TextRecognizer.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .affine_transform import layer_rect_from_normalized
from .config import (
    NUMBER_ALLOWED_CHARACTERS,
    NUMBER_BOX_COLOR,
    TEXT_LINE_BOX_COLOR,
    TrackerSettings,
)
from .geometry import CoordinateOrigin, NormalizedRect, Orientation, Rect, Size
from .logger import get_logger
from .number_extractor import TextSpan, extract_number
from .region_of_interest import RegionOfInterestManager
from .string_tracker import StringTracker

logger = get_logger("TextRecognizer")

Color = tuple[int, int, int]


def proportional_span_box(text: str, box: NormalizedRect, span: TextSpan) -> NormalizedRect:
    """
    Approximate the sub-box of a character span.

    Slices the line's box horizontally in proportion to the character
    offsets. Used when the recognizer cannot report per-range boxes.
    """
    if not text:
        return box
    start = span.start / len(text)
    end = span.end / len(text)
    return NormalizedRect(
        box.x + box.width * start,
        box.y,
        box.width * (end - start),
        box.height,
        box.origin
    )


@dataclass
class Observation:
    """
    One recognized text line for one frame.

    Attributes:
        text: Top candidate string.
        box: Line bounding box, ROI-local, bottom-left origin.
        box_for_span: Optional recognizer lookup for the box of a character
                      span; returns None when the range has no box.
    """
    text: str
    box: NormalizedRect
    box_for_span: Optional[Callable[[TextSpan], Optional[NormalizedRect]]] = None

    def span_box(self, span: TextSpan) -> Optional[NormalizedRect]:
        if self.box_for_span is not None:
            return self.box_for_span(span)
        return proportional_span_box(self.text, self.box, span)


@dataclass(frozen=True)
class RenderBox:
    """A box in full-frame render space (top-left origin) with its color."""
    rect: NormalizedRect
    color: Color

    def to_layer_rect(self, layer_size: Size) -> Rect:
        return layer_rect_from_normalized(self.rect, layer_size)


@dataclass
class FrameResult:
    """
    Outcome of one processed frame.

    Attributes:
        numbers: Numbers extracted from this frame, in observation order.
        text_line_boxes: Recognition-space boxes of lines drawn red.
        number_boxes: Recognition-space boxes of extracted numbers drawn green.
        render_boxes: All boxes projected to render space.
        confirmed: Number confirmed on this frame, if any.
    """
    numbers: list[str] = field(default_factory=list)
    text_line_boxes: list[NormalizedRect] = field(default_factory=list)
    number_boxes: list[NormalizedRect] = field(default_factory=list)
    render_boxes: list[RenderBox] = field(default_factory=list)
    confirmed: Optional[str] = None


class TextRecognizer:
    """
    One string tracker and one region of interest for a tracked region.

    process_frame() and the ROI gesture helpers share a lock so a worker
    thread delivering frames and a UI thread moving the region never
    interleave within one session.

    Attributes:
        name: Region name used in logs.
        roi: Region-of-interest manager.
        tracker: Temporal string tracker.
    """

    def __init__(
        self,
        roi: RegionOfInterestManager,
        tracker: Optional[StringTracker] = None,
        callback: Optional[Callable[[str], None]] = None,
        name: str = "",
        settings: Optional[TrackerSettings] = None
    ):
        """
        Initialize a recognition session.

        Args:
            roi: Region-of-interest manager for this region.
            tracker: String tracker. Built from settings if None.
            callback: Called with each confirmed number.
            name: Region name used in logs.
            settings: Tracker settings (aging window, threshold, hop cap).
        """
        self.settings = settings or TrackerSettings()
        self.roi = roi
        self.tracker = tracker or StringTracker(
            aging_window=self.settings.aging_window,
            confirmation_threshold=self.settings.confirmation_threshold
        )
        self.callback = callback
        self.name = name or "region"

        self._lock = threading.Lock()
        self._text_line_boxes: list[NormalizedRect] = []
        self._number_boxes: list[NormalizedRect] = []
        self._frames_processed = 0
        self._confirmations = 0

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    @property
    def confirmations(self) -> int:
        return self._confirmations

    def recognition_region(self) -> NormalizedRect:
        """Region the recognizer should run on (normalized, bottom-left)."""
        with self._lock:
            return self.roi.current_recognition_roi()

    def process_frame(self, observations: Iterable[Observation]) -> FrameResult:
        """
        Process the observations of one video frame.

        Must be called once per received frame, with an empty iterable when
        the recognizer found nothing, to keep the aging window meaningful.

        Args:
            observations: Recognized lines for this frame.

        Returns:
            FrameResult with numbers, boxes and any confirmed number.
        """
        result = FrameResult()

        for observation in observations:
            # A number that is a substring of the line gets a green box and the
            # line keeps its red box; a number covering the whole line only
            # gets the green one.
            number_is_substring = True

            extracted = extract_number(
                observation.text,
                NUMBER_ALLOWED_CHARACTERS,
                self.settings.max_substitutions
            )
            if extracted is not None:
                span, number = extracted
                box = observation.span_box(span)
                if box is not None:
                    result.numbers.append(number)
                    result.number_boxes.append(box)
                    number_is_substring = not span.covers(observation.text)

            if number_is_substring:
                result.text_line_boxes.append(observation.box)

        with self._lock:
            self.tracker.log_frame(result.numbers)
            self._frames_processed += 1
            self._text_line_boxes = list(result.text_line_boxes)
            self._number_boxes = list(result.number_boxes)
            result.render_boxes = self._project_boxes()

            confirmed = self.tracker.get_stable_string()
            if confirmed is not None:
                self.tracker.reset(confirmed)
                self._confirmations += 1
                result.confirmed = confirmed

        if result.confirmed is not None:
            logger.info(f"[{self.name}] Confirmed number: {result.confirmed}")
            if self.callback:
                self.callback(result.confirmed)

        return result

    def render_boxes(self) -> list[RenderBox]:
        """Re-project the last frame's boxes through the current transform."""
        with self._lock:
            return self._project_boxes()

    def _project_boxes(self) -> list[RenderBox]:
        transform = self.roi.current_transform()
        boxes = [
            RenderBox(transform.apply_to_rect(box, CoordinateOrigin.TOP_LEFT), TEXT_LINE_BOX_COLOR)
            for box in self._text_line_boxes
        ]
        boxes.extend(
            RenderBox(transform.apply_to_rect(box, CoordinateOrigin.TOP_LEFT), NUMBER_BOX_COLOR)
            for box in self._number_boxes
        )
        return boxes

    # -------------------------------------------------------------------------
    # Region updates (serialized with frame processing)
    # -------------------------------------------------------------------------

    def set_rect(self, rect: Rect) -> None:
        with self._lock:
            self.roi.set_rect(rect)

    def set_orientation(self, orientation: Orientation) -> None:
        with self._lock:
            self.roi.set_orientation(orientation)

    def set_reference_frame_size(self, size: Size) -> None:
        with self._lock:
            self.roi.set_reference_frame_size(size)

    def begin_pan(self) -> None:
        with self._lock:
            self.roi.begin_pan()

    def update_pan(self, translation_x: float, translation_y: float) -> None:
        with self._lock:
            self.roi.update_pan(translation_x, translation_y)

    def end_pan(self) -> None:
        with self._lock:
            self.roi.end_pan()

    def pinch(self, scale: float) -> None:
        with self._lock:
            self.roi.pinch(scale)

    def reset(self) -> None:
        """Restore the starting region and forget every tracked string."""
        with self._lock:
            self.roi.reset()
            self.tracker.clear()
            self._text_line_boxes = []
            self._number_boxes = []
        logger.info(f"[{self.name}] Session reset")
