"""
RealtimeNumberReader - Debounced number reading over a movable region of interest.

Turns a noisy per-frame stream of text-recognition results into confirmed
numbers, and keeps the region of interest and its annotation boxes aligned
across orientation changes, panning and pinching.
"""

__version__ = "1.0.0"
__author__ = "AROverlay Team"

from .affine_transform import AffineTransform, compose_roi_to_render_transform, to_normalized
from .geometry import CoordinateOrigin, NormalizedRect, Orientation, Point, Rect, Size
from .number_extractor import TextSpan, extract_number
from .profile_loader import ReaderProfile, RegionPreset, ProfileLoadError, load_profile
from .region_of_interest import RegionOfInterestManager, RegionOfInterestState
from .string_tracker import StringTracker
from .text_recognizer import FrameResult, Observation, RenderBox, TextRecognizer

__all__ = [
    "AffineTransform",
    "compose_roi_to_render_transform",
    "to_normalized",
    "CoordinateOrigin",
    "NormalizedRect",
    "Orientation",
    "Point",
    "Rect",
    "Size",
    "TextSpan",
    "extract_number",
    "ReaderProfile",
    "RegionPreset",
    "ProfileLoadError",
    "load_profile",
    "RegionOfInterestManager",
    "RegionOfInterestState",
    "StringTracker",
    "FrameResult",
    "Observation",
    "RenderBox",
    "TextRecognizer",
]
