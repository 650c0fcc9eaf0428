"""
Configuration constants for RealtimeNumberReader.

This module contains all tunable parameters for number extraction,
temporal string tracking, region-of-interest handling, and box rendering.
"""

from dataclasses import dataclass
from typing import Final


# Number extraction
NUMBER_ALLOWED_CHARACTERS: Final[str] = " 0123456789"
# Deepest chain in the confusion table is 's' -> 'S' -> '5'
MAX_CHARACTER_SUBSTITUTIONS: Final[int] = 2

# String tracker
# Roughly one second at 30 FPS; frame rate is not guaranteed, so keep it tunable
TRACKER_AGING_WINDOW_FRAMES: Final[int] = 30
# Best count is "times seen minus one", so 10 means 11 sightings
TRACKER_CONFIRMATION_THRESHOLD: Final[int] = 10

# Region of interest
ROI_MIN_SIDE: Final[float] = 10.0  # Minimum ROI side in view points after pinch
DEFAULT_REFERENCE_WIDTH: Final[float] = 390.0
DEFAULT_REFERENCE_HEIGHT: Final[float] = 844.0
DEFAULT_ORIENTATION: Final[str] = "portrait"

# Box colors (BGR, OpenCV convention)
TEXT_LINE_BOX_COLOR: Final[tuple[int, int, int]] = (0, 0, 255)  # Red: any recognized line
NUMBER_BOX_COLOR: Final[tuple[int, int, int]] = (0, 255, 0)  # Green: extracted numbers
REGION_BORDER_COLOR: Final[tuple[int, int, int]] = (0, 255, 0)
REGION_BORDER_WIDTH: Final[float] = 2.0

# Overlay drawing
OVERLAY_BOX_THICKNESS: Final[int] = 3
OVERLAY_BOX_OPACITY: Final[float] = 0.5
OVERLAY_LABEL_SCALE: Final[float] = 0.5
OVERLAY_LABEL_COLOR: Final[tuple[int, int, int]] = (0, 0, 0)

# Logging
LOG_FILENAME: Final[str] = "realtime_number_reader.log"
LOG_MAX_BYTES: Final[int] = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT: Final[int] = 3
LOG_DIR_ENV: Final[str] = "REALTIME_NUMBER_READER_LOG_DIR"

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_PROFILE_ERROR: Final[int] = 1
EXIT_INPUT_ERROR: Final[int] = 2
EXIT_RUNTIME_ERROR: Final[int] = 3


@dataclass
class TrackerSettings:
    """Container for temporal string tracking settings."""

    aging_window: int = TRACKER_AGING_WINDOW_FRAMES
    confirmation_threshold: int = TRACKER_CONFIRMATION_THRESHOLD
    max_substitutions: int = MAX_CHARACTER_SUBSTITUTIONS


@dataclass
class OverlaySettings:
    """Container for box overlay drawing settings."""

    box_thickness: int = OVERLAY_BOX_THICKNESS
    box_opacity: float = OVERLAY_BOX_OPACITY
    label_scale: float = OVERLAY_LABEL_SCALE
    label_color: tuple[int, int, int] = OVERLAY_LABEL_COLOR


# Region presets, keyed by region id (camelCase to match the profile JSON)
DEFAULT_REGION_PRESETS: dict[str, dict] = {
    "test": {
        "borderColor": [0, 255, 0],
        "borderWidth": 2,
        "startingPosition": [200, 300],
        "startingSize": [100, 200],
        "debugLabelPosition": [22, 33],
    },
    "toran": {
        "borderColor": [0, 255, 0],
        "borderWidth": 2,
        "startingPosition": [100, 300],
        "startingSize": [100, 100],
        "debugLabelPosition": [22, 33],
    },
    "ollie": {
        "borderColor": [255, 0, 0],
        "borderWidth": 2,
        "startingPosition": [220, 300],
        "startingSize": [100, 100],
        "debugLabelPosition": [22, 58],
    },
}

# Regions active when a profile does not list any
DEFAULT_ACTIVE_REGIONS: Final[tuple[str, ...]] = ("ollie", "toran")
