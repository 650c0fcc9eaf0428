"""
Profile loader for RealtimeNumberReader.

Loads and validates JSON reader profiles: the reference frame size, the
starting orientation, tracker tuning, and the regions (each with its own
preset) that get an independent recognition session.
Profile properties use camelCase.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .config import (
    DEFAULT_ACTIVE_REGIONS,
    DEFAULT_ORIENTATION,
    DEFAULT_REFERENCE_HEIGHT,
    DEFAULT_REFERENCE_WIDTH,
    DEFAULT_REGION_PRESETS,
    MAX_CHARACTER_SUBSTITUTIONS,
    REGION_BORDER_COLOR,
    REGION_BORDER_WIDTH,
    TRACKER_AGING_WINDOW_FRAMES,
    TRACKER_CONFIRMATION_THRESHOLD,
    TrackerSettings,
)
from .geometry import Orientation, Point, Rect, Size
from .logger import get_logger

logger = get_logger("ProfileLoader")


def _parse_pair(value: Any, default: tuple[float, float]) -> tuple[float, float]:
    """Parse a [a, b] JSON pair of numbers, falling back to a default."""
    if (
        isinstance(value, (list, tuple)) and len(value) == 2 and
        all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    ):
        return float(value[0]), float(value[1])
    return default


def _parse_color(value: Any, default: tuple[int, int, int]) -> tuple[int, int, int]:
    """Parse a [b, g, r] JSON triple of 0-255 ints, falling back to a default."""
    if (
        isinstance(value, (list, tuple)) and len(value) == 3 and
        all(isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 255 for v in value)
    ):
        return int(value[0]), int(value[1]), int(value[2])
    return default


@dataclass
class RegionPreset:
    """UI preset of one tracked region."""

    id: str
    border_color: tuple[int, int, int] = REGION_BORDER_COLOR
    border_width: float = REGION_BORDER_WIDTH
    starting_position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    starting_size: Size = field(default_factory=lambda: Size(100.0, 100.0))
    debug_label_position: Point = field(default_factory=lambda: Point(22.0, 33.0))

    @property
    def starting_rect(self) -> Rect:
        return Rect.from_origin_size(self.starting_position, self.starting_size)

    @classmethod
    def from_dict(cls, region_id: str, data: dict[str, Any]) -> "RegionPreset":
        """
        Create RegionPreset from dictionary with camelCase keys.

        Missing keys are taken from the built-in preset of the same id when
        one exists.

        Args:
            region_id: Region identifier.
            data: Dictionary with borderColor, borderWidth, startingPosition,
                  startingSize, debugLabelPosition keys.

        Returns:
            RegionPreset instance.
        """
        merged = dict(DEFAULT_REGION_PRESETS.get(region_id, {}))
        merged.update(data)

        border_width = merged.get("borderWidth", REGION_BORDER_WIDTH)
        if not isinstance(border_width, (int, float)) or border_width < 0:
            logger.warning(f"Invalid borderWidth for region '{region_id}', using default")
            border_width = REGION_BORDER_WIDTH

        width, height = _parse_pair(merged.get("startingSize"), (100.0, 100.0))
        if width <= 0 or height <= 0:
            logger.warning(f"Invalid startingSize for region '{region_id}', using default")
            width, height = 100.0, 100.0

        return cls(
            id=region_id,
            border_color=_parse_color(merged.get("borderColor"), REGION_BORDER_COLOR),
            border_width=float(border_width),
            starting_position=Point(*_parse_pair(merged.get("startingPosition"), (0.0, 0.0))),
            starting_size=Size(width, height),
            debug_label_position=Point(*_parse_pair(merged.get("debugLabelPosition"), (22.0, 33.0)))
        )


@dataclass
class ReaderProfile:
    """
    Profile configuration loaded from JSON.

    Attributes:
        id: Unique identifier.
        name: Profile display name.
        reference_frame_size: View size the region rectangles are expressed in.
        orientation: Starting UI orientation.
        tracker: Tracker tuning shared by all regions.
        regions: Regions to track, each with its own session.
    """

    id: str
    name: str
    reference_frame_size: Size = field(
        default_factory=lambda: Size(DEFAULT_REFERENCE_WIDTH, DEFAULT_REFERENCE_HEIGHT)
    )
    orientation: Orientation = Orientation.PORTRAIT
    tracker: TrackerSettings = field(default_factory=TrackerSettings)
    regions: list[RegionPreset] = field(default_factory=list)

    def get_region(self, region_id: str) -> Optional[RegionPreset]:
        """
        Get a region by id.

        Args:
            region_id: Region id to look up (case-insensitive).

        Returns:
            RegionPreset if found, None otherwise.
        """
        region_lower = region_id.lower()
        for region in self.regions:
            if region.id.lower() == region_lower:
                return region
        return None


class ProfileLoadError(Exception):
    """Raised when profile loading or validation fails."""
    pass


def load_profile(profile_path: str | Path) -> ReaderProfile:
    """
    Load and validate a profile from a JSON file.

    Args:
        profile_path: Path to the JSON profile file.

    Returns:
        Validated ReaderProfile instance.

    Raises:
        ProfileLoadError: If file cannot be read or validation fails.
    """
    path = Path(profile_path)
    logger.info(f"Loading profile from: {path}")

    if not path.exists():
        raise ProfileLoadError(f"Profile file not found: {path}")

    if not path.is_file():
        raise ProfileLoadError(f"Profile path is not a file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ProfileLoadError(f"Invalid JSON in profile: {e}")
    except UnicodeDecodeError as e:
        raise ProfileLoadError(f"Profile is not valid UTF-8: {e}")
    except OSError as e:
        raise ProfileLoadError(f"Cannot read profile file: {e}")

    if not isinstance(data, dict):
        raise ProfileLoadError("Profile root must be a JSON object")

    return parse_profile(data)


def _clamp_int(data: dict[str, Any], key: str, default: int, min_val: int, max_val: int) -> int:
    """Read an int setting, falling back to the default and clamping to range."""
    value = data.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        logger.warning(f"Invalid {key}, using default: {default}")
        return default
    clamped = max(min_val, min(max_val, value))
    if clamped != value:
        logger.warning(f"{key}={value} out of range, clamped to {clamped}")
    return clamped


def _parse_tracker_settings(data: Any) -> TrackerSettings:
    if not isinstance(data, dict):
        return TrackerSettings()
    return TrackerSettings(
        aging_window=_clamp_int(data, "agingWindowFrames", TRACKER_AGING_WINDOW_FRAMES, 1, 10_000),
        confirmation_threshold=_clamp_int(
            data, "confirmationThreshold", TRACKER_CONFIRMATION_THRESHOLD, 1, 10_000
        ),
        max_substitutions=_clamp_int(data, "maxSubstitutions", MAX_CHARACTER_SUBSTITUTIONS, 0, 8)
    )


def parse_profile(data: dict[str, Any]) -> ReaderProfile:
    """
    Parse and validate profile data from dictionary.

    Args:
        data: Dictionary with camelCase profile properties.

    Returns:
        Validated ReaderProfile instance.

    Raises:
        ProfileLoadError: If required fields are missing or invalid.
    """
    if "id" not in data:
        raise ProfileLoadError("Profile missing required field: id")

    if "name" not in data:
        raise ProfileLoadError("Profile missing required field: name")

    # Reference frame size
    width, height = _parse_pair(
        data.get("referenceFrameSize"), (DEFAULT_REFERENCE_WIDTH, DEFAULT_REFERENCE_HEIGHT)
    )
    if width <= 0 or height <= 0:
        raise ProfileLoadError(f"Invalid referenceFrameSize: {width}x{height}")

    # Orientation
    orientation_raw = data.get("orientation", DEFAULT_ORIENTATION)
    try:
        orientation = Orientation.parse(str(orientation_raw))
    except ValueError:
        raise ProfileLoadError(
            f"Invalid orientation: {orientation_raw} "
            f"(expected one of {', '.join(o.value for o in Orientation)})"
        )

    tracker = _parse_tracker_settings(data.get("tracker"))

    # Regions
    regions: list[RegionPreset] = []
    regions_data = data.get("regions")
    if isinstance(regions_data, list) and regions_data:
        for region_data in regions_data:
            if isinstance(region_data, str):
                region_data = {"id": region_data}
            if not isinstance(region_data, dict) or not region_data.get("id"):
                logger.warning(f"Skipping region without id: {region_data}")
                continue
            regions.append(RegionPreset.from_dict(str(region_data["id"]), region_data))
    else:
        regions = [RegionPreset.from_dict(r, {}) for r in DEFAULT_ACTIVE_REGIONS]
        logger.debug(f"Applied default regions: {', '.join(DEFAULT_ACTIVE_REGIONS)}")

    if not regions:
        raise ProfileLoadError("Profile defines no valid regions")

    region_ids = [r.id.lower() for r in regions]
    duplicate_ids = {r for r in region_ids if region_ids.count(r) > 1}
    if duplicate_ids:
        raise ProfileLoadError(f"Duplicate region id(s): {', '.join(sorted(duplicate_ids))}")

    profile = ReaderProfile(
        id=str(data["id"]),
        name=str(data["name"]),
        reference_frame_size=Size(width, height),
        orientation=orientation,
        tracker=tracker,
        regions=regions
    )

    logger.info(f"Loaded profile: {profile.name} (id={profile.id})")
    logger.debug(f"  Reference frame: {width:g}x{height:g}")
    logger.debug(f"  Orientation: {profile.orientation.value}")
    logger.debug(f"  Aging window: {tracker.aging_window} frames")
    logger.debug(f"  Confirmation threshold: {tracker.confirmation_threshold}")
    logger.debug(f"  Regions: {', '.join(r.id for r in regions)}")

    return profile


def create_default_profile() -> ReaderProfile:
    """
    Create a default profile with standard settings.

    Returns:
        ReaderProfile with the default regions.
    """
    return ReaderProfile(
        id="default",
        name="Default",
        regions=[RegionPreset.from_dict(r, {}) for r in DEFAULT_ACTIVE_REGIONS]
    )
