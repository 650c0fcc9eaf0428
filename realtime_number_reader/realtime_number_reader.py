#!/usr/bin/env python3
"""
Realtime Number Reader

Command-line entry point. Replays recorded recognizer output (one JSON object
per line) through one recognition session per profile region and prints
every confirmed number.

Usage:
    realtime-number-reader --observations <path> [--profile <path>] [--debug]

Each input line is one of:
    {"region": "ollie", "observations": [{"text": "...", "box": [x, y, w, h]}]}
    {"event": "orientation", "value": "landscapeLeft"}
    {"event": "deviceOrientation", "value": "landscapeLeft"}
    {"event": "pan", "region": "ollie", "translation": [dx, dy]}
    {"event": "pinch", "region": "ollie", "scale": 1.25}
    {"event": "reset"}

"orientation" takes a capture orientation; "deviceOrientation" takes a device
orientation and maps it to the capture one (face-up and face-down are ignored).
A frame without "region" goes to every region. Regions not named by a frame
still log an empty frame so their aging windows advance together.

Exit Codes:
    0 - Success
    1 - Profile error
    2 - Input error
    3 - Runtime error
"""

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import cv2
import numpy as np

from .config import (
    EXIT_SUCCESS,
    EXIT_PROFILE_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_RUNTIME_ERROR,
)
from .geometry import CoordinateOrigin, NormalizedRect, Orientation
from .logger import setup_logging, get_logger
from .overlay import draw_region, draw_render_boxes
from .profile_loader import (
    ProfileLoadError,
    ReaderProfile,
    RegionPreset,
    create_default_profile,
    load_profile,
)
from .region_of_interest import RegionOfInterestManager
from .text_recognizer import FrameResult, Observation, TextRecognizer

logger = get_logger("App")


class ObservationLoadError(Exception):
    """Raised when a replay input line cannot be parsed."""
    pass


@dataclass
class ReplayEvent:
    """One parsed input line."""
    kind: str  # "frame", "orientation", "pan", "pinch", "reset"
    line_number: int
    region: Optional[str] = None
    observations: Optional[list[Observation]] = None
    value: Any = None


def _parse_box(value: Any, line_number: int) -> NormalizedRect:
    if (
        not isinstance(value, list) or len(value) != 4 or
        not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    ):
        raise ObservationLoadError(f"Line {line_number}: box must be [x, y, width, height]")
    x, y, w, h = (float(v) for v in value)
    return NormalizedRect(x, y, w, h, CoordinateOrigin.BOTTOM_LEFT)


def parse_event(data: Any, line_number: int) -> ReplayEvent:
    """
    Parse one decoded input line.

    Raises:
        ObservationLoadError: If the line is malformed.
    """
    if not isinstance(data, dict):
        raise ObservationLoadError(f"Line {line_number}: expected a JSON object")

    region = data.get("region")
    if region is not None and not isinstance(region, str):
        raise ObservationLoadError(f"Line {line_number}: region must be a string")

    kind = data.get("event", "frame")

    if kind == "frame":
        raw = data.get("observations", [])
        if not isinstance(raw, list):
            raise ObservationLoadError(f"Line {line_number}: observations must be a list")
        observations = []
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("text"), str):
                raise ObservationLoadError(f"Line {line_number}: observation needs a text string")
            observations.append(Observation(item["text"], _parse_box(item.get("box"), line_number)))
        return ReplayEvent("frame", line_number, region=region, observations=observations)

    if kind == "orientation":
        try:
            value = Orientation.parse(str(data.get("value", "")))
        except ValueError as e:
            raise ObservationLoadError(f"Line {line_number}: {e}")
        return ReplayEvent("orientation", line_number, value=value)

    if kind == "deviceOrientation":
        # Face-up, face-down and unknown device orientations carry None
        value = Orientation.from_device_orientation(str(data.get("value", "")))
        return ReplayEvent("orientation", line_number, value=value)

    if kind == "pan":
        translation = data.get("translation")
        if (
            not isinstance(translation, list) or len(translation) != 2 or
            not all(isinstance(v, (int, float)) for v in translation)
        ):
            raise ObservationLoadError(f"Line {line_number}: pan needs translation [dx, dy]")
        return ReplayEvent("pan", line_number, region=region, value=(float(translation[0]), float(translation[1])))

    if kind == "pinch":
        scale = data.get("scale")
        if not isinstance(scale, (int, float)) or isinstance(scale, bool):
            raise ObservationLoadError(f"Line {line_number}: pinch needs a numeric scale")
        return ReplayEvent("pinch", line_number, region=region, value=float(scale))

    if kind == "reset":
        return ReplayEvent("reset", line_number, region=region)

    raise ObservationLoadError(f"Line {line_number}: unknown event '{kind}'")


def read_events(path: str | Path) -> Iterator[ReplayEvent]:
    """
    Read replay events from a JSON-lines file. Blank lines are skipped.

    Raises:
        ObservationLoadError: If the file cannot be read or a line is malformed.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ObservationLoadError(f"Line {line_number}: invalid JSON: {e}")
                yield parse_event(data, line_number)
    except UnicodeDecodeError as e:
        raise ObservationLoadError(f"Observations file {path} is not valid UTF-8: {e}")
    except OSError as e:
        raise ObservationLoadError(f"Cannot read observations file {path}: {e}")


class NumberReaderApp:
    """
    One recognition session per profile region.

    Attributes:
        profile: Loaded reader profile.
        sessions: Recognition sessions keyed by region id.
    """

    def __init__(
        self,
        profile: ReaderProfile,
        on_confirmed: Optional[Callable[[str, str], None]] = None
    ):
        """
        Initialize the app.

        Args:
            profile: Reader profile.
            on_confirmed: Called with (region_id, number) for each confirmation.
        """
        self.profile = profile
        self.on_confirmed = on_confirmed
        self.sessions: dict[str, TextRecognizer] = {}
        self.confirmed: list[tuple[str, str]] = []
        self.last_confirmed: dict[str, str] = {}

        for preset in profile.regions:
            roi = RegionOfInterestManager(
                preset.starting_rect,
                profile.reference_frame_size,
                profile.orientation
            )
            self.sessions[preset.id] = TextRecognizer(
                roi,
                callback=self._make_callback(preset.id),
                name=preset.id,
                settings=profile.tracker
            )

        logger.info(f"Created {len(self.sessions)} session(s): {', '.join(self.sessions)}")

    def _make_callback(self, region_id: str) -> Callable[[str], None]:
        def callback(number: str) -> None:
            self.confirmed.append((region_id, number))
            self.last_confirmed[region_id] = number
            if self.on_confirmed:
                self.on_confirmed(region_id, number)
        return callback

    def _targets(self, region: Optional[str], line_number: int) -> list[TextRecognizer]:
        if region is None:
            return list(self.sessions.values())
        session = self.sessions.get(region)
        if session is None:
            raise ObservationLoadError(f"Line {line_number}: unknown region '{region}'")
        return [session]

    def process_frame(
        self,
        observations: list[Observation],
        region: Optional[str] = None
    ) -> dict[str, FrameResult]:
        """
        Feed one frame to the named region (or every region).

        The other regions log an empty frame.
        """
        if region is not None and region not in self.sessions:
            raise KeyError(f"Unknown region: {region}")

        results = {}
        for region_id, session in self.sessions.items():
            frame = observations if region is None or region_id == region else []
            results[region_id] = session.process_frame(frame)
        return results

    def handle(self, event: ReplayEvent) -> Optional[dict[str, FrameResult]]:
        """Apply one replay event."""
        if event.kind == "frame":
            if event.region is not None and event.region not in self.sessions:
                raise ObservationLoadError(f"Line {event.line_number}: unknown region '{event.region}'")
            return self.process_frame(event.observations or [], event.region)

        if event.kind == "orientation":
            if event.value is None:
                logger.debug(f"Line {event.line_number}: no capture orientation, keeping current")
                return None
            for session in self.sessions.values():
                session.set_orientation(event.value)
        elif event.kind == "pan":
            for session in self._targets(event.region, event.line_number):
                session.begin_pan()
                session.update_pan(*event.value)
                session.end_pan()
        elif event.kind == "pinch":
            for session in self._targets(event.region, event.line_number):
                session.pinch(event.value)
        elif event.kind == "reset":
            for session in self._targets(event.region, event.line_number):
                session.reset()
        return None

    def region_label(self, region_id: str) -> Optional[str]:
        """
        Debug label of a region.

        Shows the last confirmed number, which stays up after the tracker
        forgets it; falls back to the current candidate before the first
        confirmation.
        """
        last = self.last_confirmed.get(region_id)
        if last is not None:
            return f"Number: {last}"
        return self.sessions[region_id].tracker.get_current_string() or None

    def reset_all(self) -> None:
        """Reset every region (the reset button)."""
        for session in self.sessions.values():
            session.reset()

    def render(self, width: int, height: int) -> np.ndarray:
        """
        Render the regions and the last frame's boxes onto a blank image.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            BGR image.
        """
        image = np.full((height, width, 3), 255, dtype=np.uint8)
        presets: dict[str, RegionPreset] = {p.id: p for p in self.profile.regions}
        for region_id, session in self.sessions.items():
            draw_render_boxes(image, session.render_boxes())
            draw_region(
                image,
                session.roi.rect,
                presets[region_id],
                label=self.region_label(region_id),
                view_size=self.profile.reference_frame_size
            )
        return image


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Realtime Number Reader - replay recognizer output and confirm stable numbers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0  Success
  1  Profile error (file not found, invalid JSON)
  2  Input error (observations file unreadable or malformed)
  3  Runtime error (unexpected error)

Examples:
  realtime-number-reader --observations frames.jsonl
  realtime-number-reader --profile reader.json --observations frames.jsonl
  realtime-number-reader --observations frames.jsonl --overlay-dir out/ --debug
"""
    )

    parser.add_argument(
        "--observations", "-o",
        required=True,
        help="Path to JSON-lines file of recorded frames and gesture events"
    )

    parser.add_argument(
        "--profile", "-p",
        default=None,
        help="Path to JSON profile file (default: built-in profile)"
    )

    parser.add_argument(
        "--orientation",
        default=None,
        help="Override the profile's starting orientation"
    )

    parser.add_argument(
        "--overlay-dir",
        default=None,
        help="Write one overlay PNG per frame into this directory"
    )

    parser.add_argument(
        "--overlay-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=None,
        help="Overlay image size in pixels (default: reference frame size)"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only"
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code.
    """
    args = parse_args(argv)

    logger = setup_logging(debug=args.debug, log_to_file=not args.no_log_file)
    logger.info("Realtime Number Reader starting...")

    try:
        profile = load_profile(args.profile) if args.profile else create_default_profile()
    except ProfileLoadError as e:
        logger.error(f"Failed to load profile: {e}")
        return EXIT_PROFILE_ERROR

    if args.orientation:
        try:
            profile.orientation = Orientation.parse(args.orientation)
        except ValueError as e:
            logger.error(f"Invalid orientation override: {e}")
            return EXIT_PROFILE_ERROR

    overlay_dir: Optional[Path] = None
    if args.overlay_dir:
        overlay_dir = Path(args.overlay_dir)
        try:
            overlay_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create overlay directory {overlay_dir}: {e}")
            return EXIT_RUNTIME_ERROR

    if args.overlay_size:
        overlay_w, overlay_h = args.overlay_size
    else:
        overlay_w = int(profile.reference_frame_size.width)
        overlay_h = int(profile.reference_frame_size.height)

    def print_confirmed(region_id: str, number: str) -> None:
        print(f"{region_id}: {number}", flush=True)

    try:
        app = NumberReaderApp(profile, on_confirmed=print_confirmed)

        frame_count = 0
        for event in read_events(args.observations):
            results = app.handle(event)
            if results is None:
                continue
            frame_count += 1
            if overlay_dir is not None:
                image = app.render(overlay_w, overlay_h)
                out_path = overlay_dir / f"frame_{frame_count:06d}.png"
                if not cv2.imwrite(str(out_path), image):
                    logger.warning(f"Failed to write overlay: {out_path}")

        logger.info(
            f"Replay finished. Processed {frame_count} frames, "
            f"{len(app.confirmed)} number(s) confirmed"
        )
        return EXIT_SUCCESS

    except ObservationLoadError as e:
        logger.error(f"Input error: {e}")
        return EXIT_INPUT_ERROR
    except Exception as e:
        logger.exception(f"Runtime error: {e}")
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
