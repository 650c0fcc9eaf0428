"""
Temporal string tracker for RealtimeNumberReader.

Ages and counts extracted strings across frames so that a single stable
reading is only reported once the recognizer agrees with itself for long
enough. Aging is driven by the number of logged frames, not wall-clock time.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .config import TRACKER_AGING_WINDOW_FRAMES, TRACKER_CONFIRMATION_THRESHOLD
from .logger import get_logger

logger = get_logger("StringTracker")


@dataclass
class TrackedString:
    """One distinct extracted string currently being watched."""
    value: str
    last_seen_frame: int = 0
    count: int = -1  # Times seen minus one; reads 0 after the first sighting


class StringTracker:
    """
    Debounces a noisy per-frame stream of strings into a confirmed value.

    Callers must log exactly one frame per received video frame, including
    frames with no strings, or the aging window drifts in real time.

    Attributes:
        aging_window: Frames an entry may go unseen before it is dropped.
        confirmation_threshold: Best count required for a stable string.
    """

    def __init__(
        self,
        aging_window: int = TRACKER_AGING_WINDOW_FRAMES,
        confirmation_threshold: int = TRACKER_CONFIRMATION_THRESHOLD
    ):
        self.aging_window = aging_window
        self.confirmation_threshold = confirmation_threshold

        self._frame_index: int = 0
        self._entries: dict[str, TrackedString] = {}
        self._best_count: int = 0
        self._best_value: str = ""

    @property
    def frame_index(self) -> int:
        """Index of the next frame to be logged."""
        return self._frame_index

    @property
    def best_count(self) -> int:
        return self._best_count

    @property
    def best_value(self) -> str:
        return self._best_value

    @property
    def entries(self) -> Mapping[str, TrackedString]:
        """Read-only view of the tracked strings."""
        return MappingProxyType(self._entries)

    def count_of(self, value: str) -> Optional[int]:
        """Get the count of a tracked string, or None if not tracked."""
        entry = self._entries.get(value)
        return entry.count if entry else None

    def log_frame(self, strings: Iterable[str]) -> None:
        """
        Record the strings extracted from one frame.

        Sightings of the current frame are counted before pruning, so a
        string first seen in this frame can already become the best one.

        Args:
            strings: Strings extracted from the frame (may be empty).
        """
        for string in strings:
            entry = self._entries.get(string)
            if entry is None:
                entry = TrackedString(value=string)
                self._entries[string] = entry
            entry.last_seen_frame = self._frame_index
            entry.count += 1
            logger.debug(f"Seen '{string}' {entry.count} times")

        # Prune old strings and find the non-pruned string with the greatest count
        obsolete: list[str] = []
        for string, entry in self._entries.items():
            if entry.last_seen_frame < self._frame_index - self.aging_window:
                obsolete.append(string)
                continue

            if entry.count > self._best_count:
                self._best_count = entry.count
                self._best_value = string

        for string in obsolete:
            del self._entries[string]
        if obsolete:
            logger.debug(f"Aged out {len(obsolete)} string(s) at frame {self._frame_index}")

        self._frame_index += 1

    def get_stable_string(self) -> Optional[str]:
        """
        Get the confirmed string, if any.

        Returns:
            Best string once its count reaches the confirmation threshold,
            None otherwise. Never the empty placeholder left by reset().
        """
        if self._best_value and self._best_count >= self.confirmation_threshold:
            return self._best_value
        return None

    def get_current_string(self) -> str:
        """Get the current best candidate, confirmed or not (may be empty)."""
        return self._best_value

    def reset(self, confirmed: str) -> None:
        """
        Forget a confirmed string after it has been consumed.

        The frame index and all other tracked strings are left untouched.

        Args:
            confirmed: The string returned by get_stable_string().
        """
        self._entries.pop(confirmed, None)
        self._best_count = 0
        self._best_value = ""

    def clear(self) -> None:
        """Drop all tracking state and restart frame counting."""
        self._frame_index = 0
        self._entries.clear()
        self._best_count = 0
        self._best_value = ""
