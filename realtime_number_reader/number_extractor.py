"""
Number extraction from noisy recognized text.

Pulls a digit/space run out of a recognized line by normalizing confusable
characters (e.g. 'O' -> '0', 'l' -> '1'). A line only qualifies when it
contains at least two whitespace-separated tokens.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .character_normalizer import normalize_character
from .config import NUMBER_ALLOWED_CHARACTERS, MAX_CHARACTER_SUBSTITUTIONS
from .logger import get_logger

logger = get_logger("NumberExtractor")

TOKEN_PAIR_PATTERN = re.compile(r"\S+\s+\S+")


@dataclass(frozen=True)
class TextSpan:
    """Half-open character range [start, end) into the original text."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def covers(self, text: str) -> bool:
        """Check whether the span is the entire text."""
        return self.start == 0 and self.end == len(text)


def sanitize(
    text: str,
    allowed: str = NUMBER_ALLOWED_CHARACTERS,
    max_substitutions: int = MAX_CHARACTER_SUBSTITUTIONS
) -> str:
    """
    Normalize every character of text and keep only the allowed results.

    Characters that cannot be converted are dropped, not kept verbatim.
    """
    allowed_set = set(allowed)
    result = []
    for char in text:
        char = normalize_character(char, allowed_set, max_substitutions)
        if char in allowed_set:
            result.append(char)
    return "".join(result)


def extract_number(
    text: str,
    allowed: str = NUMBER_ALLOWED_CHARACTERS,
    max_substitutions: int = MAX_CHARACTER_SUBSTITUTIONS
) -> Optional[tuple[TextSpan, str]]:
    """
    Extract a number from a recognized text line.

    The returned span is the first token-space-token match in the original
    text and is only used to look up a bounding sub-box. The returned string
    is sanitized from the whole text, not just the spanned part.

    Args:
        text: Recognized text line.
        allowed: Allowed output alphabet.
        max_substitutions: Confusion-table hop cap per character.

    Returns:
        Tuple of (span, sanitized_string), or None if the text has no
        token pair or nothing survives sanitization.
    """
    match = TOKEN_PAIR_PATTERN.search(text)
    if match is None:
        return None

    result = sanitize(text, allowed, max_substitutions)
    if not result:
        return None

    logger.debug(f"Sanitized '{text}' -> '{result}'")
    return TextSpan(match.start(), match.end()), result
