"""
Visually-confusable character normalization.

Recognizers regularly confuse characters that only differ by size or font
(oO, sS), or that are drawn identically in common typefaces (1/l in Times,
I/l in Helvetica, 0/O nearly everywhere). Given an allowed alphabet, these
helpers walk a fixed confusion table until an allowed character is reached.
"""

from typing import Iterable, Union

from .config import MAX_CHARACTER_SUBSTITUTIONS

# Each entry is a single hop; chains are followed up to the substitution cap
CONFUSION_TABLE: dict[str, str] = {
    "s": "S",
    "S": "5",
    "5": "S",
    "o": "O",
    "Q": "O",
    "O": "0",
    "0": "O",
    "l": "I",
    "I": "1",
    "1": "I",
    "B": "8",
    "8": "B",
}


def normalize_character(
    char: str,
    allowed: Union[str, Iterable[str]],
    max_substitutions: int = MAX_CHARACTER_SUBSTITUTIONS
) -> str:
    """
    Map a character onto the allowed alphabet if a confusable one exists.

    Args:
        char: Single character to normalize.
        allowed: Allowed alphabet (string or collection of characters).
        max_substitutions: Maximum confusion-table hops to follow.

    Returns:
        The character unchanged if already allowed, the first allowed
        character reached through the confusion table, or the last character
        visited when no allowed one is reachable within the cap. Callers
        check membership themselves and drop unconvertible characters.
    """
    allowed_set = allowed if isinstance(allowed, (set, frozenset)) else set(allowed)

    current = char
    hops = 0
    while current not in allowed_set and hops < max_substitutions:
        substitute = CONFUSION_TABLE.get(current)
        if substitute is None:
            break
        current = substitute
        hops += 1

    return current
