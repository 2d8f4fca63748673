"""
String similarity scoring (0-100)
"""

import math

from rapidfuzz.distance import Levenshtein


# A substring match is capped below a perfect score; 100 is reserved for equality
CONTAINMENT_WEIGHT = 90


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def levenshtein_distance(a: str, b: str) -> int:
    """
    Edit distance over code points.

    Insertions, deletions and substitutions all cost 1.
    """
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> int:
    """
    Score how closely two (already normalized) strings match.

    - Equal strings score 100.
    - If one contains the other: round(len(shorter) / len(longer) * 90).
    - Otherwise: round((1 - distance / max_len) * 100), floored at 0.

    Args:
        a: First string
        b: Second string

    Returns:
        Integer similarity 0-100
    """
    if a == b:
        return 100

    if a in b or b in a:
        shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
        return round_half_up(len(shorter) / len(longer) * CONTAINMENT_WEIGHT)

    distance = levenshtein_distance(a, b)
    max_len = max(len(a), len(b))
    return max(0, round_half_up((1 - distance / max_len) * 100))
