"""
Name Extraction Heuristic

Derives a single card-name candidate from the raw OCR text of one card cell,
and parses prices from the OCR text of price cells.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

logger = logging.getLogger(__name__)


# Short canonical junk tokens that are never a card name on their own
DEFAULT_EXCLUDE_EXACT = frozenset({
    "HP", "GEM", "MINT", "PSA", "BGS", "CGC", "ARS",
})

# Structural words of price lists: evolution stage, grading, buy price, stock...
DEFAULT_EXCLUDE_CONTAINS = frozenset({
    "進化", "たね", "鑑定", "買取", "価格", "円", "枚", "在庫",
})

# Lines made of digits only ("130", "1,200")
NUMERIC_LINE = re.compile(r"^[\d\s,]+$")

# Grade-number noise such as "HP120" / "HP 60"
GRADE_PREFIX = re.compile(r"^HP\s*\d+", re.IGNORECASE)

WHITESPACE = re.compile(r"\s+")
BRACKETS = re.compile(r"[「」『』【】\[\]()（）<>〈〉《》\"'“”‘’]")
GRADING_TOKEN = re.compile(r"(?:PSA|BGS|CGC|ARS)\d+(?:\.\d+)?", re.IGNORECASE)
TRAILING_DIGITS = re.compile(r"\d+$")
LEADING_DIGITS = re.compile(r"^\d+")

# Full-width digits and separators that show up in OCR'd prices
_PRICE_FOLD = str.maketrans({
    **{chr(0xFF10 + i): str(i) for i in range(10)},
    "，": ",",
    "、": ",",
})
PRICE_DIGITS = re.compile(r"\d[\d,]*")

# Misreadings seen often enough to fix before matching
KNOWN_ERRORS = {
    "ピカチユウ": "ピカチュウ",
    "リザ一ドン": "リザードン",
    "ミユウツー": "ミュウツー",
    "ミユウ": "ミュウ",
    "バイパーボール": "ハイパーボール",
    "バイバーボール": "ハイパーボール",
    "ハイバーボール": "ハイパーボール",
}


@dataclass(frozen=True)
class ExtractionSettings:
    """
    Tuning for extract_name().

    Attributes:
        max_lines: Number of non-empty lines examined, from the top
        min_length: Minimum candidate length after normalization
        exclude_exact: Lines/candidates rejected on exact equality
        exclude_contains: Substrings that reject a candidate
    """
    max_lines: int = 5
    min_length: int = 2
    exclude_exact: FrozenSet[str] = field(default_factory=lambda: DEFAULT_EXCLUDE_EXACT)
    exclude_contains: FrozenSet[str] = field(default_factory=lambda: DEFAULT_EXCLUDE_CONTAINS)

    def __post_init__(self):
        if int(self.max_lines) < 1:
            raise ValueError(f"max_lines must be >= 1, got {self.max_lines}")
        if int(self.min_length) < 1:
            raise ValueError(f"min_length must be >= 1, got {self.min_length}")
        object.__setattr__(self, "exclude_exact", frozenset(self.exclude_exact))
        object.__setattr__(self, "exclude_contains", frozenset(self.exclude_contains))

    @classmethod
    def from_dict(cls, data: dict) -> 'ExtractionSettings':
        """Build settings from a config section, falling back to defaults per key."""
        defaults = cls()
        return cls(
            max_lines=int(data.get("max_lines", defaults.max_lines)),
            min_length=int(data.get("min_length", defaults.min_length)),
            exclude_exact=frozenset(data.get("exclude_exact", defaults.exclude_exact)),
            exclude_contains=frozenset(data.get("exclude_contains", defaults.exclude_contains)),
        )

    def to_dict(self) -> dict:
        return {
            "max_lines": self.max_lines,
            "min_length": self.min_length,
            "exclude_exact": sorted(self.exclude_exact),
            "exclude_contains": sorted(self.exclude_contains),
        }


def _non_empty_lines(raw_text: str) -> List[str]:
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def normalize_candidate(line: str) -> str:
    """
    Clean one OCR line into a name candidate.

    Removes whitespace, brackets/quotes and grading tokens ("PSA10"), then
    strips a trailing and a leading run of digits.
    """
    name = WHITESPACE.sub("", line)
    name = BRACKETS.sub("", name)
    name = GRADING_TOKEN.sub("", name)
    name = TRAILING_DIGITS.sub("", name)
    name = LEADING_DIGITS.sub("", name)
    return name


def _fallback(line: str) -> str:
    name = WHITESPACE.sub("", line)
    name = GRADING_TOKEN.sub("", name)
    name = TRAILING_DIGITS.sub("", name)
    return name or line


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle and needle in text for needle in needles)


def extract_name(raw_text: Optional[str], settings: ExtractionSettings = ExtractionSettings()) -> Optional[str]:
    """
    Pick the most likely card name from a card cell's OCR text.

    Lines are examined top-down (at most settings.max_lines). Numeric lines
    and "HP<digits>" lines are skipped first; the remaining lines are
    normalized and rejected on exact-match exclusion, then on substring
    exclusion, then on length. The first survivor wins.

    If no line survives, the first non-empty line is returned with only
    whitespace, grading tokens and trailing digits stripped.

    Args:
        raw_text: Multi-line OCR output for one cell
        settings: Extraction tuning

    Returns:
        Candidate string, or None if the text has no non-empty lines
    """
    if not raw_text:
        return None

    lines = _non_empty_lines(raw_text)
    if not lines:
        return None

    for line in lines[:settings.max_lines]:
        if NUMERIC_LINE.match(line):
            continue
        if GRADE_PREFIX.match(line):
            continue

        candidate = normalize_candidate(line)

        if line in settings.exclude_exact or candidate in settings.exclude_exact:
            continue
        if _contains_any(candidate, settings.exclude_contains):
            continue
        if len(candidate) < settings.min_length:
            continue

        return candidate

    fallback = _fallback(lines[0])
    logger.debug(f"No line survived extraction, falling back to '{fallback}'")
    return fallback


def extract_price(text: Optional[str]) -> Optional[int]:
    """
    Parse a price from OCR text.

    Currency symbols and thousands separators are ignored; the first run of
    digits is used.

    Returns:
        Positive integer price, or None if no usable digits were found
    """
    if not text:
        return None

    match = PRICE_DIGITS.search(text.translate(_PRICE_FOLD))
    if not match:
        return None

    price = int(match.group(0).replace(",", ""))
    return price if price > 0 else None


def correct_known_errors(name: Optional[str]) -> Optional[str]:
    """Replace known OCR misreadings inside a candidate name."""
    if not name:
        return name
    corrected = name
    for wrong, right in KNOWN_ERRORS.items():
        corrected = corrected.replace(wrong, right)
    return corrected
