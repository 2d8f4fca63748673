"""
Normalization utilities for card-name matching
"""

import re


# Hiragana ぁ..ゖ and katakana ァ..ヶ are 0x60 code points apart
KANA_OFFSET = 0x60
HIRAGANA_RANGE = re.compile("[ぁ-ゖ]")
KATAKANA_RANGE = re.compile("[ァ-ヶ]")

WHITESPACE = re.compile(r"\s+")

# Full-width Latin letters/digits -> half-width
_FULL_WIDTH = str.maketrans({
    chr(code): chr(code - 0xFEE0)
    for code in list(range(0xFF10, 0xFF1A)) + list(range(0xFF21, 0xFF3B)) + list(range(0xFF41, 0xFF5B))
})

# Hyphens, dashes and the long-vowel marks OCR confuses with them
_DASHES = str.maketrans({
    "‐": "-",  # hyphen
    "‑": "-",  # non-breaking hyphen
    "‒": "-",  # figure dash
    "–": "-",  # en dash
    "—": "-",  # em dash
    "―": "-",  # horizontal bar
    "−": "-",  # minus sign
    "ー": "-",  # katakana prolonged sound mark
    "－": "-",  # full-width hyphen-minus
    "ｰ": "-",  # half-width prolonged sound mark
})


def normalize(name: str) -> str:
    """
    Fold a name for comparison.

    Full-width letters/digits become half-width, text is lowercased, all
    whitespace is removed and dash variants collapse to "-". Idempotent.
    """
    if not name:
        return ""
    folded = name.translate(_FULL_WIDTH).lower()
    folded = WHITESPACE.sub("", folded)
    return folded.translate(_DASHES)


def to_katakana(text: str) -> str:
    """Hiragana -> katakana by code-point shift."""
    return HIRAGANA_RANGE.sub(lambda m: chr(ord(m.group(0)) + KANA_OFFSET), text)


def to_hiragana(text: str) -> str:
    """Katakana -> hiragana by code-point shift."""
    return KATAKANA_RANGE.sub(lambda m: chr(ord(m.group(0)) - KANA_OFFSET), text)


def contains_hiragana(text: str) -> bool:
    return bool(HIRAGANA_RANGE.search(text))


def contains_katakana(text: str) -> bool:
    return bool(KATAKANA_RANGE.search(text))
