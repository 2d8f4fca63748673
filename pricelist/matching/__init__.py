"""
Matching Package - Fuzzy, script-aware card-name matching.

Public API:
    - match(): Ranked, thresholded catalog matches for a name
    - find_best_match(): Single best match or None
    - CatalogEntry / MatchCandidate: Input and output records
    - normalize(), to_katakana(), to_hiragana(): Name folding
    - similarity(), levenshtein_distance(): Scoring primitives

Usage:
    from pricelist.matching import match

    candidates = match("ぴかちゅう", [{"id": "1", "name": "ピカチュウ"}], threshold=70)
    # [MatchCandidate(catalog_id='1', name='ピカチュウ', similarity=100)]
"""

from .normalize import (
    normalize,
    to_katakana,
    to_hiragana,
    contains_hiragana,
    contains_katakana,
)
from .similarity import (
    levenshtein_distance,
    similarity,
    round_half_up,
)
from .matcher import (
    CatalogEntry,
    MatchCandidate,
    match,
    find_best_match,
    script_variants,
    DEFAULT_THRESHOLD,
    DEFAULT_MAX_RESULTS,
)

__all__ = [
    # Normalization
    "normalize",
    "to_katakana",
    "to_hiragana",
    "contains_hiragana",
    "contains_katakana",
    # Scoring
    "levenshtein_distance",
    "similarity",
    "round_half_up",
    # Matching
    "CatalogEntry",
    "MatchCandidate",
    "match",
    "find_best_match",
    "script_variants",
    "DEFAULT_THRESHOLD",
    "DEFAULT_MAX_RESULTS",
]
