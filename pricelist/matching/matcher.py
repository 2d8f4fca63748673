"""
Fuzzy Matching Engine

Resolves an extracted card name against the catalog. Each catalog name is
scored on three script variants (as-is, katakana-shifted, hiragana-shifted)
so a name typed or read in hiragana still finds a katakana catalog entry.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .normalize import normalize, to_hiragana, to_katakana
from .similarity import similarity

logger = logging.getLogger(__name__)


DEFAULT_THRESHOLD = 50
DEFAULT_MAX_RESULTS = 5


@dataclass(frozen=True)
class CatalogEntry:
    """A known card name."""
    catalog_id: str
    name: str

    @classmethod
    def coerce(cls, entry: Union['CatalogEntry', Mapping[str, Any]]) -> 'CatalogEntry':
        """Accept CatalogEntry objects or {id, name} mappings."""
        if isinstance(entry, CatalogEntry):
            return entry
        return cls(catalog_id=str(entry["id"]), name=str(entry.get("name") or ""))


@dataclass(frozen=True)
class MatchCandidate:
    """
    One ranked match.

    Attributes:
        catalog_id: Catalog identifier of the matched card
        name: Catalog name as stored
        similarity: Score 0-100
    """
    catalog_id: str
    name: str
    similarity: int

    @property
    def is_exact(self) -> bool:
        return self.similarity == 100

    def to_dict(self) -> dict:
        return {"id": self.catalog_id, "name": self.name, "similarity": self.similarity}


Variants = Tuple[str, str, str]


def script_variants(name: str) -> Variants:
    """(normalized, katakana-shifted, hiragana-shifted) forms of a name."""
    base = normalize(name)
    return base, to_katakana(base), to_hiragana(base)


def score(search: Variants, catalog: Variants) -> int:
    """Best similarity across the paired script variants."""
    return max(similarity(s, c) for s, c in zip(search, catalog))


def match(
    candidate_name: Optional[str],
    catalog: Iterable[Union[CatalogEntry, Mapping[str, Any]]],
    threshold: int = DEFAULT_THRESHOLD,
    max_results: int = DEFAULT_MAX_RESULTS
) -> List[MatchCandidate]:
    """
    Rank catalog entries by similarity to a candidate name.

    Args:
        candidate_name: Extracted name (None/empty yields no matches)
        catalog: Catalog entries, scored in order
        threshold: Minimum similarity to keep (0-100, inclusive)
        max_results: Maximum number of candidates returned

    Returns:
        Up to max_results candidates with similarity >= threshold, best
        first; equal scores keep catalog order
    """
    if not 0 <= threshold <= 100:
        raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
    if max_results < 1:
        raise ValueError(f"max_results must be >= 1, got {max_results}")

    search = script_variants(candidate_name or "")
    if not search[0]:
        return []

    scored: List[MatchCandidate] = []
    for raw_entry in catalog:
        entry = CatalogEntry.coerce(raw_entry)
        entry_score = score(search, script_variants(entry.name))
        if entry_score >= threshold:
            scored.append(MatchCandidate(entry.catalog_id, entry.name, entry_score))

    # sorted() is stable, so ties stay in catalog order
    ranked = sorted(scored, key=lambda c: c.similarity, reverse=True)[:max_results]

    if ranked:
        logger.debug(f"'{candidate_name}' -> {ranked[0].name} ({ranked[0].similarity}), "
                     f"{len(scored)} above {threshold}")
    else:
        logger.debug(f"'{candidate_name}' -> no match above {threshold}")
    return ranked


def find_best_match(
    candidate_name: Optional[str],
    catalog: Iterable[Union[CatalogEntry, Mapping[str, Any]]],
    min_similarity: int = 70
) -> Optional[MatchCandidate]:
    """Return the single best candidate at or above min_similarity, or None."""
    candidates = match(candidate_name, catalog, threshold=min_similarity, max_results=1)
    return candidates[0] if candidates else None
