"""
Test script for fuzzy card-name matching

Covers:
1. Name normalization and kana shifting
2. Similarity scoring (equality, containment, edit distance)
3. Ranked catalog matching

Usage:
    python test_matching.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pricelist.matching import (
    CatalogEntry,
    MatchCandidate,
    contains_hiragana,
    contains_katakana,
    find_best_match,
    levenshtein_distance,
    match,
    normalize,
    round_half_up,
    similarity,
    to_hiragana,
    to_katakana,
)


def test_normalize():
    """Test width folding, case, whitespace and dash handling."""
    print("\n" + "="*60)
    print("TEST: Normalization")
    print("="*60)

    assert normalize("ＰＩＫＡ ｃｈｕ１") == "pikachu1"
    assert normalize("  Mew\tTwo ") == "mewtwo"
    assert normalize("スーパー") == "ス-パ-"
    assert normalize("A－B―C") == "a-b-c"
    assert normalize("") == ""

    for text in ("ＰＩＫＡ ｃｈｕ", "リザードンＥＸ", "ぴかちゅう"):
        once = normalize(text)
        assert normalize(once) == once, f"not idempotent for {text!r}"

    print("  [PASS] Normalization tests")


def test_kana_shift():
    """Test hiragana <-> katakana conversion."""
    print("\n" + "="*60)
    print("TEST: Kana shift")
    print("="*60)

    assert to_katakana("ぴかちゅう") == "ピカチュウ"
    assert to_hiragana("ピカチュウ") == "ぴかちゅう"
    # Characters outside the kana ranges are untouched
    assert to_katakana("ex-ぴか") == "ex-ピカ"
    assert to_hiragana("リザ-ドンex") == "りざ-どんex"

    assert contains_hiragana("ピカちゅう")
    assert not contains_hiragana("ピカチュウ")
    assert contains_katakana("ピカ")
    assert not contains_katakana("pika")

    print("  [PASS] Kana shift tests")


def test_similarity():
    """Test the three scoring rules."""
    print("\n" + "="*60)
    print("TEST: Similarity")
    print("="*60)

    assert similarity("abc", "abc") == 100
    assert levenshtein_distance("kitten", "sitting") == 3

    # Edit distance: 1 - 1/3 = 66.67%
    assert similarity("abc", "abd") == 67
    assert similarity("abc", "xyz") == 0

    # Containment: 3/7 * 90 = 38.57
    assert similarity("マリオ", "ス-パ-マリオ") == 39
    assert similarity("ス-パ-マリオ", "マリオ") == 39
    # 5/6 * 90 = 75
    assert similarity("ピカチュウ", "ピカチュウv") == 75

    # Symmetry and range
    pairs = [("ピカチュウ", "ピカチユウ"), ("mew", "mewtwo"), ("a", "bcdef")]
    for a, b in pairs:
        score = similarity(a, b)
        assert score == similarity(b, a)
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)
        assert 0 <= score <= 100
        # 100 is reserved for identical strings
        assert score < 100

    print("  [PASS] Similarity tests")


def test_round_half_up():
    """Test that .5 rounds up rather than to even."""
    print("\n" + "="*60)
    print("TEST: Half-up rounding")
    print("="*60)

    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2
    # Distance 2 on a 4-char pair: (1 - 2/4) * 100 = 50
    assert similarity("abcd", "abxy") == 50

    print("  [PASS] Half-up rounding tests")


def test_cross_script_match():
    """Test that a hiragana reading finds the katakana catalog name."""
    print("\n" + "="*60)
    print("TEST: Cross-script match")
    print("="*60)

    catalog = [{"id": 1, "name": "ピカチュウ"}]
    candidates = match("ぴかちゅう", catalog, threshold=70)
    print(f"  Candidates: {candidates}")

    assert candidates == [MatchCandidate("1", "ピカチュウ", 100)]
    assert candidates[0].is_exact
    assert candidates[0].to_dict() == {"id": "1", "name": "ピカチュウ", "similarity": 100}

    # Full-width Latin and case differences also score 100
    assert match("ＰＩＫＡＣＨＵ", [CatalogEntry("7", "Pikachu")])[0].similarity == 100

    print("  [PASS] Cross-script match tests")


def test_containment_threshold():
    """Test that a short substring is scored below the default threshold."""
    print("\n" + "="*60)
    print("TEST: Containment threshold")
    print("="*60)

    catalog = [{"id": 1, "name": "スーパーマリオ"}]
    assert match("マリオ", catalog, threshold=50) == []

    candidates = match("マリオ", catalog, threshold=39)
    print(f"  At 39: {candidates}")
    assert candidates == [MatchCandidate("1", "スーパーマリオ", 39)]

    print("  [PASS] Containment threshold tests")


def test_ranking():
    """Test ordering, ties, limits and argument validation."""
    print("\n" + "="*60)
    print("TEST: Ranking")
    print("="*60)

    catalog = [
        {"id": "a", "name": "ピカチュウex"},
        {"id": "b", "name": "ピカチュウ"},
        {"id": "c", "name": "ピカチュウV"},
        {"id": "d", "name": "ミュウツー"},
    ]
    candidates = match("ピカチュウ", catalog, threshold=50)
    print(f"  Ranked: {[(c.catalog_id, c.similarity) for c in candidates]}")

    # b exact, c 5/6*90=75, a 5/7*90=64
    assert [(c.catalog_id, c.similarity) for c in candidates] == [("b", 100), ("c", 75), ("a", 64)]
    assert [c.catalog_id for c in match("ピカチュウ", catalog, 50, max_results=2)] == ["b", "c"]

    # Raising the threshold only ever removes candidates
    previous = None
    for threshold in (0, 50, 70, 90, 100):
        ids = {c.catalog_id for c in match("ピカチュウ", catalog, threshold, max_results=10)}
        if previous is not None:
            assert ids <= previous, f"threshold {threshold} added {ids - previous}"
        previous = ids
    assert previous == {"b"}

    # Equal scores keep catalog order
    twins = [{"id": "x", "name": "ミュウ"}, {"id": "y", "name": "ミュウ"}]
    assert [c.catalog_id for c in match("ミュウ", twins)] == ["x", "y"]

    # Empty names never match
    assert match("", catalog) == []
    assert match(None, catalog) == []
    assert match("   ", catalog) == []
    assert match("ピカチュウ", []) == []

    for kwargs in ({"threshold": 101}, {"threshold": -1}, {"max_results": 0}):
        try:
            match("ピカチュウ", catalog, **kwargs)
        except ValueError:
            pass
        else:
            raise AssertionError(f"accepted {kwargs}")

    print("  [PASS] Ranking tests")


def test_find_best_match():
    """Test single best match lookup."""
    print("\n" + "="*60)
    print("TEST: Best match")
    print("="*60)

    catalog = [CatalogEntry("1", "リザードン"), CatalogEntry("2", "リザードンex")]
    best = find_best_match("りざーどん", catalog)
    assert best == MatchCandidate("1", "リザードン", 100)
    assert find_best_match("ゲンガー", catalog) is None

    print("  [PASS] Best match tests")


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# MATCHING TESTS")
    print("#"*60)

    tests = [
        ("Normalization", test_normalize),
        ("Kana Shift", test_kana_shift),
        ("Similarity", test_similarity),
        ("Half-up Rounding", test_round_half_up),
        ("Cross-script Match", test_cross_script_match),
        ("Containment Threshold", test_containment_threshold),
        ("Ranking", test_ranking),
        ("Best Match", test_find_best_match),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except AssertionError as e:
            print(f"  [FAIL] {name}: {e}")
            results.append((name, False))

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)

    all_passed = True
    for name, passed in results:
        status = "PASS" if passed else "FAIL"
        print(f"  {name}: [{status}]")
        if not passed:
            all_passed = False

    print()
    if all_passed:
        print("All tests PASSED!")
        return 0
    else:
        print("Some tests FAILED!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
