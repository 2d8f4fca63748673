"""
Test script for name and price extraction

Usage:
    python test_extraction.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pricelist.extraction import (
    ExtractionSettings,
    correct_known_errors,
    extract_name,
    extract_price,
    normalize_candidate,
)


def test_grade_noise_skipped():
    """Test that "HP<digits>" lines are skipped before the name."""
    print("\n" + "="*60)
    print("TEST: Grade noise")
    print("="*60)

    settings = ExtractionSettings(max_lines=5, min_length=2,
                                  exclude_exact=["HP"], exclude_contains=["進化"])
    name = extract_name("HP120\nリザードンex\n130", settings)
    print(f"  Extracted: {name}")
    assert name == "リザードンex"

    assert extract_name("hp 60\nミュウ") == "ミュウ"

    print("  [PASS] Grade noise tests")


def test_line_filters():
    """Test numeric, exact and substring exclusion."""
    print("\n" + "="*60)
    print("TEST: Line filters")
    print("="*60)

    cases = [
        ("1,200\n【ピカチュウ】PSA10", "ピカチュウ"),
        ("1 2 0 0\nピカチュウ", "ピカチュウ"),
        ("進化\nミュウツー", "ミュウツー"),
        ("GEM\nMINT\nリザードン", "リザードン"),
        ("買取価格\n  \nゲンガー 3", "ゲンガー"),
        ("「ミ」\nミュウ", "ミュウ"),  # length is checked after cleaning
        ("001 ルギア", "ルギア"),
    ]
    for raw, expected in cases:
        name = extract_name(raw)
        print(f"  {raw!r} -> {name!r}")
        assert name == expected, f"{raw!r}: expected {expected!r}, got {name!r}"

    # Exact exclusion also looks at the raw line, before cleaning
    settings = ExtractionSettings(exclude_exact=["ミュウ 1"])
    name = extract_name("ミュウ 1\nゲンガー", settings)
    print(f"  Raw-line exclusion: {name!r}")
    assert name == "ゲンガー"
    # Cleaned form alone would have survived
    assert normalize_candidate("ミュウ 1") == "ミュウ"

    print("  [PASS] Line filter tests")


def test_max_lines_and_fallback():
    """Test the line limit and the first-line fallback."""
    print("\n" + "="*60)
    print("TEST: Line limit and fallback")
    print("="*60)

    settings = ExtractionSettings(max_lines=3)
    # The real name is on line 4, past the limit: fall back to line 1
    assert extract_name("a\nb\nc\nピカチュウ", settings) == "a"

    # Nothing survives the filters: first line, lightly cleaned
    name = extract_name("買取価格 1200")
    print(f"  Fallback: {name}")
    assert name == "買取価格"

    # Fallback keeps the raw line when cleaning would empty it
    assert extract_name("1234") == "1234"

    print("  [PASS] Line limit and fallback tests")


def test_empty_input():
    """Test that empty OCR text yields no candidate."""
    print("\n" + "="*60)
    print("TEST: Empty input")
    print("="*60)

    assert extract_name("") is None
    assert extract_name(None) is None
    assert extract_name("\n   \n\t") is None

    print("  [PASS] Empty input tests")


def test_normalize_candidate():
    """Test single-line cleaning."""
    print("\n" + "="*60)
    print("TEST: Candidate normalization")
    print("="*60)

    assert normalize_candidate(" ピカ チュウ ") == "ピカチュウ"
    assert normalize_candidate("『リザードン』BGS9.5") == "リザードン"
    assert normalize_candidate("12ミュウ34") == "ミュウ"
    assert normalize_candidate("V2") == "V"

    print("  [PASS] Candidate normalization tests")


def test_settings():
    """Test settings validation and dict conversion."""
    print("\n" + "="*60)
    print("TEST: Extraction settings")
    print("="*60)

    for kwargs in ({"max_lines": 0}, {"min_length": 0}):
        try:
            ExtractionSettings(**kwargs)
        except ValueError:
            pass
        else:
            raise AssertionError(f"accepted {kwargs}")

    settings = ExtractionSettings.from_dict({"max_lines": 3, "exclude_exact": ["X"]})
    assert settings.max_lines == 3
    assert settings.min_length == 2
    assert settings.exclude_exact == frozenset({"X"})
    assert "進化" in settings.exclude_contains
    assert ExtractionSettings.from_dict(settings.to_dict()) == settings

    print("  [PASS] Extraction settings tests")


def test_extract_price():
    """Test price parsing."""
    print("\n" + "="*60)
    print("TEST: Price parsing")
    print("="*60)

    cases = [
        ("¥1,200", 1200),
        ("１２００円", 1200),
        ("買取 30,000円\n美品", 30000),
        ("500", 500),
        ("0円", None),
        ("在庫なし", None),
        ("", None),
        (None, None),
    ]
    for text, expected in cases:
        price = extract_price(text)
        print(f"  {text!r} -> {price}")
        assert price == expected, f"{text!r}: expected {expected}, got {price}"

    print("  [PASS] Price parsing tests")


def test_known_errors():
    """Test correction of common misreadings."""
    print("\n" + "="*60)
    print("TEST: Known OCR errors")
    print("="*60)

    assert correct_known_errors("ピカチユウex") == "ピカチュウex"
    assert correct_known_errors("リザ一ドン") == "リザードン"
    assert correct_known_errors("ミュウ") == "ミュウ"
    assert correct_known_errors(None) is None

    print("  [PASS] Known error tests")


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# EXTRACTION TESTS")
    print("#"*60)

    tests = [
        ("Grade Noise", test_grade_noise_skipped),
        ("Line Filters", test_line_filters),
        ("Line Limit", test_max_lines_and_fallback),
        ("Empty Input", test_empty_input),
        ("Candidate Normalization", test_normalize_candidate),
        ("Settings", test_settings),
        ("Prices", test_extract_price),
        ("Known Errors", test_known_errors),
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
