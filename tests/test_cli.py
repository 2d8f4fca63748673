"""
Test script for the command-line front end

Drives pricelist.cli.Application directly against a temporary config,
template directory and catalog.

Usage:
    python test_cli.py
"""

import io
import sys
import json
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pricelist.cli import Application, parse_args


def run_cli(config: Path, *argv: str):
    """Run one command; returns (exit code, stdout)."""
    args = parse_args(["--config", str(config), *argv])
    output = io.StringIO()
    with redirect_stdout(output):
        code = Application(settings_path=args.config).run(args)
    return code, output.getvalue()


def write_config(root: Path) -> Path:
    config = root / "config.json"
    config.write_text(json.dumps({
        "template_dir": str(root / "templates"),
        "catalog_path": str(root / "catalog.json"),
    }), encoding="utf-8")
    (root / "catalog.json").write_text(json.dumps([
        {"id": "p1", "name": "ピカチュウ"},
        {"id": "m1", "name": "ミュウ"},
    ], ensure_ascii=False), encoding="utf-8")
    return config


def test_template_commands():
    """Test templates new/list/show/delete."""
    print("\n" + "="*60)
    print("TEST: Template commands")
    print("="*60)

    with tempfile.TemporaryDirectory() as tmp:
        config = write_config(Path(tmp))

        code, out = run_cli(config, "templates", "new", "Shop A",
                            "--columns", "2", "--rows", "2", "--card-rows", "0", "--price-rows", "1")
        assert code == 0
        template_id = out.strip()
        print(f"  Created: {template_id}")

        code, out = run_cli(config, "templates", "list")
        assert code == 0
        assert out.strip() == f"{template_id}  Shop A"

        code, out = run_cli(config, "templates", "show", template_id)
        shown = json.loads(out)
        assert shown["cells"] == [["card", "card"], ["price", "price"]]

        code, out = run_cli(config, "segment", "--template", template_id, "--width", "200", "--height", "100")
        assert code == 0
        assert out.strip().endswith("4 regions")

        assert run_cli(config, "templates", "delete", template_id)[0] == 0
        assert run_cli(config, "templates", "show", template_id)[0] == 1

    print("  [PASS] Template command tests")


def test_bad_template_file():
    """Test that a non-object template file is reported, not raised."""
    print("\n" + "="*60)
    print("TEST: Bad template file")
    print("="*60)

    with tempfile.TemporaryDirectory() as tmp:
        config = write_config(Path(tmp))
        templates = Path(tmp) / "templates"
        templates.mkdir()
        (templates / "broken.json").write_text("[1, 2, 3]", encoding="utf-8")

        code, _ = run_cli(config, "templates", "show", "broken")
        assert code == 1
        code, _ = run_cli(config, "segment", "--template", "broken")
        assert code == 1

    print("  [PASS] Bad template file tests")


def test_match_command():
    """Test matching one name against the configured catalog."""
    print("\n" + "="*60)
    print("TEST: Match command")
    print("="*60)

    with tempfile.TemporaryDirectory() as tmp:
        config = write_config(Path(tmp))

        code, out = run_cli(config, "match", "ぴかちゅう", "--threshold", "70")
        print(f"  {out.strip()}")
        assert code == 0
        assert out.strip() == "100%  ピカチュウ  (id=p1)"

        code, out = run_cli(config, "match", "ゲンガー", "--threshold", "90")
        assert code == 1
        assert "No match" in out

    print("  [PASS] Match command tests")


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# COMMAND LINE TESTS")
    print("#"*60)

    tests = [
        ("Template Commands", test_template_commands),
        ("Bad Template File", test_bad_template_file),
        ("Match Command", test_match_command),
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
