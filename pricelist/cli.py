"""
Command-line front end

Templates, segmentation, matching and end-to-end recognition of
photographed price lists.

Example:
    pricelist templates new "Shop A" --columns 4 --rows 3
    pricelist recognize photo.jpg --template 3f2a... --catalog catalog.json
    pricelist match "ぴかちゅう" --catalog catalog.json --threshold 70
"""

import sys
import json
import logging
import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from PIL import Image

from . import (
    CellType,
    FileCatalogSource,
    Template,
    TemplateNotFoundError,
    TemplateStore,
    match,
    plan,
    recognize,
    summarize,
    tolerant,
)
from .debug import DEBUG_DIR, save_debug_image
from .ocr import create_engine
from .settings import (
    extraction_settings,
    load_settings,
    recognition_options,
    segmentation_ratios,
)


logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure logging - output to both console and file."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("recognition.log", mode='a', encoding='utf-8')  # File output
        ]
    )


class Application:
    """
    Command dispatcher.

    Holds the loaded settings and the collaborators built from them
    (template store, catalog source, OCR engine).
    """

    def __init__(self, settings_path: Optional[str] = None, debug_mode: bool = False):
        """
        Initialize the application.

        Args:
            settings_path: Optional path to a config.json
            debug_mode: Enable debug images via CLI (overrides saved setting)
        """
        self.settings = load_settings(Path(settings_path) if settings_path else None)
        self.debug_mode = debug_mode or bool(self.settings.get("debug_enabled", False))
        self.store = TemplateStore(Path(self.settings["template_dir"]))

        if self.debug_mode:
            logging.getLogger().setLevel(logging.DEBUG)
            logger.debug("Debug mode enabled")

    def _catalog(self, path: Optional[str]) -> FileCatalogSource:
        return FileCatalogSource(Path(path or self.settings["catalog_path"]))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def recognize(self, args: argparse.Namespace) -> int:
        """Run the full pipeline on one image."""
        template = self.store.get_template(args.template)
        catalog = self._catalog(args.catalog).list_cards()
        options = recognition_options(self.settings)
        engine = create_engine(
            self.settings.get("ocr_engine", "tesseract"),
            language=self.settings.get("ocr_language", "jpn+eng"),
        )

        with Image.open(args.image) as loaded:
            image = loaded.convert("RGB")

        results = recognize(
            template,
            image,
            tolerant(engine),
            catalog,
            extraction_settings(self.settings),
            options,
        )
        summary = summarize(results)

        for result in results:
            top = result.top_candidate
            status = "OK " if result.matched else ("?? " if result.needs_review else "-- ")
            match_text = f"{top.name} ({top.similarity}%)" if top else "no match"
            price_text = f"{result.price:,}" if result.price is not None else "-"
            print(f"{status}[{result.row},{result.col}] {result.extracted_text or '(empty)'} "
                  f"-> {match_text}  price: {price_text}")

        print(f"\nTotal: {summary.total}, auto-matched: {summary.auto_matched}, "
              f"needs review: {summary.needs_review}, no match: {summary.no_match}")

        if args.output:
            payload = {
                "template": template.name,
                "cards": [r.to_dict() for r in results],
                "stats": summary.to_dict(),
            }
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            logger.info(f"Results written to {args.output}")

        if self.debug_mode:
            crops = plan(template, image.size, options.ratios)
            path = DEBUG_DIR / f"debug_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')[:-3]}.png"
            save_debug_image(image, crops, results, str(path))
            logger.info(f"Debug image saved: {path}")

        return 0

    def segment(self, args: argparse.Namespace) -> int:
        """Print the crops a template produces for an image size."""
        template = self.store.get_template(args.template)
        if args.image:
            with Image.open(args.image) as loaded:
                size = loaded.size
        else:
            size = (args.width, args.height)

        crops = plan(template, size, segmentation_ratios(self.settings))
        for crop in crops:
            kind = crop.cell_type.value + (" (strip)" if crop.derived else "")
            print(f"[{crop.row},{crop.col}] {kind:<14} x={crop.x} y={crop.y} "
                  f"w={crop.width} h={crop.height}")
        print(f"\n{len(crops)} regions")
        return 0

    def match(self, args: argparse.Namespace) -> int:
        """Score one name against the catalog."""
        catalog = self._catalog(args.catalog).list_cards()
        candidates = match(args.name, catalog, args.threshold, args.max_results)
        if not candidates:
            print("No match - needs manual entry")
            return 1
        for candidate in candidates:
            print(f"{candidate.similarity:>3}%  {candidate.name}  (id={candidate.catalog_id})")
        return 0

    def templates(self, args: argparse.Namespace) -> int:
        """Template store maintenance."""
        if args.action == "list":
            for entry in self.store.list_templates():
                print(f"{entry['id']}  {entry['name']}")
            return 0

        if args.action == "new":
            template = Template.create(args.name, columns=args.columns, rows=args.rows)
            if args.card_rows:
                for row in args.card_rows:
                    template = template.set_row(row, CellType.CARD)
            if args.price_rows:
                for row in args.price_rows:
                    template = template.set_row(row, CellType.PRICE)
            print(self.store.save_template(template))
            return 0

        if args.action == "show":
            template = self.store.get_template(args.name)
            print(json.dumps(template.to_dict(), indent=2, ensure_ascii=False))
            return 0

        if args.action == "delete":
            self.store.delete_template(args.name)
            print(f"Deleted {args.name}")
            return 0

        return 2

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the selected command.

        Returns:
            Exit code
        """
        handler = getattr(self, args.command)
        try:
            return handler(args)
        except TemplateNotFoundError as e:
            logger.error(f"Template not found: {e}")
            return 1
        except (FileNotFoundError, ValueError) as e:
            logger.error(str(e))
            return 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Price-list recognizer - identify cards on photographed buy lists"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Settings file (default: ./config.json)"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging and save annotated debug images"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recognize", help="Recognize every card on a price-list image")
    rec.add_argument("image", help="Price-list image")
    rec.add_argument("--template", "-t", required=True, help="Template id")
    rec.add_argument("--catalog", help="Catalog JSON/CSV (default from settings)")
    rec.add_argument("--output", "-o", help="Write results as JSON to this file")

    seg = sub.add_parser("segment", help="Show the crops a template produces")
    seg.add_argument("--template", "-t", required=True, help="Template id")
    seg.add_argument("--image", help="Take the size from this image")
    seg.add_argument("--width", type=int, default=1000)
    seg.add_argument("--height", type=int, default=1000)

    mat = sub.add_parser("match", help="Match one name against the catalog")
    mat.add_argument("name", help="Card name as read")
    mat.add_argument("--catalog", help="Catalog JSON/CSV (default from settings)")
    mat.add_argument("--threshold", type=int, default=50)
    mat.add_argument("--max-results", type=int, default=5)

    tpl = sub.add_parser("templates", help="Manage templates")
    tpl.add_argument("action", choices=["list", "new", "show", "delete"])
    tpl.add_argument("name", nargs="?", default="New template",
                     help="Template name (new) or id (show/delete)")
    tpl.add_argument("--columns", type=int, default=1)
    tpl.add_argument("--rows", type=int, default=1)
    tpl.add_argument("--card-rows", type=int, nargs="*", help="Rows to mark as card cells")
    tpl.add_argument("--price-rows", type=int, nargs="*", help="Rows to mark as price cells")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Initialize and run the price-list recognizer."""
    args = parse_args(argv)
    setup_logging()

    application = Application(settings_path=args.config, debug_mode=args.debug)
    sys.exit(application.run(args))
