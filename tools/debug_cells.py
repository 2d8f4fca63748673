"""
Diagnostic script to inspect what OCR sees for each template cell.

Writes every crop (raw and preprocessed) to debug/cells/ and prints the raw
OCR text, the extracted name and the parsed price per crop.

Usage:
    python tools/debug_cells.py <image_path> <template_id> [--no-ocr]
"""

import sys
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))

from pricelist import TemplateStore, extract_name, extract_price, plan
from pricelist.ocr import create_engine
from pricelist.ocr.tesseract_engine import preprocess_cell
from pricelist.settings import extraction_settings, load_settings, segmentation_ratios
from pricelist.template import CellType

OUTPUT_DIR = Path("./debug/cells")


def analyze_image(image_path: str, template_id: str, run_ocr: bool = True):
    """Dump every crop of an image and report OCR output per cell."""
    print(f"\n{'='*60}")
    print(f"Analyzing: {image_path} with template {template_id}")
    print(f"{'='*60}")

    settings = load_settings()
    template = TemplateStore(Path(settings["template_dir"])).get_template(template_id)
    img = Image.open(image_path).convert("RGB")
    crops = plan(template, img.size, segmentation_ratios(settings))
    print(f"Image: {img.size[0]}x{img.size[1]}, {len(crops)} crops")

    engine = create_engine(settings["ocr_engine"], language=settings["ocr_language"]) if run_ocr else None
    extraction = extraction_settings(settings)
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    for crop in crops:
        cell = img.crop(crop.box)
        suffix = "_strip" if crop.derived else ""
        stem = f"r{crop.row}_c{crop.col}_{crop.cell_type.value}{suffix}"
        cell.save(OUTPUT_DIR / f"{stem}.png")
        cv2.imwrite(str(OUTPUT_DIR / f"{stem}_bin.png"), preprocess_cell(np.array(cell)))

        print(f"\n[{crop.row},{crop.col}] {crop.cell_type.value}{suffix} "
              f"x={crop.x} y={crop.y} w={crop.width} h={crop.height}")
        if engine is None:
            continue

        text = engine.recognize(cell)
        print(f"  raw: {text!r}")
        if crop.cell_type is CellType.CARD:
            print(f"  name: {extract_name(text, extraction)!r}")
        else:
            print(f"  price: {extract_price(text)}")

    print(f"\nCrops written to {OUTPUT_DIR}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    analyze_image(sys.argv[1], sys.argv[2], run_ocr="--no-ocr" not in sys.argv)
