"""
Debug Utilities

Functions for saving annotated debug images of a segmentation/recognition run.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .recognition import RecognitionResult
from .segmentation import CropSpec
from .template import CellType


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Similarity thresholds for coloring
HIGH_SIMILARITY = 80
MEDIUM_SIMILARITY = 50

CELL_COLORS = {
    CellType.CARD: "blue",
    CellType.PRICE: "orange",
}


def get_similarity_color(similarity: int) -> str:
    """
    Get color code for a match similarity.

    Args:
        similarity: Similarity 0-100

    Returns:
        Hex color code string
    """
    if similarity >= HIGH_SIMILARITY:
        return "#4CAF50"  # Green
    elif similarity >= MEDIUM_SIMILARITY:
        return "#FFC107"  # Yellow
    else:
        return "#d32f2f"  # Red


def _load_fonts() -> Tuple[ImageFont.ImageFont, ImageFont.ImageFont]:
    # CJK-capable font first; card names are mostly Japanese
    for font_name in ("NotoSansCJK-Regular.ttc", "msgothic.ttc", "arial.ttf"):
        try:
            return ImageFont.truetype(font_name, 14), ImageFont.truetype(font_name, 11)
        except OSError:
            continue
    font = ImageFont.load_default()
    return font, font


def annotate(
    image: Image.Image,
    crops: Iterable[CropSpec],
    results: Optional[List[RecognitionResult]] = None
) -> Image.Image:
    """
    Draw crop rectangles and match labels on a copy of the image.

    Annotations include:
    - Card crops in blue, price crops in orange (derived strips dashed)
    - Top candidate name and similarity above each card, colored by similarity
    - "?" for cards without candidates

    Args:
        image: Original PIL Image
        crops: Segmentation output
        results: Recognition results (optional)

    Returns:
        Annotated RGB copy
    """
    debug_img = image.convert("RGB")
    draw = ImageDraw.Draw(debug_img)
    font, small_font = _load_fonts()

    for crop in crops:
        color = CELL_COLORS.get(crop.cell_type, "gray")
        if crop.derived:
            _dashed_rectangle(draw, crop.box, color)
        else:
            draw.rectangle(crop.box, outline=color, width=2)

    for result in results or []:
        x, y = result.crop_region.x, result.crop_region.y
        top = result.top_candidate
        if top is None:
            draw.text((x + 4, y + 2), "?", fill="red", font=font)
            continue
        label = f"{top.name} {top.similarity}%"
        if result.price is not None:
            label += f" / {result.price:,}"
        draw.text((x + 4, y + 2), label, fill=get_similarity_color(top.similarity), font=small_font)

    return debug_img


def _dashed_rectangle(draw: ImageDraw.ImageDraw, box: Tuple[int, int, int, int],
                      color: str, dash: int = 6) -> None:
    left, top, right, bottom = box
    for x in range(left, right, dash * 2):
        draw.line([(x, top), (min(x + dash, right), top)], fill=color, width=2)
        draw.line([(x, bottom), (min(x + dash, right), bottom)], fill=color, width=2)
    for y in range(top, bottom, dash * 2):
        draw.line([(left, y), (left, min(y + dash, bottom))], fill=color, width=2)
        draw.line([(right, y), (right, min(y + dash, bottom))], fill=color, width=2)


def save_debug_image(
    image: Image.Image,
    crops: Iterable[CropSpec],
    results: Optional[List[RecognitionResult]],
    path: str
) -> None:
    """
    Save an annotated debug image and prune old ones.

    Args:
        image: Original PIL Image
        crops: Segmentation output
        results: Recognition results (can be None)
        path: Output file path
    """
    # Ensure debug directory exists
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    annotate(image, crops, results).save(path, "PNG")

    # Cleanup old debug images
    _cleanup_debug_images()


def _cleanup_debug_images() -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    # Get all debug images sorted by modification time
    debug_files = sorted(
        DEBUG_DIR.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    # Remove old files
    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError:
            pass
