"""
Segmentation Engine

Converts a Template plus image pixel dimensions into concrete crop rectangles,
tagged by row, column and cell type.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from .template import CellType, Template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentationRatios:
    """
    Extra trimming applied on top of the template grid.

    All values are percentages (0-100).

    Attributes:
        header_ratio: Top band of the image height to ignore
        footer_ratio: Bottom band of the image height to ignore
        price_row_ratio: Bottom share of each card cell carved off as a price strip
        side_padding: Share of the image width trimmed from each cell's left and right
    """
    header_ratio: float = 0.0
    footer_ratio: float = 0.0
    price_row_ratio: float = 0.0
    side_padding: float = 0.0

    def __post_init__(self):
        for name in ("header_ratio", "footer_ratio", "price_row_ratio", "side_padding"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        if self.header_ratio + self.footer_ratio > 100:
            raise ValueError("header_ratio + footer_ratio must not exceed 100")


@dataclass(frozen=True)
class CropSpec:
    """
    One region to crop out of the source image.

    Attributes:
        row: Template row index
        col: Template column index
        cell_type: CARD or PRICE (EMPTY/EXCLUDE are never emitted)
        x: Left edge in pixels
        y: Top edge in pixels
        width: Width in pixels (always > 0)
        height: Height in pixels (always > 0)
        derived: True for a price strip carved from a card cell
    """
    row: int
    col: int
    cell_type: CellType
    x: int
    y: int
    width: int
    height: int
    derived: bool = False

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as expected by PIL.Image.crop."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "cell_type": self.cell_type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "derived": self.derived,
        }


def _to_pixels(percent: float, dimension: int) -> int:
    return int(math.floor(percent / 100.0 * dimension))


def segment(
    template: Template,
    image_width: int,
    image_height: int,
    ratios: SegmentationRatios = SegmentationRatios()
) -> List[CropSpec]:
    """
    Compute crop rectangles for every non-empty, non-excluded cell.

    Cell bounds come from the template's percentage lines. Each cell is then
    narrowed by side_padding, clipped to the content band between the header
    and footer, and (for card cells, when price_row_ratio > 0) split into a
    card part and a derived price strip. Rectangles that end up with no area
    are dropped.

    Args:
        template: Template to apply
        image_width: Image width in pixels
        image_height: Image height in pixels
        ratios: Additional trimming ratios

    Returns:
        CropSpec list in row-major order; a card's derived price strip
        directly follows the card
    """
    if image_width <= 0 or image_height <= 0:
        logger.debug(f"Degenerate image size {image_width}x{image_height}, no crops")
        return []

    xs = [_to_pixels(p, image_width) for p in template.vertical_lines]
    ys = [_to_pixels(p, image_height) for p in template.horizontal_lines]

    content_top = _to_pixels(ratios.header_ratio, image_height)
    content_bottom = _to_pixels(100.0 - ratios.footer_ratio, image_height)
    pad = _to_pixels(ratios.side_padding, image_width)

    crops: List[CropSpec] = []
    dropped = 0

    for row in range(template.row_count):
        for col in range(template.column_count):
            cell_type = template.cell_type(row, col)
            if cell_type in (CellType.EMPTY, CellType.EXCLUDE):
                continue

            left = xs[col] + pad
            right = xs[col + 1] - pad
            top = max(ys[row], content_top)
            bottom = min(ys[row + 1], content_bottom)

            width = right - left
            height = bottom - top
            if width <= 0 or height <= 0:
                dropped += 1
                continue

            if cell_type is CellType.CARD and ratios.price_row_ratio > 0:
                card_height = int(math.floor(height * (1 - ratios.price_row_ratio / 100.0)))
                if card_height > 0:
                    crops.append(CropSpec(row, col, CellType.CARD, left, top, width, card_height))
                else:
                    dropped += 1
                strip_height = height - card_height
                if strip_height > 0:
                    crops.append(CropSpec(row, col, CellType.PRICE, left, top + card_height,
                                          width, strip_height, derived=True))
                continue

            crops.append(CropSpec(row, col, cell_type, left, top, width, height))

    logger.debug(
        f"Segmented {template.row_count}x{template.column_count} template on "
        f"{image_width}x{image_height} image: {len(crops)} crops, {dropped} dropped"
    )
    return crops
