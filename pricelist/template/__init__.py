"""
Template Package - Spatial templates for price-list images.

Public API:
    - Template: Immutable template (lines + typed cell grid)
    - CellType: card / price / exclude / empty
    - Axis: Line orientation
    - GridLine: Line with stable identity
    - repair_cells(): Re-derive a cell grid for new line counts

Usage:
    from pricelist.template import Template, CellType

    template = Template.create("Shop A", columns=4, rows=3)
    template = template.set_row(0, CellType.CARD).set_row(1, CellType.PRICE)
    template = template.add_vertical_line()
"""

from .model import (
    Axis,
    CellType,
    GridLine,
    Template,
    repair_cells,
    MIN_LINE_POSITION,
    MAX_LINE_POSITION,
)

__all__ = [
    "Axis",
    "CellType",
    "GridLine",
    "Template",
    "repair_cells",
    "MIN_LINE_POSITION",
    "MAX_LINE_POSITION",
]
