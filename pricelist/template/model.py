"""
Template Model - Spatial schema that partitions a price-list image into typed cells.

Templates are immutable. Every editing operation returns a new Template and
leaves the original untouched, so an editor session owns its own history.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union


# Interior lines may never sit on (or beyond) the boundaries
MIN_LINE_POSITION = 1.0
MAX_LINE_POSITION = 99.0


class CellType(Enum):
    """Meaning of one template cell."""
    CARD = "card"
    PRICE = "price"
    EXCLUDE = "exclude"
    EMPTY = "empty"

    @classmethod
    def parse(cls, value: Any) -> 'CellType':
        """
        Lenient conversion used when loading stored templates.

        Unknown or missing values become EMPTY.
        """
        if isinstance(value, CellType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.EMPTY


class Axis(Enum):
    """Line orientation. Vertical lines divide columns, horizontal lines divide rows."""
    VERTICAL = "v"
    HORIZONTAL = "h"

    @classmethod
    def parse(cls, value: Union['Axis', str]) -> 'Axis':
        if isinstance(value, Axis):
            return value
        key = str(value).strip().lower()
        if key in ("v", "vertical", "col", "column"):
            return cls.VERTICAL
        if key in ("h", "horizontal", "row"):
            return cls.HORIZONTAL
        raise ValueError(f"Unknown axis: {value}. Use 'v' or 'h'")


@dataclass(frozen=True)
class GridLine:
    """
    A grid line with a stable identity.

    The id survives re-sorting, so a line can be followed while it is
    dragged past its neighbours.

    Attributes:
        line_id: Identifier unique within its axis
        position: Percentage of the image width/height (0-100)
    """
    line_id: int
    position: float


CellGrid = Tuple[Tuple[CellType, ...], ...]


def repair_cells(cells: Sequence[Sequence[Any]], rows: int, cols: int) -> CellGrid:
    """
    Re-derive a rows x cols grid from an existing one.

    Values are kept by position; anything outside the old grid becomes EMPTY.

    Args:
        cells: Existing (possibly ragged or mis-sized) grid
        rows: Required row count
        cols: Required column count

    Returns:
        Grid of exactly rows x cols CellType values
    """
    grid = []
    for r in range(rows):
        old_row = cells[r] if r < len(cells) else ()
        grid.append(tuple(
            CellType.parse(old_row[c]) if c < len(old_row) else CellType.EMPTY
            for c in range(cols)
        ))
    return tuple(grid)


def _clamp(position: float) -> float:
    return max(MIN_LINE_POSITION, min(MAX_LINE_POSITION, float(position)))


def _build_lines(positions: Sequence[float]) -> Tuple[GridLine, ...]:
    """
    Build a line tuple from raw stored positions.

    Boundaries 0 and 100 are always present; interior values are clamped
    and exact duplicates dropped.
    """
    interior: List[float] = []
    for raw in sorted(float(p) for p in positions):
        if raw in (0.0, 100.0):
            continue
        pos = _clamp(raw)
        if pos not in interior:
            interior.append(pos)
    ordered = [0.0] + interior + [100.0]
    return tuple(GridLine(line_id=i, position=p) for i, p in enumerate(ordered))


def _even_positions(parts: int) -> List[float]:
    parts = max(1, int(parts))
    return [100.0 * i / parts for i in range(parts + 1)]


@dataclass(frozen=True)
class Template:
    """
    Price-list template.

    Attributes:
        name: Display name
        vertical: Vertical lines (column dividers), sorted by position
        horizontal: Horizontal lines (row dividers), sorted by position
        cells: [row][col] grid of CellType, repaired to match the lines
        id: Store identifier, None until saved
        shop_id: Optional shop this template belongs to
    """
    name: str
    vertical: Tuple[GridLine, ...] = field(default_factory=lambda: _build_lines([0, 100]))
    horizontal: Tuple[GridLine, ...] = field(default_factory=lambda: _build_lines([0, 100]))
    cells: CellGrid = ()
    id: Optional[str] = None
    shop_id: Optional[str] = None

    def __post_init__(self):
        # Grid/line mismatches are repaired, never reported
        rows = len(self.horizontal) - 1
        cols = len(self.vertical) - 1
        object.__setattr__(self, "cells", repair_cells(self.cells, rows, cols))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, name: str = "New template", columns: int = 1, rows: int = 1,
               id: Optional[str] = None, shop_id: Optional[str] = None) -> 'Template':
        """
        Create an evenly divided template with every cell EMPTY.

        Args:
            name: Template name
            columns: Number of columns
            rows: Number of rows
            id: Optional store identifier
            shop_id: Optional shop identifier

        Returns:
            New Template
        """
        return cls.from_lines(name, _even_positions(columns), _even_positions(rows),
                              id=id, shop_id=shop_id)

    @classmethod
    def from_lines(cls, name: str, vertical_lines: Sequence[float],
                   horizontal_lines: Sequence[float],
                   cells: Optional[Sequence[Sequence[Any]]] = None,
                   id: Optional[str] = None, shop_id: Optional[str] = None) -> 'Template':
        """Create a Template from plain percentage lists and a cell grid."""
        return cls(
            name=name,
            vertical=_build_lines(vertical_lines),
            horizontal=_build_lines(horizontal_lines),
            cells=tuple(tuple(row) for row in (cells or ())),
            id=id,
            shop_id=shop_id,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Template':
        """
        Load a Template from its stored form.

        Accepts both snake_case and camelCase line keys.
        """
        vertical = data.get("vertical_lines", data.get("verticalLines")) or [0, 100]
        horizontal = data.get("horizontal_lines", data.get("horizontalLines")) or [0, 100]
        template_id = data.get("id")
        shop_id = data.get("shop_id", data.get("shopId"))
        return cls.from_lines(
            name=str(data.get("name", "")),
            vertical_lines=vertical,
            horizontal_lines=horizontal,
            cells=data.get("cells") or [],
            id=None if template_id is None else str(template_id),
            shop_id=None if shop_id is None else str(shop_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "shop_id": self.shop_id,
            "vertical_lines": self.vertical_lines,
            "horizontal_lines": self.horizontal_lines,
            "cells": [[cell.value for cell in row] for row in self.cells],
        }

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def vertical_lines(self) -> List[float]:
        """Column divider positions (percent of width)."""
        return [line.position for line in self.vertical]

    @property
    def horizontal_lines(self) -> List[float]:
        """Row divider positions (percent of height)."""
        return [line.position for line in self.horizontal]

    @property
    def row_count(self) -> int:
        return len(self.horizontal) - 1

    @property
    def column_count(self) -> int:
        return len(self.vertical) - 1

    def cell_type(self, row: int, col: int) -> CellType:
        """Get a cell's type; positions outside the grid read as EMPTY."""
        if 0 <= row < self.row_count and 0 <= col < self.column_count:
            return self.cells[row][col]
        return CellType.EMPTY

    def lines(self, axis: Union[Axis, str]) -> Tuple[GridLine, ...]:
        return self.vertical if Axis.parse(axis) is Axis.VERTICAL else self.horizontal

    def index_of(self, axis: Union[Axis, str], line_id: int) -> Optional[int]:
        """
        Locate a line by identity.

        Returns:
            Current index of the line, or None if it no longer exists
        """
        for index, line in enumerate(self.lines(axis)):
            if line.line_id == line_id:
                return index
        return None

    def is_boundary(self, axis: Union[Axis, str], index: int) -> bool:
        return index == 0 or index == len(self.lines(axis)) - 1

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def _with_lines(self, axis: Axis, lines: Sequence[GridLine]) -> 'Template':
        ordered = tuple(sorted(lines, key=lambda line: line.position))
        if axis is Axis.VERTICAL:
            return replace(self, vertical=ordered)
        return replace(self, horizontal=ordered)

    def add_line(self, axis: Union[Axis, str]) -> 'Template':
        """
        Add a line midway between the last two lines on an axis.

        The new subdivision sits next to the trailing boundary, so cells
        before it keep their row/column index.
        """
        axis = Axis.parse(axis)
        lines = self.lines(axis)
        position = _clamp((lines[-1].position + lines[-2].position) / 2)
        if any(line.position == position for line in lines):
            return self

        next_id = max(line.line_id for line in lines) + 1
        new_lines = list(lines)
        new_lines.insert(len(new_lines) - 1, GridLine(line_id=next_id, position=position))
        return self._with_lines(axis, new_lines)

    def add_vertical_line(self) -> 'Template':
        return self.add_line(Axis.VERTICAL)

    def add_horizontal_line(self) -> 'Template':
        return self.add_line(Axis.HORIZONTAL)

    def move_line(self, axis: Union[Axis, str], index: int, new_position: float) -> 'Template':
        """
        Move an interior line.

        The target is clamped to [1, 99]. Boundary lines, unknown indices and
        moves that would land exactly on another line are rejected (the
        template is returned unchanged). Use index_of() with the line's id
        to find its index after re-sorting.
        """
        axis = Axis.parse(axis)
        lines = self.lines(axis)
        if not 0 <= index < len(lines) or self.is_boundary(axis, index):
            return self

        position = _clamp(new_position)
        moving = lines[index]
        if any(line.position == position for line in lines if line is not moving):
            return self

        new_lines = list(lines)
        new_lines[index] = GridLine(line_id=moving.line_id, position=position)
        return self._with_lines(axis, new_lines)

    def delete_line(self, axis: Union[Axis, str], index: int) -> 'Template':
        """Delete an interior line. Boundary lines cannot be deleted."""
        axis = Axis.parse(axis)
        lines = self.lines(axis)
        if not 0 <= index < len(lines) or self.is_boundary(axis, index):
            return self
        return self._with_lines(axis, lines[:index] + lines[index + 1:])

    # ------------------------------------------------------------------
    # Cell painting
    # ------------------------------------------------------------------

    def _with_cells(self, cells: List[List[CellType]]) -> 'Template':
        return replace(self, cells=tuple(tuple(row) for row in cells))

    def set_cell(self, row: int, col: int, cell_type: Union[CellType, str]) -> 'Template':
        """Paint a single cell."""
        if not (0 <= row < self.row_count and 0 <= col < self.column_count):
            return self
        cells = [list(r) for r in self.cells]
        cells[row][col] = CellType(cell_type)
        return self._with_cells(cells)

    def set_row(self, row: int, cell_type: Union[CellType, str]) -> 'Template':
        """Paint every cell of a row."""
        if not 0 <= row < self.row_count:
            return self
        cells = [list(r) for r in self.cells]
        cells[row] = [CellType(cell_type)] * self.column_count
        return self._with_cells(cells)

    def set_column(self, col: int, cell_type: Union[CellType, str]) -> 'Template':
        """Paint every cell of a column."""
        if not 0 <= col < self.column_count:
            return self
        value = CellType(cell_type)
        cells = [list(r) for r in self.cells]
        for r in range(self.row_count):
            cells[r][col] = value
        return self._with_cells(cells)

    def with_name(self, name: str) -> 'Template':
        return replace(self, name=name)

    def with_id(self, template_id: Optional[str]) -> 'Template':
        return replace(self, id=template_id)
