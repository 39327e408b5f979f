from __future__ import annotations

import math
from dataclasses import dataclass

from eventreport_gen.models.report import LayoutMode


@dataclass(frozen=True)
class LayoutSizes:
    """Per-cell target sizes in CSS pixels for each layout policy."""

    large: tuple[int, int]
    # Row cells share `narrow_width` evenly; every cell gets `narrow_height`.
    narrow_width: int
    narrow_height: int
    medium: tuple[int, int]


@dataclass(frozen=True)
class Arrangement:
    mode: LayoutMode
    count: int
    rows: int
    columns: int
    cell_width_px: int
    cell_height_px: int

    @property
    def tabular(self) -> bool:
        return self.mode is not LayoutMode.SINGLE

    @property
    def cell_width_pct(self) -> float:
        return 100.0 / self.columns

    def slots(self) -> list[list[int | None]]:
        """Image indices row by row; trailing cells of a short last row are None."""
        out: list[list[int | None]] = []
        for r in range(self.rows):
            row: list[int | None] = []
            for c in range(self.columns):
                i = r * self.columns + c
                row.append(i if i < self.count else None)
            out.append(row)
        return out


def plan(count: int, mode: LayoutMode | None, sizes: LayoutSizes) -> Arrangement:
    """Decide rows x columns and the cell size for `count` images.

    grid/row with a single image fall back to single.
    """
    count = max(0, int(count))
    mode = mode or LayoutMode.SINGLE

    if mode is LayoutMode.SINGLE or count <= 1:
        w, h = sizes.large
        return Arrangement(LayoutMode.SINGLE, count, rows=count, columns=1, cell_width_px=w, cell_height_px=h)

    if mode is LayoutMode.ROW:
        w = max(1, round(sizes.narrow_width / count))
        return Arrangement(LayoutMode.ROW, count, rows=1, columns=count, cell_width_px=w, cell_height_px=sizes.narrow_height)

    columns = math.ceil(math.sqrt(count))
    rows = math.ceil(count / columns)
    w, h = sizes.medium
    return Arrangement(LayoutMode.GRID, count, rows=rows, columns=columns, cell_width_px=w, cell_height_px=h)
