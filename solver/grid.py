from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from models import EMPTY, FORBIDDEN, GridSettings, Position
from solver.errors import DestinationClobbered, ShapesMismatched, SourceClipped
from solver.mask import Mask


class Grid:
    """Board of ``height x width`` cells.

    Each cell holds ``EMPTY``, ``FORBIDDEN`` or the index of the requirement
    whose part covers it.  Cells are stored row-major in a flat list.
    """

    def __init__(self, settings: GridSettings):
        self.width = int(settings.width)
        self.height = int(settings.height)
        self.has_oob = bool(settings.has_oob)
        self.command_line_row = int(settings.command_line_row)
        self.cells: List[int] = [EMPTY] * (self.width * self.height)
        if self.has_oob and self.cells:
            W, H = self.width, self.height
            for idx in (0, W - 1, (H - 1) * W, (H - 1) * W + W - 1):
                self.cells[idx] = FORBIDDEN

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def settings(self) -> GridSettings:
        return GridSettings(self.width, self.height, self.has_oob, self.command_line_row)

    def copy(self) -> "Grid":
        other = Grid.__new__(Grid)
        other.width = self.width
        other.height = self.height
        other.has_oob = self.has_oob
        other.command_line_row = self.command_line_row
        other.cells = list(self.cells)
        return other

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.shape == other.shape and self.cells == other.cells

    def cell(self, x: int, y: int) -> int:
        return self.cells[y * self.width + x]

    def row(self, y: int) -> List[int]:
        return self.cells[y * self.width:(y + 1) * self.width]

    def col(self, x: int) -> List[int]:
        return self.cells[x::self.width]

    def placeable_cells(self) -> int:
        return sum(1 for c in self.cells if c != FORBIDDEN)

    def on_ring(self, idx: int) -> bool:
        y, x = divmod(idx, self.width)
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def place(self, mask: Mask, position: Position, requirement_index: int) -> List[int]:
        """Place ``mask`` at ``position`` or raise without touching the board.

        Returns the written cell indices, which :meth:`remove` accepts to undo
        the placement.
        """
        if mask.shape != self.shape:
            raise ShapesMismatched(mask.shape, self.shape)

        px, py = position
        src_left, dst_left = (-px, 0) if px < 0 else (0, px)
        src_top, dst_top = (-py, 0) if py < 0 else (0, py)

        W = self.width
        targets: List[int] = []
        for y, x in mask.occupied():
            if (
                x < src_left
                or y < src_top
                or x >= mask.width - dst_left
                or y >= mask.height - dst_top
            ):
                raise SourceClipped(f"cell ({x}, {y}) falls off the grid at {position}")
            targets.append((y - src_top + dst_top) * W + (x - src_left + dst_left))

        for idx in targets:
            if self.cells[idx] != EMPTY:
                raise DestinationClobbered(f"cell {divmod(idx, W)[::-1]} is not empty")

        for idx in targets:
            self.cells[idx] = requirement_index
        return targets

    def remove(self, cells: Iterable[int]) -> None:
        for idx in cells:
            self.cells[idx] = EMPTY

    def part_signature(self, part_of: Sequence[int]) -> Tuple[int, ...]:
        """Board contents with requirement indices replaced by part indices."""
        return tuple(part_of[c] if c >= 0 else c for c in self.cells)

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, oob={self.has_oob}, cl={self.command_line_row})"
