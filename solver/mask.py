from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from solver.errors import ShapeError


@dataclass(frozen=True)
class Mask:
    """Immutable ``height x width`` occupancy grid of a part, row-major."""

    height: int
    width: int
    cells: Tuple[bool, ...]

    def __post_init__(self):
        if len(self.cells) != self.height * self.width:
            raise ShapeError((self.height, self.width), len(self.cells))

    @classmethod
    def new(cls, shape: Sequence[int], cells: Iterable) -> "Mask":
        height, width = shape
        return cls(int(height), int(width), tuple(bool(c) for c in cells))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence]) -> "Mask":
        height = len(rows)
        width = len(rows[0]) if rows else 0
        flat: List[bool] = []
        for row in rows:
            flat.extend(bool(c) for c in row)
        return cls(height, width, tuple(flat))

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    def __getitem__(self, yx: Tuple[int, int]) -> bool:
        y, x = yx
        return self.cells[y * self.width + x]

    def row(self, y: int) -> Tuple[bool, ...]:
        return self.cells[y * self.width:(y + 1) * self.width]

    def col(self, x: int) -> Tuple[bool, ...]:
        return self.cells[x::self.width] if self.width else ()

    def occupied(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(y, x)`` for every occupied cell."""
        w = self.width
        for i, c in enumerate(self.cells):
            if c:
                yield divmod(i, w)

    def count(self) -> int:
        return sum(1 for c in self.cells if c)

    def rotate90(self) -> "Mask":
        # transpose, then reverse each row: a clockwise quarter turn
        h, w = self.height, self.width
        out = [self.cells[(h - 1 - x) * w + y] for y in range(w) for x in range(h)]
        return Mask(w, h, tuple(out))

    def rotate(self, n: int) -> "Mask":
        mask = self
        for _ in range(n % 4):
            mask = mask.rotate90()
        return mask

    def trimmed(self) -> "Mask":
        rows = [y for y in range(self.height) if any(self.row(y))]
        if not rows:
            return self
        cols = [x for x in range(self.width) if any(self.col(x))]
        top, bottom = rows[0], rows[-1] + 1
        left, right = cols[0], cols[-1] + 1
        if (top, left, bottom, right) == (0, 0, self.height, self.width):
            return self
        return Mask.from_rows([self.row(y)[left:right] for y in range(top, bottom)])

    def fitted(self, shape: Sequence[int]) -> Optional["Mask"]:
        """Reframe onto a ``shape`` box, or ``None`` if the cells cannot fit.

        A mask already of that shape is returned unchanged.  Otherwise the
        occupied bounding box is anchored at the top-left corner and padded.
        """
        height, width = shape
        if self.shape == (height, width):
            return self
        if not self.count():
            return Mask.new((height, width), [False] * (height * width))
        box = self.trimmed()
        if box.height > height or box.width > width:
            return None
        pad = (False,) * (width - box.width)
        rows = [box.row(y) + pad for y in range(box.height)]
        rows.extend([(False,) * width] * (height - box.height))
        return Mask.from_rows(rows)

    def __str__(self) -> str:
        return "\n".join(
            "".join("#" if c else "." for c in self.row(y)) for y in range(self.height)
        )
