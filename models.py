from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from config import CFG
from solver.mask import Mask

EMPTY = -1
FORBIDDEN = -2

Position = Tuple[int, int]

@dataclass(frozen=True)
class Effect:
    bugless: int = 0
    bugged: int = 0

    @property
    def guaranteed(self) -> int:
        return min(self.bugless, self.bugged)

    @property
    def worst_case(self) -> int:
        return max(self.bugless, self.bugged)

    def value(self, bugged: bool) -> int:
        return self.bugged if bugged else self.bugless

    def is_zero(self) -> bool:
        return self.bugless == 0 and self.bugged == 0

@dataclass
class Part:
    is_solid: bool
    color: int
    compressed_mask: Mask
    uncompressed_mask: Optional[Mask] = None
    effects: Sequence[Effect] = ()
    name: str = ""

    def __post_init__(self):
        if self.uncompressed_mask is None:
            self.uncompressed_mask = self.compressed_mask

    def mask(self, compressed: bool) -> Mask:
        return self.compressed_mask if compressed else self.uncompressed_mask

@dataclass(frozen=True)
class Constraint:
    target: int
    cap: Optional[int] = None

    def over_cap(self, value: int) -> bool:
        return self.cap is not None and value > self.cap

@dataclass(frozen=True)
class PlacementConstraint:
    compressed: Optional[bool] = None
    on_command_line: Optional[bool] = None
    bugged: Optional[bool] = None

@dataclass(frozen=True)
class Requirement:
    part_index: int
    constraint: PlacementConstraint = field(default_factory=PlacementConstraint)

@dataclass(frozen=True)
class GridSettings:
    width: int = CFG.GRID_WIDTH
    height: int = CFG.GRID_HEIGHT
    has_oob: bool = CFG.GRID_HAS_OOB
    command_line_row: int = CFG.COMMAND_LINE_ROW

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

@dataclass(frozen=True)
class Location:
    position: Position
    rotation: int = 0

@dataclass(frozen=True)
class Placement:
    loc: Location
    compressed: bool
    requirement_index: int = 0
    part_index: int = 0

Solution = List[Placement]
