from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from models import GridSettings, Location, Part, Placement, PlacementConstraint, Position
from solver.errors import DestinationClobbered, SourceClipped
from solver.grid import Grid
from solver.mask import Mask


@dataclass(frozen=True)
class Candidate:
    placement: Placement
    mask: Mask


def placement_is_admissible(
    grid: Grid,
    cells: Sequence[int],
    is_solid: bool,
    constraint: PlacementConstraint,
) -> bool:
    """Single-tile checks for the cells just written by one placement.

    Same-colour contact is not known until the board is complete, so a tile
    that passes here may still turn out bugged.
    """
    out_of_bounds = False
    if grid.has_oob:
        ring = [grid.on_ring(idx) for idx in cells]
        # a tile lying wholly in the out-of-bounds ring is never placeable
        if all(ring):
            return False
        out_of_bounds = any(ring)

    W, cl = grid.width, grid.command_line_row
    on_command_line = any(idx // W == cl for idx in cells)

    if constraint.on_command_line is not None and constraint.on_command_line != on_command_line:
        return False

    if constraint.bugged is False and (out_of_bounds or is_solid == (not on_command_line)):
        return False

    return True


def positions_for_mask(
    mask: Mask,
    is_solid: bool,
    settings: GridSettings,
    constraint: PlacementConstraint,
) -> List[Position]:
    grid = Grid(settings)
    positions: List[Position] = []
    for y in range(-mask.height + 1, mask.height):
        for x in range(-mask.width + 1, mask.width):
            try:
                cells = grid.place(mask, (x, y), 0)
            except (SourceClipped, DestinationClobbered):
                continue
            ok = placement_is_admissible(grid, cells, is_solid, constraint)
            grid.remove(cells)
            if ok:
                positions.append((x, y))
    return positions


def orient(mask: Mask, rotation: int, shape: Tuple[int, int]) -> Optional[Mask]:
    """Rotate ``mask`` and reframe it onto a board of ``shape``.

    Odd turns on a non-square board transpose the mask's box, so the
    occupied cells are re-anchored at the top-left corner.  ``None`` means
    the rotated shape is larger than the board.
    """
    return mask.rotate(rotation).fitted(shape)


def locations_for_mask(
    mask: Mask,
    is_solid: bool,
    settings: GridSettings,
    constraint: PlacementConstraint,
    spinnable: bool = True,
) -> List[Tuple[Location, Mask]]:
    out = [
        (Location(pos, 0), mask)
        for pos in positions_for_mask(mask, is_solid, settings, constraint)
    ]
    if not spinnable:
        return out

    known = [mask.trimmed()]
    rotated = mask
    for rotation in range(1, 4):
        rotated = rotated.rotate90()
        key = rotated.trimmed()
        if key in known:
            break
        known.append(key)
        framed = rotated.fitted(settings.shape)
        if framed is None:
            continue
        out.extend(
            (Location(pos, rotation), framed)
            for pos in positions_for_mask(framed, is_solid, settings, constraint)
        )
    return out


def mask_variants(part: Part, constraint: PlacementConstraint) -> List[bool]:
    if constraint.compressed is not None:
        return [constraint.compressed]
    if part.compressed_mask == part.uncompressed_mask:
        return [True]
    return [True, False]


def candidates_for_requirement(
    part: Part,
    settings: GridSettings,
    constraint: PlacementConstraint = PlacementConstraint(),
    *,
    spinnable: bool = True,
    requirement_index: int = 0,
    part_index: int = 0,
) -> List[Candidate]:
    """Every admissible ``(variant, rotation, position)`` for one requirement."""
    candidates: List[Candidate] = []
    for compressed in mask_variants(part, constraint):
        for loc, mask in locations_for_mask(
            part.mask(compressed), part.is_solid, settings, constraint, spinnable
        ):
            placement = Placement(loc, compressed, requirement_index, part_index)
            candidates.append(Candidate(placement, mask))
    return candidates


def min_cells(part: Part, constraint: PlacementConstraint) -> int:
    return min(part.mask(c).count() for c in mask_variants(part, constraint))
