"""Backtracking placement search.

Second phase of the solver: given concrete requirements (one per part copy),
enumerate every arrangement of them on the board.  Solutions are produced
lazily; abandoning the iterator abandons the search.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from config import CFG
from models import GridSettings, Part, Placement, Requirement, Solution
from progress import log_event, record_stats
from solver.errors import DestinationClobbered, ShapesMismatched, SourceClipped
from solver.grid import Grid
from solver.placements import (
    Candidate,
    candidates_for_requirement,
    min_cells,
    orient,
    placement_is_admissible,
)


def _new_stats() -> Dict[str, Any]:
    return {
        "requirements": 0,
        "nodes": 0,
        "clipped": 0,
        "clobbered": 0,
        "rejected": 0,
        "memo_hits": 0,
        "solutions": 0,
        "reason": None,
    }


@dataclass
class SearchContext:
    """State shared down one top-level search; never reused across searches."""

    memoize: bool = True
    visited: Set[Tuple[int, Tuple[int, ...]]] = field(default_factory=set)
    stats: Dict[str, Any] = field(default_factory=_new_stats)


@dataclass
class PlacementDetail:
    out_of_bounds: bool = False
    on_command_line: bool = False
    touching_same_color: bool = False


# ---------- admissibility ----------

def requirements_are_admissible(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    settings: GridSettings,
) -> Optional[str]:
    """Cheap checks run before searching.  Returns a reason when unsolvable."""
    if not 0 <= settings.command_line_row < settings.height:
        return "command_line_row_outside_grid"

    on_command_line = sum(1 for r in requirements if r.constraint.on_command_line)
    if on_command_line > settings.width:
        return "too_many_command_line_parts"

    occupied = sum(min_cells(parts[r.part_index], r.constraint) for r in requirements)
    if occupied > Grid(settings).placeable_cells():
        return "parts_exceed_placeable_cells"

    return None


def placement_details(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    grid: Grid,
) -> List[PlacementDetail]:
    details = [PlacementDetail() for _ in requirements]
    W, H = grid.width, grid.height
    cells = grid.cells
    for idx, req_idx in enumerate(cells):
        if req_idx < 0:
            continue
        detail = details[req_idx]
        color = parts[requirements[req_idx].part_index].color
        y, x = divmod(idx, W)

        if grid.has_oob and grid.on_ring(idx):
            detail.out_of_bounds = True

        if y == grid.command_line_row:
            detail.on_command_line = True

        if detail.touching_same_color:
            continue
        for x2, y2 in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
            if x2 < 0 or x2 >= W or y2 < 0 or y2 >= H:
                continue
            other = cells[y2 * W + x2]
            if other < 0 or other == req_idx:
                continue
            if parts[requirements[other].part_index].color == color:
                detail.touching_same_color = True
                break
    return details


def placement_is_bugged(part: Part, detail: PlacementDetail) -> bool:
    return (
        detail.out_of_bounds
        or part.is_solid == (not detail.on_command_line)
        or detail.touching_same_color
    )


def solution_is_admissible(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    grid: Grid,
) -> bool:
    """Whole-board check of every ``bugged`` expectation."""
    for req, detail in zip(requirements, placement_details(parts, requirements, grid)):
        if req.constraint.bugged is None:
            continue
        if req.constraint.bugged != placement_is_bugged(parts[req.part_index], detail):
            return False
    return True


# ---------- search ----------

def _search(
    ctx: SearchContext,
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    grid: Grid,
    order: Sequence[Tuple[int, List[Candidate]]],
    part_of: Sequence[int],
    depth: int,
) -> Iterator[List[Placement]]:
    if depth == len(order):
        yield []
        return

    req_idx, candidates = order[depth]
    req = requirements[req_idx]
    part = parts[req.part_index]
    last = depth == len(order) - 1
    stats = ctx.stats

    for cand in candidates:
        stats["nodes"] += 1
        try:
            cells = grid.place(cand.mask, cand.placement.loc.position, req_idx)
        except SourceClipped:
            stats["clipped"] += 1
            continue
        except DestinationClobbered:
            stats["clobbered"] += 1
            continue

        try:
            if not placement_is_admissible(grid, cells, part.is_solid, req.constraint):
                stats["rejected"] += 1
                continue

            if ctx.memoize:
                key = (depth, grid.part_signature(part_of))
                if key in ctx.visited:
                    stats["memo_hits"] += 1
                    continue
                ctx.visited.add(key)

            if last:
                if solution_is_admissible(parts, requirements, grid):
                    yield [cand.placement]
                else:
                    stats["rejected"] += 1
                continue

            for rest in _search(ctx, parts, requirements, grid, order, part_of, depth + 1):
                rest.append(cand.placement)
                yield rest
        finally:
            grid.remove(cells)


def check_inputs(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    settings: GridSettings,
) -> None:
    for i, req in enumerate(requirements):
        if not 0 <= req.part_index < len(parts):
            raise IndexError(f"requirement {i} refers to unknown part {req.part_index}")
    for part in parts:
        for mask in (part.compressed_mask, part.uncompressed_mask):
            if mask.shape != settings.shape:
                raise ShapesMismatched(mask.shape, settings.shape)


def _spinnable(part: Part, spinnable_colors: Optional[Sequence[bool]]) -> bool:
    if spinnable_colors is None:
        return True
    return 0 <= part.color < len(spinnable_colors) and bool(spinnable_colors[part.color])


def requirement_candidates(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    settings: GridSettings,
    spinnable_colors: Optional[Sequence[bool]] = None,
) -> List[List[Candidate]]:
    out = []
    for i, req in enumerate(requirements):
        part = parts[req.part_index]
        out.append(candidates_for_requirement(
            part,
            settings,
            req.constraint,
            spinnable=_spinnable(part, spinnable_colors),
            requirement_index=i,
            part_index=req.part_index,
        ))
    return out


def _solutions(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    settings: GridSettings,
    spinnable_colors: Optional[Sequence[bool]],
    ctx: SearchContext,
) -> Iterator[Solution]:
    stats = ctx.stats
    stats["requirements"] = len(requirements)
    try:
        reason = requirements_are_admissible(parts, requirements, settings)
        if reason is not None:
            stats["reason"] = reason
            log_event("Placement search skipped", requirements=len(requirements), reason=reason)
            return

        candidates = requirement_candidates(parts, requirements, settings, spinnable_colors)

        # hardest to fit first; equal counts keep requirement order so copies
        # of one part stay adjacent
        order = sorted(enumerate(candidates), key=lambda item: (len(item[1]), item[0]))
        if order and not order[0][1]:
            stats["reason"] = "requirement_without_candidates"
            return

        part_of = [req.part_index for req in requirements]
        grid = Grid(settings)
        for raw in _search(ctx, parts, requirements, grid, order, part_of, 0):
            raw.sort(key=lambda p: p.requirement_index)
            assert [p.requirement_index for p in raw] == list(range(len(requirements)))
            stats["solutions"] += 1
            yield raw
    finally:
        setattr(solve, "last_stats", dict(stats))
        record_stats(stats)


def solve(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    settings: Optional[GridSettings] = None,
    *,
    memoize: Optional[bool] = None,
    spinnable_colors: Optional[Sequence[bool]] = None,
) -> Iterator[Solution]:
    """Lazily enumerate placements satisfying ``requirements``.

    Each solution lists one :class:`Placement` per requirement, in requirement
    order.  Configuration errors (unknown part, mask/grid shape mismatch)
    raise immediately; everything else is reported by yielding nothing.
    ``spinnable_colors[color]`` restricts rotation per part colour; ``None``
    lets every part rotate.
    """
    settings = settings or GridSettings()
    check_inputs(parts, requirements, settings)
    ctx = SearchContext(memoize=CFG.MEMOIZE if memoize is None else bool(memoize))
    return _solutions(parts, requirements, settings, spinnable_colors, ctx)


def place_all(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    placements: Sequence[Placement],
    settings: Optional[GridSettings] = None,
) -> Grid:
    """Replay a solution onto a fresh board.

    Raises :class:`PlaceError` when a placement does not fit.
    """
    grid = Grid(settings or GridSettings())
    for i, (req, placement) in enumerate(zip(requirements, placements)):
        part = parts[req.part_index]
        mask = orient(part.mask(placement.compressed), placement.loc.rotation, grid.shape)
        if mask is None:
            raise SourceClipped(f"rotation {placement.loc.rotation} of part {req.part_index} does not fit the board")
        grid.place(mask, placement.loc.position, i)
    return grid
