# Orchestrator: attribute search feeding the placement search
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from config import CFG
from models import Constraint, GridSettings, Part, PlacementConstraint, Requirement, Solution
from progress import (
    bump, log_event, reset, set_done, set_message, set_phase, start_timer,
)
from solver.attributes import gather, totals
from solver.cp_sat import probe_feasible
from solver.errors import MismatchedConstraintCount
from solver.grid import Grid
from solver.search import (
    check_inputs,
    place_all,
    placement_details,
    placement_is_bugged,
    requirement_candidates,
    solve,
)


# ---------- helpers ----------

def _part_limit(settings: GridSettings, part_limit: Optional[int]) -> int:
    if part_limit is not None:
        return max(0, int(part_limit))
    configured = int(getattr(CFG, "PART_LIMIT", 0))
    if configured > 0:
        return configured
    return Grid(settings).placeable_cells()


def requirements_for_counts(counts: Sequence[int]) -> List[Requirement]:
    """One unconstrained requirement per part copy, grouped by part."""
    requirements: List[Requirement] = []
    for part_index, count in enumerate(counts):
        requirements.extend(Requirement(part_index, PlacementConstraint()) for _ in range(count))
    return requirements


def attribute_totals(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    solution: Solution,
    settings: GridSettings,
) -> List[int]:
    """Realised attribute values, using each placement's actual bug state."""
    grid = place_all(parts, requirements, solution, settings)
    details = placement_details(parts, requirements, grid)
    n = len(parts[0].effects) if parts else 0
    out = [0] * n
    for req, detail in zip(requirements, details):
        part = parts[req.part_index]
        bugged = placement_is_bugged(part, detail)
        for j, effect in enumerate(part.effects):
            out[j] += effect.value(bugged)
    return out


def has_colorbug(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    solution: Solution,
    settings: GridSettings,
) -> bool:
    grid = place_all(parts, requirements, solution, settings)
    return any(d.touching_same_color for d in placement_details(parts, requirements, grid))


def _within_constraints(values: Sequence[int], constraints: Sequence[Constraint]) -> bool:
    return all(v >= c.target and not c.over_cap(v) for v, c in zip(values, constraints))


# ---------- main entry ----------

def _run(
    parts: Sequence[Part],
    constraints: Sequence[Constraint],
    want_colorbug: Optional[bool],
    settings: GridSettings,
    limit: int,
    memoize: Optional[bool],
    spinnable_colors: Optional[Sequence[bool]],
    probe: bool,
) -> Iterator[Solution]:
    reset()
    start_timer()
    set_phase("attributes")
    log_event(
        "Run setup",
        parts=len(parts),
        attributes=len(constraints),
        grid=f"{settings.width}x{settings.height}",
        part_limit=limit,
        want_colorbug=want_colorbug,
        cp_sat_probe=1 if probe else 0,
    )

    effects = [list(part.effects) for part in parts]
    try:
        for counts in gather(effects, constraints, limit):
            requirements = requirements_for_counts(counts)
            bump("requirement_sets")
            bounds = totals(effects, counts)
            log_event(
                "Requirement set",
                counts=counts,
                guaranteed=bounds["guaranteed"],
                worst_case=bounds["worst_case"],
            )

            if probe:
                verdict = probe_feasible(
                    requirement_candidates(parts, requirements, settings, spinnable_colors),
                    settings,
                )
                if verdict is False:
                    bump("skipped_sets")
                    meta = getattr(probe_feasible, "last_meta", {}) or {}
                    log_event("Requirement set skipped", counts=counts, reason=meta.get("reason"))
                    continue

            set_phase("placement")
            for solution in solve(
                parts,
                requirements,
                settings,
                memoize=memoize,
                spinnable_colors=spinnable_colors,
            ):
                values = attribute_totals(parts, requirements, solution, settings)
                if not _within_constraints(values, constraints):
                    continue
                if want_colorbug is not None and has_colorbug(parts, requirements, solution, settings) != want_colorbug:
                    continue
                bump("solutions")
                yield solution
            set_phase("attributes")
    except GeneratorExit:
        set_done(True, message="Stopped by caller")
        raise
    except Exception as e:
        set_message(f"{type(e).__name__}: {e}")
        set_done(False)
        raise
    set_done(True)


def solve_with_constraints(
    parts: Sequence[Part],
    constraints: Sequence[Constraint],
    want_colorbug: Optional[bool] = None,
    *,
    settings: Optional[GridSettings] = None,
    part_limit: Optional[int] = None,
    memoize: Optional[bool] = None,
    spinnable_colors: Optional[Sequence[bool]] = None,
    probe: Optional[bool] = None,
) -> Iterator[Solution]:
    """Two-phase solve: part multiplicities first, then their placements.

    Every yielded solution realises attribute values that meet each
    ``target`` and stay within each ``cap``.  ``want_colorbug`` keeps only
    solutions with (``True``) or without (``False``) same-colour contact.
    Placements carry ``part_index``, so a solution is self-describing.

    Raises :class:`MismatchedConstraintCount` before any search when a part
    declares a different number of effects than there are constraints.
    """
    settings = settings or GridSettings()
    n = len(constraints)
    for i, part in enumerate(parts):
        if len(part.effects) != n:
            raise MismatchedConstraintCount(n, len(part.effects), i)
    check_inputs(parts, [], settings)

    use_probe = bool(getattr(CFG, "CP_SAT_PROBE", False)) if probe is None else bool(probe)
    return _run(
        parts,
        constraints,
        want_colorbug,
        settings,
        _part_limit(settings, part_limit),
        memoize,
        spinnable_colors,
        use_probe,
    )
