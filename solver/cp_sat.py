from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import GridSettings
from solver.grid import Grid
from solver.placements import Candidate

# ---------------- helpers ----------------

def _covered_cells(grid: Grid, cand: Candidate) -> List[int]:
    cells = grid.place(cand.mask, cand.placement.loc.position, 0)
    grid.remove(cells)
    return cells

def _configure(solver: "_cp.CpSolver", seconds: float) -> None:
    solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.num_search_workers = int(getattr(CFG, "WORKERS", 1))
    solver.parameters.cp_model_presolve = True
    solver.parameters.log_search_progress = False
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.stop_after_first_solution = True

# ---------------- probe ----------------

def probe_feasible(
    candidates: Sequence[Sequence[Candidate]],
    settings: GridSettings,
    max_seconds: Optional[float] = None,
) -> Optional[bool]:
    """Ask CP-SAT whether the requirements can be packed at all.

    ``candidates[i]`` are the admissible placements of requirement ``i``.
    The model only knows overlap: exactly one candidate per requirement and
    at most one requirement per cell.  Whole-board rules (colour contact,
    bug expectations) are left to the backtracking search, so ``True`` means
    "maybe" to the caller.  Returns ``False`` only when proven infeasible and
    ``None`` when the solver stops early.
    """
    seconds = CFG.CP_SAT_SECONDS if max_seconds is None else max_seconds
    meta: Dict[str, object] = {
        "requirements": len(candidates),
        "variables": 0,
        "status": None,
        "reason": None,
    }
    setattr(probe_feasible, "last_meta", meta)

    if any(not cands for cands in candidates):
        meta["reason"] = "requirement_without_candidates"
        return False

    grid = Grid(settings)
    m = _cp.CpModel()

    # exactly one placement per requirement
    p = [[m.NewBoolVar(f"p_{i}_{k}") for k in range(len(cands))] for i, cands in enumerate(candidates)]
    for i in range(len(candidates)):
        m.AddExactlyOne(p[i])

    # no overlap
    cell_to_vars: Dict[int, List] = defaultdict(list)
    for i, cands in enumerate(candidates):
        for k, cand in enumerate(cands):
            for cell in _covered_cells(grid, cand):
                cell_to_vars[cell].append(p[i][k])
    for vars_here in cell_to_vars.values():
        if len(vars_here) > 1:
            m.AddAtMostOne(vars_here)

    meta["variables"] = sum(len(row) for row in p)

    solver = _cp.CpSolver()
    _configure(solver, seconds)
    res = solver.Solve(m)
    meta["status"] = solver.StatusName(res)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        return True
    if res == _cp.INFEASIBLE:
        meta["reason"] = "Proven infeasible under current constraints"
        return False
    if res == _cp.MODEL_INVALID:
        meta["reason"] = "Model invalid (configuration error)"
        return None
    meta["reason"] = "Stopped before solution (timebox)"
    return None
