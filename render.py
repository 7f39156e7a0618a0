
import string
from typing import Dict, List, Optional, Sequence

from models import EMPTY, FORBIDDEN, GridSettings, Part, Placement, Requirement
from solver.grid import Grid
from solver.search import place_all

_SYMBOLS = string.digits + string.ascii_letters

def _symbol(i: int) -> str:
    return _SYMBOLS[i] if 0 <= i < len(_SYMBOLS) else "?"

def render_grid(grid: Grid, labels: Optional[Dict[int, str]] = None) -> str:
    """One text line per board row; the command line row is marked with ``>``."""
    labels = labels or {}
    lines: List[str] = []
    for y in range(grid.height):
        row = []
        for c in grid.row(y):
            if c == EMPTY:
                row.append(".")
            elif c == FORBIDDEN:
                row.append("x")
            else:
                row.append(labels.get(c, _symbol(c)))
        marker = ">" if y == grid.command_line_row else " "
        lines.append(marker + "".join(row))
    return "\n".join(lines)

def render_solution(
    parts: Sequence[Part],
    requirements: Sequence[Requirement],
    solution: Sequence[Placement],
    settings: GridSettings,
):
    grid = place_all(parts, requirements, solution, settings)
    labels = {i: _symbol(req.part_index) for i, req in enumerate(requirements)}
    legend = [
        f"{_symbol(i)}: {part.name or f'part {i}'}"
        for i, part in enumerate(parts)
        if any(req.part_index == i for req in requirements)
    ]
    return render_grid(grid, labels), legend
