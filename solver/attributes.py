"""Attribute candidate search.

First phase of the two-phase solver: enumerate how many copies of each part
to use so that every attribute can still reach its target once the parts are
placed.  Each attribute carries two running totals:

* ``guaranteed`` - the sum of ``min(bugless, bugged)``; applies however the
  part ends up placed, so it is the lower bound checked against the cap.
* ``worst_case`` - the sum of ``max(bugless, bugged)``; the optimistic upper
  bound checked against the target.

Caps are only used for pruning here; whether a multiplicity vector really
stays under its caps depends on the arrangement found in the second phase.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from models import Constraint, Effect
from solver.errors import MismatchedConstraintCount


def parts_by_attribute(
    effects: Sequence[Sequence[Effect]],
    n_attributes: int,
) -> List[List[int]]:
    """Per attribute, the indices of parts touching it, largest guarantee first."""
    by_attr: List[List[int]] = [[] for _ in range(n_attributes)]
    for part_idx, part_effects in enumerate(effects):
        for attr_idx, effect in enumerate(part_effects):
            if effect.is_zero():
                continue
            by_attr[attr_idx].append(part_idx)
    for attr_idx, part_indexes in enumerate(by_attr):
        part_indexes.sort(key=lambda i: (-effects[i][attr_idx].guaranteed, i))
    return by_attr


def _open_attribute(
    constraints: Sequence[Constraint],
    guaranteed: Sequence[int],
    worst_case: Sequence[int],
) -> Optional[int]:
    for i, c in enumerate(constraints):
        if worst_case[i] < c.target and not c.over_cap(guaranteed[i]):
            return i
    return None


def _search(
    effects: Sequence[Sequence[Effect]],
    constraints: Sequence[Constraint],
    by_attr: Sequence[Sequence[int]],
    guaranteed: Tuple[int, ...],
    worst_case: Tuple[int, ...],
    part_limit: int,
) -> Iterator[List[int]]:
    attr_idx = _open_attribute(constraints, guaranteed, worst_case)
    if attr_idx is None:
        yield [0] * len(effects)
        return

    if part_limit <= 0:
        return

    for part_idx in by_attr[attr_idx]:
        part_effects = effects[part_idx]
        next_guaranteed = tuple(g + e.guaranteed for g, e in zip(guaranteed, part_effects))
        if any(c.over_cap(g) for c, g in zip(constraints, next_guaranteed)):
            continue
        next_worst = tuple(w + e.worst_case for w, e in zip(worst_case, part_effects))

        for counts in _search(
            effects, constraints, by_attr, next_guaranteed, next_worst, part_limit - 1
        ):
            counts[part_idx] += 1
            yield counts


def gather(
    effects: Sequence[Sequence[Effect]],
    constraints: Sequence[Constraint],
    part_limit: int,
) -> Iterator[List[int]]:
    """Yield every distinct part multiplicity vector, in discovery order.

    ``effects[i][j]`` is part ``i``'s effect on attribute ``j``.  At most
    ``part_limit`` parts are chosen in total.
    """
    n = len(constraints)
    for part_idx, part_effects in enumerate(effects):
        if len(part_effects) != n:
            raise MismatchedConstraintCount(n, len(part_effects), part_idx)

    by_attr = parts_by_attribute(effects, n)
    seen: Set[Tuple[int, ...]] = set()
    zeros = (0,) * n
    for counts in _search(effects, constraints, by_attr, zeros, zeros, part_limit):
        key = tuple(counts)
        if key in seen:
            continue
        seen.add(key)
        yield counts


def totals(
    effects: Sequence[Sequence[Effect]],
    counts: Sequence[int],
) -> Dict[str, List[int]]:
    """Guaranteed and worst-case attribute totals for a multiplicity vector."""
    n = len(effects[0]) if effects else 0
    guaranteed = [0] * n
    worst_case = [0] * n
    for part_effects, count in zip(effects, counts):
        for j, e in enumerate(part_effects):
            guaranteed[j] += e.guaranteed * count
            worst_case[j] += e.worst_case * count
    return {"guaranteed": guaranteed, "worst_case": worst_case}
