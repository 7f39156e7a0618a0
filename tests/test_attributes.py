import pytest

from models import Constraint, Effect
from solver.attributes import gather, parts_by_attribute, totals
from solver.errors import MismatchedConstraintCount

SUPER_ARMOR = [Effect(bugless=1, bugged=0), Effect(0, 0)]
HP_100 = [Effect(0, 0), Effect(100, 100)]


def test_exact_targets():
    got = list(gather([SUPER_ARMOR, HP_100], [Constraint(1, 1), Constraint(300, 300)], 4))
    assert got == [[1, 3]]


def test_inexact_target_overshoots_within_cap():
    got = list(gather([SUPER_ARMOR, HP_100], [Constraint(1, 1), Constraint(350, 500)], 10))
    assert got == [[1, 4]]


def test_cap_below_single_part_yields_nothing():
    got = list(gather([[Effect(100, 100)]], [Constraint(50, 50)], 10))
    assert got == []


def test_largest_contribution_first():
    effects = [[Effect(10, 10)], [Effect(50, 50)], [Effect(100, 100)]]
    got = list(gather(effects, [Constraint(100, 100)], 2))
    assert got == [[0, 0, 1], [0, 2, 0]]


def test_multiple_effects():
    body_pack = [Effect(1, 0), Effect(1, 0)]
    super_armor = [Effect(1, 0), Effect(0, 0)]
    air_shoes = [Effect(0, 0), Effect(1, 0)]
    got = list(gather(
        [body_pack, super_armor, air_shoes],
        [Constraint(1, 1), Constraint(0, 1)],
        2,
    ))
    assert got == [[1, 0, 0], [0, 1, 0]]


def test_multiple_effects_cap_prunes():
    body_pack = [Effect(1, 1), Effect(1, 1)]
    super_armor = [Effect(1, 1), Effect(0, 0)]
    air_shoes = [Effect(0, 0), Effect(1, 1)]
    got = list(gather(
        [body_pack, super_armor, air_shoes],
        [Constraint(1, 1), Constraint(0, 0)],
        2,
    ))
    assert got == [[0, 1, 0]]


def test_part_budget_exhausted():
    hp = [Effect(100, 100)]
    assert list(gather([hp], [Constraint(300)], 2)) == []
    assert list(gather([hp], [Constraint(300)], 3)) == [[3]]


def test_no_open_attribute_yields_zero_vector():
    assert list(gather([HP_100], [Constraint(0, 0), Constraint(0, 0)], 5)) == [[0]]


def test_uncapped_constraint():
    got = list(gather([[Effect(40, 60)]], [Constraint(100)], 5))
    assert got == [[2]]


def test_duplicate_vectors_are_yielded_once():
    # both attributes can be opened by either part, in either order
    a = [Effect(1, 1), Effect(1, 1)]
    b = [Effect(1, 1), Effect(1, 1)]
    got = list(gather([a, b], [Constraint(2, 2), Constraint(2, 2)], 4))
    assert got == [[2, 0], [1, 1], [0, 2]]
    assert len({tuple(v) for v in got}) == len(got)


def test_parts_by_attribute_ordering_and_zero_filter():
    effects = [
        [Effect(5, 5), Effect(0, 0)],
        [Effect(1, 9), Effect(2, 2)],
        [Effect(5, 7), Effect(0, 0)],
    ]
    assert parts_by_attribute(effects, 2) == [[0, 2, 1], [1]]


def test_totals_bounds():
    out = totals([SUPER_ARMOR, HP_100], [1, 3])
    assert out == {"guaranteed": [0, 300], "worst_case": [1, 300]}


def test_mismatched_effect_count():
    with pytest.raises(MismatchedConstraintCount):
        list(gather([SUPER_ARMOR], [Constraint(1, 1)], 3))
