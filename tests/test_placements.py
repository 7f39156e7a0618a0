from models import GridSettings, Location, Part, PlacementConstraint
from solver.grid import Grid
from solver.mask import Mask
from solver.placements import (
    candidates_for_requirement,
    mask_variants,
    min_cells,
    placement_is_admissible,
    positions_for_mask,
)

T, F = True, False

L_3x3 = Mask.from_rows([[T, F, F], [T, T, F], [F, F, F]])


def _settings(row=0, oob=False):
    return GridSettings(width=3, height=3, has_oob=oob, command_line_row=row)


def _locs(cands):
    return [(c.placement.loc.position, c.placement.loc.rotation) for c in cands]


def test_l_tile_on_top_command_line_row():
    part = Part(is_solid=True, color=0, compressed_mask=L_3x3)
    cands = candidates_for_requirement(
        part, _settings(row=0), PlacementConstraint(on_command_line=True, bugged=False)
    )
    assert _locs(cands) == [
        ((0, 0), 0), ((1, 0), 0),
        ((-1, 0), 1), ((0, 0), 1),
        ((-1, -1), 2), ((0, -1), 2),
        ((0, -1), 3), ((1, -1), 3),
    ]
    assert all(c.placement.compressed for c in cands)


def test_l_tile_on_middle_command_line_row():
    part = Part(is_solid=True, color=0, compressed_mask=L_3x3)
    cands = candidates_for_requirement(
        part, _settings(row=1), PlacementConstraint(on_command_line=True, bugged=False)
    )
    # every 2x2 box on a 3x3 board covers the middle row
    assert len(cands) == 16
    assert sorted({rot for _, rot in _locs(cands)}) == [0, 1, 2, 3]


def test_off_command_line_excludes_row():
    part = Part(is_solid=False, color=0, compressed_mask=L_3x3)
    cands = candidates_for_requirement(
        part, _settings(row=0), PlacementConstraint(on_command_line=False)
    )
    assert len(cands) == 8
    for c in cands:
        grid = Grid(_settings(row=0))
        grid.place(c.mask, c.placement.loc.position, 0)
        assert all(cell < 0 for cell in grid.row(0))


def test_bugless_solid_part_must_touch_command_line():
    part = Part(is_solid=True, color=0, compressed_mask=L_3x3)
    free = candidates_for_requirement(part, _settings(row=0))
    bugless = candidates_for_requirement(part, _settings(row=0), PlacementConstraint(bugged=False))
    assert len(free) == 16
    assert _locs(bugless) == _locs(candidates_for_requirement(
        part, _settings(row=0), PlacementConstraint(on_command_line=True)
    ))


def test_bugless_non_solid_part_must_avoid_command_line():
    part = Part(is_solid=False, color=0, compressed_mask=L_3x3)
    bugless = candidates_for_requirement(part, _settings(row=0), PlacementConstraint(bugged=False))
    off = candidates_for_requirement(part, _settings(row=0), PlacementConstraint(on_command_line=False))
    assert _locs(bugless) == _locs(off)


def test_symmetric_shape_has_single_rotation():
    square = Mask.from_rows([[T, T, F], [T, T, F], [F, F, F]])
    part = Part(is_solid=False, color=0, compressed_mask=square)
    cands = candidates_for_requirement(part, _settings())
    assert _locs(cands) == [((0, 0), 0), ((1, 0), 0), ((0, 1), 0), ((1, 1), 0)]


def test_two_fold_symmetry_stops_after_repeat():
    bar = Mask.from_rows([[T, T, F], [F, F, F], [F, F, F]])
    part = Part(is_solid=False, color=0, compressed_mask=bar)
    cands = candidates_for_requirement(part, _settings())
    assert sorted({rot for _, rot in _locs(cands)}) == [0, 1]
    assert len(cands) == 12


def test_not_spinnable_keeps_rotation_zero():
    part = Part(is_solid=True, color=0, compressed_mask=L_3x3)
    cands = candidates_for_requirement(part, _settings(), spinnable=False)
    assert {rot for _, rot in _locs(cands)} == {0}
    assert len(cands) == 4


def test_oob_rejects_placements_entirely_in_ring():
    dot = Mask.from_rows([[T, F, F], [F, F, F], [F, F, F]])
    positions = positions_for_mask(dot, False, _settings(oob=True), PlacementConstraint())
    assert positions == [(1, 1)]


def test_oob_bugless_rejects_ring_contact():
    settings = GridSettings(width=5, height=5, has_oob=True, command_line_row=2)
    dot_rows = [[F] * 5 for _ in range(5)]
    dot_rows[0][0] = T
    dot = Mask.from_rows(dot_rows)
    free = positions_for_mask(dot, True, settings, PlacementConstraint())
    bugless = positions_for_mask(dot, True, settings, PlacementConstraint(bugged=False))
    # a single cell on the ring lies wholly out of bounds
    assert len(free) == 9
    assert bugless == [(1, 2), (2, 2), (3, 2)]


def test_compressed_variant_selection():
    compressed = Mask.from_rows([[T, F, F], [F, F, F], [F, F, F]])
    uncompressed = Mask.from_rows([[T, T, F], [F, F, F], [F, F, F]])
    same = Part(is_solid=False, color=0, compressed_mask=compressed)
    differ = Part(is_solid=False, color=0, compressed_mask=compressed, uncompressed_mask=uncompressed)

    assert mask_variants(same, PlacementConstraint()) == [True]
    assert mask_variants(differ, PlacementConstraint()) == [True, False]
    assert mask_variants(differ, PlacementConstraint(compressed=False)) == [False]
    assert mask_variants(same, PlacementConstraint(compressed=False)) == [False]

    cands = candidates_for_requirement(differ, _settings())
    flags = [c.placement.compressed for c in cands]
    n_compressed = flags.count(True)
    assert n_compressed == 9
    assert flags == [True] * n_compressed + [False] * (len(flags) - n_compressed)
    assert all(c.mask.count() == 2 for c in cands if not c.placement.compressed)


def test_candidates_carry_requirement_and_part_index():
    part = Part(is_solid=False, color=0, compressed_mask=L_3x3)
    cands = candidates_for_requirement(part, _settings(), requirement_index=4, part_index=2)
    assert {(c.placement.requirement_index, c.placement.part_index) for c in cands} == {(4, 2)}
    assert cands[0].placement.loc == Location((0, 0), 0)


def test_min_cells_uses_smallest_allowed_variant():
    small = Mask.from_rows([[T, F, F], [F, F, F], [F, F, F]])
    big = Mask.from_rows([[T, T, T], [F, F, F], [F, F, F]])
    part = Part(is_solid=False, color=0, compressed_mask=small, uncompressed_mask=big)
    assert min_cells(part, PlacementConstraint()) == 1
    assert min_cells(part, PlacementConstraint(compressed=False)) == 3


def test_placement_is_admissible_on_written_cells():
    grid = Grid(_settings(row=1))
    cells = grid.place(L_3x3, (0, 0), 0)
    assert placement_is_admissible(grid, cells, True, PlacementConstraint(on_command_line=True))
    assert not placement_is_admissible(grid, cells, True, PlacementConstraint(on_command_line=False))
    assert not placement_is_admissible(grid, cells, False, PlacementConstraint(bugged=False))
