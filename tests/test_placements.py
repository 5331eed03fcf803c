from assembly_engine.geometry import DEFAULT_GRID, IDENTITY, Grid, Position, encode
from assembly_engine.placements import candidates_for_piece, enumerate_positions

FULL = DEFAULT_GRID.full_mask
H1 = [(0, 0, 0), (0, 0, 1), (1, 0, 0), (2, 0, 0), (2, 0, 1)]
V1 = [(0, 2, 0), (0, 1, 0), (0, 1, 1), (0, 0, 1)]
L_PIECE = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]

def test_flat_piece_gets_every_row():
    pos = enumerate_positions([(0, 0, 0), (1, 0, 0)])
    assert len(pos) == 6 * 3 * 2
    assert pos[:3] == [Position(0, 0, False), Position(0, 0, True), Position(0, 1, False)]
    assert pos[-1] == Position(5, 2, True)

def test_tall_piece_single_row_offset():
    pos = enumerate_positions(V1)
    assert len(pos) == 12
    assert all(p.y == 0 for p in pos)

def test_full_height_piece_has_no_positions():
    assert enumerate_positions([(0, y, 0) for y in range(4)]) == []

def test_custom_grid_enumeration():
    assert len(enumerate_positions([(0, 0, 0)], Grid(4, 5, 1))) == 4 * 5 * 2

def test_single_cell_flip_is_deduplicated():
    cands = candidates_for_piece([(0, 0, 0)], FULL)
    assert len(cands) == 18
    assert all(not p.flipped for p, _ in cands)

def test_mirror_symmetric_piece_keeps_one_per_translation():
    cands = candidates_for_piece(H1, FULL)
    assert len(cands) == 18
    assert cands[0] == (Position(0, 0, False), encode(H1, IDENTITY))

def test_candidates_stay_inside_target():
    target = encode([(x, y, 0) for x in range(3) for y in range(3)], IDENTITY)
    cands = candidates_for_piece(L_PIECE, target)
    assert cands
    for _, mask in cands:
        assert mask & target == mask

def test_candidate_masks_are_unique():
    for piece in (H1, V1, L_PIECE, [(0, 0, 0)]):
        masks = [m for _, m in candidates_for_piece(piece, FULL)]
        assert len(masks) == len(set(masks))

def test_l_piece_flip_is_a_distinct_pattern():
    cands = candidates_for_piece(L_PIECE, FULL)
    # 6 x-offsets, 2 row offsets, both mirror states
    assert len(cands) == 24

def test_empty_target_gives_no_candidates():
    assert candidates_for_piece(L_PIECE, 0) == []

def test_first_position_wins():
    target = encode([(0, 0, 0)], IDENTITY)
    assert candidates_for_piece([(0, 0, 0)], target) == [(Position(0, 0, False), 1)]
