import pytest

from assembly_engine.geometry import (
    IDENTITY,
    GeometryOutOfBounds,
    Grid,
    Position,
    bit_index,
    covers,
    encode,
    is_subset,
    mask_cells,
    normalize_piece,
    piece_extents,
    popcount,
)

L_PIECE = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]

def test_single_cell_at_identity_is_bit_zero():
    assert encode([(0, 0, 0)], IDENTITY) == 1

def test_bit_index_layout():
    # x + y*6 + z*18
    assert bit_index((1, 2, 1)) == 31
    assert bit_index((5, 2, 1)) == 35

def test_x_wraps_around_cylinder():
    domino = [(0, 0, 0), (1, 0, 0)]
    assert encode(domino, Position(5, 0, False)) == (1 << 5) | (1 << 0)

def test_flip_mirrors_against_piece_extents():
    assert encode(L_PIECE, Position(0, 0, False)) == (1 << 0) | (1 << 1) | (1 << 6)
    # (0,0)->(1,1), (1,0)->(0,1), (0,1)->(1,0)
    assert encode(L_PIECE, Position(0, 0, True)) == (1 << 7) | (1 << 6) | (1 << 1)

def test_flip_then_offset():
    m = encode(L_PIECE, Position(2, 1, True))
    assert sorted(mask_cells(m)) == sorted([(3, 2, 0), (2, 2, 0), (3, 1, 0)])

def test_distinct_cells_give_distinct_bits():
    piece = [(0, 0, 0), (0, 0, 1), (1, 0, 0), (2, 0, 0), (2, 0, 1)]
    for pos in (Position(4, 2, False), Position(4, 2, True)):
        assert popcount(encode(piece, pos)) == len(piece)

def test_row_overflow_raises():
    with pytest.raises(GeometryOutOfBounds):
        encode([(0, 0, 0)], Position(0, 3, False))

def test_layer_overflow_raises():
    with pytest.raises(GeometryOutOfBounds):
        encode([(0, 0, 2)], IDENTITY)

def test_out_of_bounds_is_a_value_error():
    assert issubclass(GeometryOutOfBounds, ValueError)

def test_custom_grid():
    g = Grid(4, 2, 1)
    assert g.size == 8
    assert bit_index((5, 1, 0), g) == 5
    with pytest.raises(GeometryOutOfBounds):
        bit_index((0, 0, 1), g)

def test_large_grid_beyond_machine_word():
    g = Grid(12, 4, 3)
    m = encode([(11, 3, 2)], IDENTITY, g)
    assert m == 1 << (g.size - 1)
    assert mask_cells(m, g) == [(11, 3, 2)]

def test_bad_grid():
    with pytest.raises(ValueError):
        Grid(0, 3, 2)

def test_mask_cells_in_bit_order():
    assert mask_cells((1 << 1) | (1 << 6) | (1 << 7)) == [(1, 0, 0), (0, 1, 0), (1, 1, 0)]
    assert mask_cells(0) == []

def test_normalize_piece():
    assert normalize_piece([[1, 2, 0], (0, 0, 1)]) == ((1, 2, 0), (0, 0, 1))
    assert normalize_piece([], allow_empty=True) == ()
    with pytest.raises(ValueError):
        normalize_piece([])
    with pytest.raises(ValueError):
        normalize_piece([(0, 0, 0), (0, 0, 0)])
    with pytest.raises(ValueError):
        normalize_piece([(0, 0)])

def test_piece_extents():
    assert piece_extents([(0, 2, 0), (0, 1, 0), (0, 1, 1), (0, 0, 1)]) == (0, 2)
    assert piece_extents([(2, 0, 1)]) == (2, 0)

def test_subset_and_cover():
    assert is_subset(0b0101, 0b1101)
    assert not is_subset(0b0011, 0b1101)
    assert covers(0b1111, 0b0110)
    assert not covers(0b1001, 0b0110)
    assert covers(0, 0)
