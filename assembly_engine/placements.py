# assembly_engine/placements.py
from __future__ import annotations
from typing import Iterable, List, Tuple

from assembly_engine.geometry import (
    DEFAULT_GRID,
    Cell,
    Grid,
    Position,
    encode,
    is_subset,
    piece_extents,
)

Candidate = Tuple[Position, int]


def enumerate_positions(piece: Iterable[Cell], grid: Grid = DEFAULT_GRID) -> List[Position]:
    """
    Every translation x flip for a piece: all width offsets, every row offset
    that keeps the piece's top row inside the grid, unflipped before flipped.
    A piece as tall as the grid (or taller) gets no positions.
    """
    _, max_y = piece_extents(piece)
    out: List[Position] = []
    for x in range(grid.width):
        for y in range(grid.height - max_y):
            out.append(Position(x, y, False))
            out.append(Position(x, y, True))
    return out

def candidates_for_piece(piece: Iterable[Cell], target_mask: int, grid: Grid = DEFAULT_GRID) -> List[Candidate]:
    """
    Placements of `piece` that stay inside `target_mask`, one per distinct
    occupied-cell pattern (first position wins).
    """
    cells = list(piece)
    out: List[Candidate] = []
    seen = set()
    for pos in enumerate_positions(cells, grid):
        mask = encode(cells, pos, grid)
        if not is_subset(mask, target_mask):
            continue
        if mask in seen:
            continue
        seen.add(mask)
        out.append((pos, mask))
    return out
