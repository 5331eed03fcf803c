# assembly_engine/geometry.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

Cell = Tuple[int, int, int]
Piece = Tuple[Cell, ...]

# Default lattice: 6 angular slots around the cylinder, 3 rows, 2 layers.
DEFAULT_WIDTH  = 6
DEFAULT_HEIGHT = 3
DEFAULT_DEPTH  = 2


class GeometryOutOfBounds(ValueError):
    """A transformed cell left the grid along a non-wrapping axis (y or z)."""


@dataclass(frozen=True)
class Grid:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    depth: int = DEFAULT_DEPTH

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0 or self.depth <= 0:
            raise ValueError(f"grid dimensions must be positive, got {self.width}x{self.height}x{self.depth}")

    @property
    def size(self) -> int:
        return self.width * self.height * self.depth

    @property
    def full_mask(self) -> int:
        return (1 << self.size) - 1


DEFAULT_GRID = Grid()


@dataclass(frozen=True)
class Position:
    """Horizontal offset (wraps), vertical offset, and in-plane mirror."""
    x: int
    y: int
    flipped: bool = False


IDENTITY = Position(0, 0, False)


# --- pieces -------------------------------------------------------------------

def normalize_piece(cells: Iterable[Sequence[int]], allow_empty: bool = False) -> Piece:
    """Integer triples in input order; rejects repeated cells (and empty pieces unless allowed)."""
    out: List[Cell] = []
    seen = set()
    for c in cells:
        if len(c) != 3:
            raise ValueError(f"cell must have 3 coordinates, got {c!r}")
        cell = (int(c[0]), int(c[1]), int(c[2]))
        if cell in seen:
            raise ValueError(f"duplicate cell {cell} in piece")
        seen.add(cell)
        out.append(cell)
    if not out and not allow_empty:
        raise ValueError("piece has no cells")
    return tuple(out)

def piece_extents(piece: Iterable[Cell]) -> Tuple[int, int]:
    """(max_x, max_y) over the piece's cells."""
    max_x = 0
    max_y = 0
    for (x, y, _z) in piece:
        max_x = max(max_x, x)
        max_y = max(max_y, y)
    return max_x, max_y

def same_shape(a: Iterable[Cell], b: Iterable[Cell]) -> bool:
    return set(a) == set(b)


# --- bit volumes --------------------------------------------------------------

def bit_index(cell: Cell, grid: Grid = DEFAULT_GRID) -> int:
    x, y, z = cell
    if not (0 <= y < grid.height) or not (0 <= z < grid.depth):
        raise GeometryOutOfBounds(
            f"cell {cell} outside grid rows 0..{grid.height - 1} / layers 0..{grid.depth - 1}"
        )
    return (x % grid.width) + y * grid.width + z * grid.width * grid.height

def encode(piece: Iterable[Cell], position: Position, grid: Grid = DEFAULT_GRID) -> int:
    """
    Bit volume of `piece` placed at `position`.
    Unflipped cells shift by (position.x, position.y); flipped cells are first
    mirrored in the x/y plane against the piece's own max extents. x wraps
    around the cylinder, y and z must stay inside the grid.
    """
    cells = list(piece)
    max_x, max_y = piece_extents(cells)
    mask = 0
    for (x, y, z) in cells:
        if position.flipped:
            cell = (max_x - x + position.x, max_y - y + position.y, z)
        else:
            cell = (x + position.x, y + position.y, z)
        mask |= 1 << bit_index(cell, grid)
    return mask

def mask_cells(mask: int, grid: Grid = DEFAULT_GRID) -> List[Cell]:
    """Cells set in `mask`, in bit order."""
    out: List[Cell] = []
    layer = grid.width * grid.height
    idx = 0
    while mask:
        if mask & 1:
            z, rem = divmod(idx, layer)
            y, x = divmod(rem, grid.width)
            out.append((x, y, z))
        idx += 1
        mask >>= 1
    return out

def popcount(mask: int) -> int:
    return bin(mask).count("1")

def is_subset(mask: int, of: int) -> bool:
    return ((of & mask) ^ mask) == 0

def covers(mask: int, required: int) -> bool:
    return ((mask & required) ^ required) == 0
