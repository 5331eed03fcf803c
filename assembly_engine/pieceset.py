# assembly_engine/pieceset.py
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from assembly_engine.backtrack import (
    DEFAULT_LEGACY_BOUNDS,
    AssemblySearch,
    validate_duplicate_classes,
)
from assembly_engine.geometry import DEFAULT_GRID, Grid, Piece, normalize_piece

DEFAULT_PUZZLE_NAME = "cylinder"


@dataclass(frozen=True)
class PieceDef:
    name: str
    cells: Piece


@dataclass
class PieceSet:
    """A complete puzzle: ordered pieces, target footprint, must-fill cells."""
    pieces: List[PieceDef]
    target: Piece
    must_fill: Piece
    grid: Grid = DEFAULT_GRID
    duplicate_classes: Optional[List[Tuple[int, ...]]] = None
    name: str = DEFAULT_PUZZLE_NAME
    labels: List[str] = field(init=False)

    def __post_init__(self):
        self.labels = [piece_label(i) for i in range(len(self.pieces))]
        if self.duplicate_classes is not None:
            self.duplicate_classes = validate_duplicate_classes(
                [p.cells for p in self.pieces], self.duplicate_classes
            )

    def piece_cells(self) -> List[Piece]:
        return [p.cells for p in self.pieces]

    def make_search(self, legacy_bounds: bool = DEFAULT_LEGACY_BOUNDS,
                    duplicate_guard: bool = True) -> AssemblySearch:
        classes = self.duplicate_classes if duplicate_guard else []
        return AssemblySearch(
            self.piece_cells(), self.target, self.must_fill,
            grid=self.grid, duplicate_classes=classes, legacy_bounds=legacy_bounds,
        )


def piece_label(i: int) -> str:
    """Single-character label used in layer views: A..Z, then a..z, then '?'."""
    if i < 26:
        return chr(ord("A") + i)
    if i < 52:
        return chr(ord("a") + i - 26)
    return "?"


# --------------------------
# Built-in puzzle
# --------------------------
def _cylinder_target() -> List[Tuple[int, int, int]]:
    cells = []
    for x in range(6):
        for y in range(3):
            cells.append((x, y, 0))
            # two outer cells missing at angle 0, rows 0..1
            if not (x == 0 and y < 2):
                cells.append((x, y, 1))
    return cells

def _cylinder_must_fill() -> List[Tuple[int, int, int]]:
    cells = [
        (1, 0, 0),  # hole at bottom
        (3, 1, 1),  # look-through hole in outer wall
    ]
    cells += [(x, 2, 1) for x in range(3)]
    cells += [(5, y, 1) for y in range(3)]
    return cells

_CYLINDER_PIECES: Sequence[Tuple[str, Sequence[Tuple[int, int, int]]]] = (
    ("h1", ((0, 0, 0), (0, 0, 1), (1, 0, 0), (2, 0, 0), (2, 0, 1))),
    ("h2", ((0, 0, 0), (1, 0, 0), (1, 0, 1), (2, 0, 1))),
    ("h3", ((0, 0, 1), (1, 0, 1), (2, 0, 0), (2, 0, 1))),
    ("v1", ((0, 2, 0), (0, 1, 0), (0, 1, 1), (0, 0, 1))),
    ("v1", ((0, 2, 0), (0, 1, 0), (0, 1, 1), (0, 0, 1))),
    ("v2", ((0, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 1), (0, 2, 0))),
)

def cylinder_pieceset() -> PieceSet:
    return PieceSet(
        pieces=[PieceDef(name, normalize_piece(cells)) for name, cells in _CYLINDER_PIECES],
        target=normalize_piece(_cylinder_target()),
        must_fill=normalize_piece(_cylinder_must_fill()),
        grid=Grid(6, 3, 2),
        duplicate_classes=[(3, 4)],
        name=DEFAULT_PUZZLE_NAME,
    )


# --------------------------
# JSON form
# --------------------------
def _require(data: Dict[str, Any], key: str):
    if key not in data:
        raise ValueError(f"puzzle is missing '{key}'")
    return data[key]

def _cells(value: Any, what: str, allow_empty: bool = False) -> Piece:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{what} must be a list of [x, y, z] cells")
    try:
        return normalize_piece(value, allow_empty=allow_empty)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{what}: {e}") from e

def _grid(value: Any) -> Grid:
    if value is None:
        return DEFAULT_GRID
    if not isinstance(value, dict):
        raise ValueError("'grid' must be an object with width, height, depth")
    try:
        return Grid(
            int(value.get("width", DEFAULT_GRID.width)),
            int(value.get("height", DEFAULT_GRID.height)),
            int(value.get("depth", DEFAULT_GRID.depth)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"grid: {e}") from e

def pieceset_from_dict(data: Dict[str, Any]) -> PieceSet:
    if not isinstance(data, dict):
        raise ValueError("puzzle must be a JSON object")
    grid = _grid(data.get("grid"))
    raw_pieces = _require(data, "pieces")
    if not isinstance(raw_pieces, list):
        raise ValueError("'pieces' must be a list")
    pieces: List[PieceDef] = []
    for i, p in enumerate(raw_pieces):
        if isinstance(p, dict):
            name = str(p.get("name", f"p{i}"))
            cells = _cells(_require(p, "cells"), f"piece {name}")
        else:
            name = f"p{i}"
            cells = _cells(p, f"piece {i}")
        pieces.append(PieceDef(name, cells))

    classes = data.get("duplicate_classes")
    if classes is not None:
        try:
            classes = [tuple(int(i) for i in cls) for cls in classes]
        except TypeError as e:
            raise ValueError(f"'duplicate_classes' must be a list of index lists ({e})") from e

    return PieceSet(
        pieces=pieces,
        target=_cells(_require(data, "target"), "target", allow_empty=True),
        must_fill=_cells(data.get("must_fill", []), "must_fill", allow_empty=True),
        grid=grid,
        duplicate_classes=classes,
        name=str(data.get("name", DEFAULT_PUZZLE_NAME)),
    )

def pieceset_to_dict(ps: PieceSet) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": ps.name,
        "grid": {"width": ps.grid.width, "height": ps.grid.height, "depth": ps.grid.depth},
        "target": [list(c) for c in ps.target],
        "must_fill": [list(c) for c in ps.must_fill],
        "pieces": [{"name": p.name, "cells": [list(c) for c in p.cells]} for p in ps.pieces],
    }
    if ps.duplicate_classes is not None:
        data["duplicate_classes"] = [list(cls) for cls in ps.duplicate_classes]
    return data

def load_pieceset(path: str) -> PieceSet:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: not valid JSON ({e})") from e
    return pieceset_from_dict(data)
