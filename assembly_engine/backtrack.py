# assembly_engine/backtrack.py
# Exhaustive placement search: one candidate per piece, in piece order,
# pruning on overlap and checking must-fill coverage at the last piece.
#
# The walk is iterative over an explicit stack of immutable frames
# (candidate index + accumulated volume), one frame per placed piece.

from __future__ import annotations
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from assembly_engine.geometry import (
    DEFAULT_GRID,
    IDENTITY,
    Cell,
    Grid,
    Piece,
    Position,
    covers,
    encode,
    normalize_piece,
    same_shape,
)
from assembly_engine.placements import Candidate, candidates_for_piece

Assembly = List[Position]

# --------------------------
# Tunables
# --------------------------
# Legacy off-by-one loop bound: the last candidate of every
# piece is never tried, so a piece with a single candidate yields nothing.
DEFAULT_LEGACY_BOUNDS = False


class Frame(NamedTuple):
    candidate_index: int
    volume: int


# --------------------------
# Duplicate pieces
# --------------------------
def detect_duplicate_classes(pieces: Sequence[Iterable[Cell]]) -> List[Tuple[int, ...]]:
    """Groups (by index) of pieces with identical cell sets; singletons dropped."""
    groups: Dict[frozenset, List[int]] = {}
    for i, p in enumerate(pieces):
        groups.setdefault(frozenset(p), []).append(i)
    out = [tuple(idxs) for idxs in groups.values() if len(idxs) > 1]
    out.sort()
    return out

def validate_duplicate_classes(pieces: Sequence[Iterable[Cell]],
                               classes: Iterable[Sequence[int]]) -> List[Tuple[int, ...]]:
    n = len(pieces)
    used = set()
    out: List[Tuple[int, ...]] = []
    for cls in classes:
        idxs = tuple(int(i) for i in cls)
        for i in idxs:
            if not (0 <= i < n):
                raise ValueError(f"duplicate class {idxs} references piece {i}, have {n} pieces")
            if i in used:
                raise ValueError(f"piece {i} appears in more than one duplicate class")
            used.add(i)
        for i in idxs[1:]:
            if not same_shape(pieces[idxs[0]], pieces[i]):
                raise ValueError(f"pieces {idxs[0]} and {i} are not identical, cannot share a duplicate class")
        if len(idxs) > 1:
            out.append(idxs)
    return out


class AssemblySearch:
    """
    Inputs:
      - pieces:    ordered pieces (cell tuples); order fixes the decision levels
      - target:    cells that exist in the assembled object
      - must_fill: cells the union of all placements has to cover
      - duplicate_classes: index groups of identical pieces; None = detect,
                           [] = no relabeling guard

    `run()` explores the whole space and returns every Assembly; counters
    stay on the instance for the caller to report.
    """

    def __init__(self,
                 pieces: Sequence[Iterable[Sequence[int]]],
                 target: Iterable[Sequence[int]],
                 must_fill: Iterable[Sequence[int]],
                 grid: Grid = DEFAULT_GRID,
                 duplicate_classes: Optional[Iterable[Sequence[int]]] = None,
                 legacy_bounds: bool = DEFAULT_LEGACY_BOUNDS):
        self.grid = grid
        self.pieces: List[Piece] = [normalize_piece(p) for p in pieces]
        self.target_mask = encode(normalize_piece(target, allow_empty=True), IDENTITY, grid)
        self.must_fill_mask = encode(normalize_piece(must_fill, allow_empty=True), IDENTITY, grid)
        self.legacy_bounds = bool(legacy_bounds)

        if duplicate_classes is None:
            self.duplicate_classes = detect_duplicate_classes(self.pieces)
        else:
            self.duplicate_classes = validate_duplicate_classes(self.pieces, duplicate_classes)

        self.candidates: List[List[Candidate]] = [
            candidates_for_piece(p, self.target_mask, grid) for p in self.pieces
        ]
        self.limits: List[int] = [
            len(c) - 1 if self.legacy_bounds else len(c) for c in self.candidates
        ]

        # Counters
        self.iterations = 0
        self.overlaps = 0
        self.uncovered = 0
        self.duplicate_rejects = 0

        self.results: List[Assembly] = []

    # --------------------------
    # Public helpers
    # --------------------------
    def total_pieces(self) -> int:
        return len(self.pieces)

    def candidate_counts(self) -> List[int]:
        return [len(c) for c in self.candidates]

    def stats(self) -> Dict[str, object]:
        return {
            "pieces": self.total_pieces(),
            "candidates": self.candidate_counts(),
            "iterations": self.iterations,
            "overlaps": self.overlaps,
            "uncovered": self.uncovered,
            "duplicate_rejects": self.duplicate_rejects,
            "solutions": len(self.results),
            "legacy_bounds": self.legacy_bounds,
        }

    def assembly_masks(self, assembly: Sequence[Position]) -> List[int]:
        """Bit volume of each placed piece of an assembly."""
        return [encode(p, pos, self.grid) for p, pos in zip(self.pieces, assembly)]

    # --------------------------
    # Guards
    # --------------------------
    def _canonical_order(self, stack: Sequence[Frame]) -> bool:
        for cls in self.duplicate_classes:
            prev = -1
            for i in cls:
                idx = stack[i].candidate_index
                if idx <= prev:
                    return False
                prev = idx
        return True

    def _assembly_from(self, stack: Sequence[Frame]) -> Assembly:
        return [self.candidates[level][f.candidate_index][0] for level, f in enumerate(stack)]

    # --------------------------
    # Search
    # --------------------------
    def run(self) -> List[Assembly]:
        self.iterations = 0
        self.overlaps = 0
        self.uncovered = 0
        self.duplicate_rejects = 0
        self.results = []
        n = len(self.pieces)
        if n == 0:
            return self.results

        last = n - 1
        stack: List[Frame] = [Frame(0, 0)]

        while stack:
            self.iterations += 1
            level = len(stack) - 1
            idx = stack[-1].candidate_index

            if idx >= self.limits[level]:
                # exhausted: drop this level, resume the previous one at its next candidate
                stack.pop()
                if stack:
                    stack[-1] = Frame(stack[-1].candidate_index + 1, 0)
                continue

            mask = self.candidates[level][idx][1]
            if level == 0:
                volume = mask
            else:
                below = stack[-2].volume
                if below & mask:
                    self.overlaps += 1
                    stack[-1] = Frame(idx + 1, 0)
                    continue
                volume = below | mask
            stack[-1] = Frame(idx, volume)

            if level == last:
                if not covers(volume, self.must_fill_mask):
                    self.uncovered += 1
                elif not self._canonical_order(stack):
                    self.duplicate_rejects += 1
                else:
                    self.results.append(self._assembly_from(stack))
                stack[-1] = Frame(idx + 1, 0)
            else:
                stack.append(Frame(0, 0))

        return self.results


def find_assemblies(pieces: Sequence[Iterable[Sequence[int]]],
                    target: Iterable[Sequence[int]],
                    must_fill: Iterable[Sequence[int]],
                    grid: Grid = DEFAULT_GRID,
                    duplicate_classes: Optional[Iterable[Sequence[int]]] = None,
                    legacy_bounds: bool = DEFAULT_LEGACY_BOUNDS) -> List[Assembly]:
    """All assemblies of `pieces` inside `target` covering `must_fill`."""
    search = AssemblySearch(pieces, target, must_fill, grid=grid,
                            duplicate_classes=duplicate_classes,
                            legacy_bounds=legacy_bounds)
    return search.run()
