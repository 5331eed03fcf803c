# assembly_engine/render.py
from __future__ import annotations
import time
from typing import Any, Dict, List, Optional, Sequence

from assembly_engine.geometry import Cell, Position, encode, mask_cells
from assembly_engine.pieceset import PieceSet, pieceset_to_dict

RESULTS_SCHEMA = "cylinder_assemblies/1.0"

EMPTY_CELL   = "."
OUTSIDE_CELL = " "


def format_position(pos: Position) -> str:
    return f"Position {{ x: {pos.x}, y: {pos.y}, flipped: {'true' if pos.flipped else 'false'} }}"

def format_assembly(assembly: Sequence[Position]) -> str:
    """One line: `[Position { x: .., y: .., flipped: .. }, ...]`."""
    return "[" + ", ".join(format_position(p) for p in assembly) + "]"

def assembly_cell_map(ps: PieceSet, assembly: Sequence[Position]) -> Dict[Cell, str]:
    out: Dict[Cell, str] = {}
    for label, piece, pos in zip(ps.labels, ps.pieces, assembly):
        for c in mask_cells(encode(piece.cells, pos, ps.grid), ps.grid):
            out[c] = label
    return out

def layer_rows(ps: PieceSet, assembly: Sequence[Position]) -> List[List[str]]:
    """
    One string per grid row for each layer z; rows run top (y = height-1)
    to bottom (y = 0), columns are the angular slots x = 0..width-1.
    """
    cell_to_label = assembly_cell_map(ps, assembly)
    inside = set((x % ps.grid.width, y, z) for (x, y, z) in ps.target)
    layers = []
    for z in range(ps.grid.depth):
        rows = []
        for y in range(ps.grid.height - 1, -1, -1):
            row = []
            for x in range(ps.grid.width):
                c = (x, y, z)
                if c in cell_to_label:
                    row.append(cell_to_label[c])
                elif c in inside:
                    row.append(EMPTY_CELL)
                else:
                    row.append(OUTSIDE_CELL)
            rows.append("".join(row))
        layers.append(rows)
    return layers

def assembly_layers_str(ps: PieceSet, assembly: Sequence[Position], index: Optional[int] = None) -> str:
    lines = []
    title = "[ASSEMBLY]" if index is None else f"[ASSEMBLY {index}]"
    lines.append(title)
    lines.append("Legend: " + ", ".join(f"{lab}={p.name}" for lab, p in zip(ps.labels, ps.pieces)))
    for z, rows in enumerate(layer_rows(ps, assembly)):
        lines.append(f"Layer z={z}:")
        for r in rows:
            lines.append("  " + " ".join(r).rstrip())
    lines.append("")
    return "\n".join(lines)

def results_document(ps: PieceSet, assemblies: Sequence[Sequence[Position]],
                     stats: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "schema": RESULTS_SCHEMA,
        "puzzle": pieceset_to_dict(ps),
        "stats": dict(stats or {}),
        "num_solutions": len(assemblies),
        "assemblies": [
            [
                {"piece": p.name, "label": lab, "x": pos.x, "y": pos.y, "flipped": pos.flipped}
                for lab, p, pos in zip(ps.labels, ps.pieces, a)
            ]
            for a in assemblies
        ],
        "timestamp": time.time(),
    }
