# assembly_engine/solver.py — cylinder assembly driver
# Loads a puzzle (built-in cylinder puzzle or a JSON file), runs the exhaustive
# search, prints every assembly and a summary, optionally writes result files.

from __future__ import annotations
import argparse
import json
import os
import sys
import time
from typing import List, Optional

from assembly_engine.pieceset import PieceSet, cylinder_pieceset, load_pieceset
from assembly_engine.render import assembly_layers_str, format_assembly, results_document

# ---------- paths ----------
DEFAULT_RESULTS_DIR = os.environ.get("ASSEMBLY_RESULTS_DIR") or os.path.join(os.getcwd(), "results")


def ensure_dir(p: str):
    if not os.path.isdir(p):
        os.makedirs(p, exist_ok=True)


# ---------- atomic writes ----------
def _atomic_replace(src, dst, retries=12, delay=0.1):
    """os.replace with retries; a reader may briefly hold the destination open."""
    for _ in range(retries):
        try:
            os.replace(src, dst)
            return True
        except OSError:
            time.sleep(delay)
    return False

def _atomic_write(path: str, data: str):
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(data)
    if not _atomic_replace(tmp, path):
        os.remove(tmp)
        raise OSError(f"could not replace {path}")

def write_results(ps: PieceSet, assemblies, stats, results_dir: str):
    """Write <name>.assemblies.json and <name>.layers.txt; returns both paths."""
    ensure_dir(results_dir)
    json_path = os.path.join(results_dir, f"{ps.name}.assemblies.json")
    txt_path = os.path.join(results_dir, f"{ps.name}.layers.txt")

    doc = results_document(ps, assemblies, stats)
    _atomic_write(json_path, json.dumps(doc, ensure_ascii=False, indent=2))

    parts = [assembly_layers_str(ps, a, index=i) for i, a in enumerate(assemblies)]
    parts.append(f"num solutions: {len(assemblies)}\n")
    _atomic_write(txt_path, "\n".join(parts))
    return json_path, txt_path


# ---------- CLI ----------
def build_argparser():
    p = argparse.ArgumentParser(
        description=(
            "Cylinder assembly search — every way to place the puzzle pieces inside the\n"
            "target shape without overlap while covering the must-fill cells.\n\n"
            "Examples:\n"
            "  python run_solver.py\n"
            "  python run_solver.py puzzles/cylinder.json --layers\n"
            "  python run_solver.py puzzles/cylinder.json --write --results-dir out\n"
            "  python run_solver.py puzzles/cylinder.json --legacy-bounds\n"
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    p.add_argument("puzzle", nargs="?", default=None,
                   help="Path to puzzle JSON (default: built-in cylinder puzzle)")

    p.add_argument("--legacy-bounds", action="store_true",
                   help="Legacy loop bound: the last candidate of every piece is skipped.")

    p.add_argument("--no-duplicate-guard", action="store_true",
                   help="Report assemblies that differ only by swapping identical pieces.")

    p.add_argument("--layers", action="store_true",
                   help="Print a per-layer view of every assembly.")

    p.add_argument("--write", action="store_true",
                   help="Write <name>.assemblies.json and <name>.layers.txt to the results dir.")

    p.add_argument("--results-dir", default=DEFAULT_RESULTS_DIR, metavar="DIR",
                   help="Where --write puts its files (default: ./results or $ASSEMBLY_RESULTS_DIR).")

    p.add_argument("--quiet", action="store_true",
                   help="Only print the summary lines.")

    return p


# ---------- driver ----------
def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)

    if args.puzzle:
        try:
            ps = load_pieceset(args.puzzle)
        except (OSError, ValueError) as e:
            sys.stderr.write(f"Cannot load puzzle {args.puzzle}: {e}\n")
            return 2
    else:
        ps = cylinder_pieceset()

    try:
        search = ps.make_search(legacy_bounds=args.legacy_bounds,
                                duplicate_guard=not args.no_duplicate_guard)
    except ValueError as e:
        sys.stderr.write(f"Invalid puzzle {ps.name}: {e}\n")
        return 2

    if not args.quiet:
        print(f"[puzzle] {ps.name}: {search.total_pieces()} pieces, "
              f"candidates {search.candidate_counts()}, duplicate classes {search.duplicate_classes}",
              flush=True)

    t0 = time.time()
    results = search.run()
    elapsed = time.time() - t0

    if not args.quiet:
        for i, a in enumerate(results):
            print(format_assembly(a))
            if args.layers:
                print(assembly_layers_str(ps, a, index=i))

    stats = search.stats()
    stats["elapsed_sec"] = round(elapsed, 3)
    print(f"[search] {search.iterations} iterations | overlaps {search.overlaps} | "
          f"uncovered {search.uncovered} | duplicate rejects {search.duplicate_rejects} | "
          f"{elapsed:.2f}s", flush=True)

    if args.write:
        json_path, txt_path = write_results(ps, results, stats, args.results_dir)
        print(f"[results] {json_path}", flush=True)
        print(f"[results] {txt_path}", flush=True)

    print(f"num solutions: {len(results)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
