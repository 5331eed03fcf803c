import json

from assembly_engine.solver import build_argparser, main

PAIR_PUZZLE = {
    "name": "pair",
    "target": [[0, 0, 0], [1, 0, 0]],
    "must_fill": [[0, 0, 0], [1, 0, 0]],
    "pieces": [{"name": "a", "cells": [[0, 0, 0]]}, {"name": "b", "cells": [[0, 0, 0]]}],
}


def _write_puzzle(tmp_path, data=PAIR_PUZZLE):
    p = tmp_path / "pair.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return str(p)

def test_argparser_defaults():
    args = build_argparser().parse_args([])
    assert args.puzzle is None
    assert not args.legacy_bounds
    assert not args.write

def test_prints_assemblies_and_summary(tmp_path, capsys):
    assert main([_write_puzzle(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "[puzzle] pair: 2 pieces" in out
    assert "[Position { x: 0, y: 0, flipped: false }, Position { x: 1, y: 0, flipped: false }]" in out
    assert "iterations" in out
    assert out.rstrip().endswith("num solutions: 1")

def test_no_duplicate_guard(tmp_path, capsys):
    assert main([_write_puzzle(tmp_path), "--no-duplicate-guard"]) == 0
    assert "num solutions: 2" in capsys.readouterr().out

def test_legacy_bounds(tmp_path, capsys):
    assert main([_write_puzzle(tmp_path), "--legacy-bounds"]) == 0
    assert "num solutions: 0" in capsys.readouterr().out

def test_layers_and_quiet(tmp_path, capsys):
    assert main([_write_puzzle(tmp_path), "--layers"]) == 0
    assert "Layer z=0:" in capsys.readouterr().out
    assert main([_write_puzzle(tmp_path), "--quiet"]) == 0
    out = capsys.readouterr().out
    assert "[puzzle]" not in out
    assert "Position" not in out
    assert "num solutions: 1" in out

def test_write_results(tmp_path, capsys):
    results = tmp_path / "out"
    assert main([_write_puzzle(tmp_path), "--write", "--results-dir", str(results)]) == 0
    doc = json.loads((results / "pair.assemblies.json").read_text(encoding="utf-8"))
    assert doc["num_solutions"] == 1
    assert doc["stats"]["solutions"] == 1
    assert doc["assemblies"][0][0]["piece"] == "a"
    txt = (results / "pair.layers.txt").read_text(encoding="utf-8")
    assert "[ASSEMBLY 0]" in txt
    assert "num solutions: 1" in txt
    assert not list(results.glob("*.tmp"))

def test_missing_file_exits_2(tmp_path, capsys):
    assert main([str(tmp_path / "nope.json")]) == 2
    assert "Cannot load puzzle" in capsys.readouterr().err

def test_invalid_puzzle_exits_2(tmp_path, capsys):
    data = dict(PAIR_PUZZLE, pieces=[[[0, 0, 0]], [[0, 0, 0], [1, 0, 0]]], duplicate_classes=[[0, 1]])
    assert main([_write_puzzle(tmp_path, data)]) == 2
    assert "Cannot load puzzle" in capsys.readouterr().err

def test_out_of_grid_puzzle_exits_2(tmp_path, capsys):
    data = dict(PAIR_PUZZLE, target=[[0, 5, 0]])
    assert main([_write_puzzle(tmp_path, data)]) == 2
    assert "Invalid puzzle" in capsys.readouterr().err

def test_null_grid_dimension_exits_2(tmp_path, capsys):
    data = dict(PAIR_PUZZLE, grid={"width": None})
    assert main([_write_puzzle(tmp_path, data)]) == 2
    assert "Cannot load puzzle" in capsys.readouterr().err

def test_grid_as_list_exits_2(tmp_path, capsys):
    data = dict(PAIR_PUZZLE, grid=[6, 3, 2])
    assert main([_write_puzzle(tmp_path, data)]) == 2
    assert "Cannot load puzzle" in capsys.readouterr().err
