#!/usr/bin/env python3
# run_solver.py (at repo root)
import sys

from assembly_engine.solver import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
