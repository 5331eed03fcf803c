# apps/assembly_ui/ui/components/solve_tab.py
import time
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QApplication, QCheckBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QListWidget, QMessageBox, QPushButton, QSizePolicy, QSplitter, QVBoxLayout, QWidget
)

from assembly_engine.backtrack import Assembly
from assembly_engine.pieceset import PieceSet, cylinder_pieceset, load_pieceset
from assembly_engine.render import format_assembly

try:
    from .layers_view import LayersView  # type: ignore
    from ..utils import repo_root  # type: ignore
except ImportError:  # direct run, ui folder on sys.path
    from components.layers_view import LayersView
    from utils import repo_root


class SolveTab(QWidget):
    """
    Left: puzzle selection, search options, stats, assembly list
    Right: LayersView of the selected assembly
    """
    status = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.pieceset: PieceSet = cylinder_pieceset()
        self.puzzle_path: Optional[Path] = None
        self.results: List[Assembly] = []
        self._build_ui()
        self._show_puzzle()

    # ---------- UI ----------
    def _build_ui(self):
        root = QHBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        splitter = QSplitter(Qt.Horizontal, self)
        root.addWidget(splitter)

        left = QWidget(self)
        left.setMinimumWidth(360)
        left.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        lbox = QVBoxLayout(left)
        lbox.setContentsMargins(10, 10, 10, 10)
        lbox.setSpacing(8)

        # Puzzle
        puzzle_box = QGroupBox("Puzzle", left)
        pform = QFormLayout(puzzle_box)
        self.lblPuzzle = QLabel("—", puzzle_box)
        self.lblCandidates = QLabel("—", puzzle_box)
        btns = QWidget(puzzle_box)
        hb = QHBoxLayout(btns); hb.setContentsMargins(0, 0, 0, 0)
        self.btnOpen = QPushButton("Open puzzle…", btns)
        self.btnBuiltin = QPushButton("Built-in", btns)
        hb.addWidget(self.btnOpen); hb.addWidget(self.btnBuiltin)
        pform.addRow("Name:", self.lblPuzzle)
        pform.addRow("Candidates:", self.lblCandidates)
        pform.addRow(btns)
        lbox.addWidget(puzzle_box)

        # Options
        opts_box = QGroupBox("Search", left)
        ov = QVBoxLayout(opts_box)
        self.chkLegacy = QCheckBox("Legacy bounds (skip last candidate of each piece)", opts_box)
        self.chkNoGuard = QCheckBox("Keep swapped duplicates", opts_box)
        self.btnSolve = QPushButton("▶ Solve", opts_box)
        ov.addWidget(self.chkLegacy); ov.addWidget(self.chkNoGuard); ov.addWidget(self.btnSolve)
        lbox.addWidget(opts_box)

        # Stats
        stats_box = QGroupBox("Stats", left)
        sform = QFormLayout(stats_box)
        self.lblSolutions = QLabel("—", stats_box)
        self.lblIterations = QLabel("—", stats_box)
        self.lblElapsed = QLabel("—", stats_box)
        sform.addRow("Solutions:", self.lblSolutions)
        sform.addRow("Iterations:", self.lblIterations)
        sform.addRow("Elapsed:", self.lblElapsed)
        lbox.addWidget(stats_box)

        self.lstAssemblies = QListWidget(left)
        lbox.addWidget(self.lstAssemblies, 1)

        self.view = LayersView(self)

        splitter.addWidget(left)
        splitter.addWidget(self.view)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)

        # wiring
        self.btnOpen.clicked.connect(self._on_open)
        self.btnBuiltin.clicked.connect(self._on_builtin)
        self.btnSolve.clicked.connect(self.solve)
        self.lstAssemblies.currentRowChanged.connect(self._on_select)

    # ---------- puzzle ----------
    def _show_puzzle(self):
        self.results = []
        self.lstAssemblies.clear()
        self.view.clear()
        self.view.set_legend(self.pieceset)
        self.lblPuzzle.setText(self.pieceset.name)
        try:
            counts = self.pieceset.make_search().candidate_counts()
            self.lblCandidates.setText(", ".join(str(c) for c in counts))
        except ValueError as e:
            self.lblCandidates.setText(f"invalid: {e}")
        for lbl in (self.lblSolutions, self.lblIterations, self.lblElapsed):
            lbl.setText("—")

    def _on_open(self):
        start = str(repo_root() / "puzzles")
        path, _ = QFileDialog.getOpenFileName(self, "Open puzzle JSON", start, "JSON files (*.json);;All files (*)")
        if not path:
            return
        try:
            ps = load_pieceset(path)
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Puzzle", f"Cannot load {path}:\n{e}")
            return
        self.pieceset = ps
        self.puzzle_path = Path(path)
        self._show_puzzle()
        self.status.emit(f"Loaded {path}")

    def _on_builtin(self):
        self.pieceset = cylinder_pieceset()
        self.puzzle_path = None
        self._show_puzzle()
        self.status.emit("Built-in cylinder puzzle")

    # ---------- solve ----------
    def solve(self):
        try:
            search = self.pieceset.make_search(
                legacy_bounds=self.chkLegacy.isChecked(),
                duplicate_guard=not self.chkNoGuard.isChecked(),
            )
        except ValueError as e:
            QMessageBox.warning(self, "Search", f"Invalid puzzle:\n{e}")
            return

        self.status.emit("Solving…")
        QApplication.setOverrideCursor(Qt.WaitCursor)
        t0 = time.time()
        try:
            self.results = search.run()
        finally:
            QApplication.restoreOverrideCursor()
        elapsed = time.time() - t0

        self.lblSolutions.setText(str(len(self.results)))
        self.lblIterations.setText(f"{search.iterations:,}")
        self.lblElapsed.setText(f"{elapsed:.2f}s")

        self.lstAssemblies.clear()
        for i, a in enumerate(self.results):
            self.lstAssemblies.addItem(f"{i}: {format_assembly(a)}")
        if self.results:
            self.lstAssemblies.setCurrentRow(0)
        else:
            self.view.clear()
        self.status.emit(f"num solutions: {len(self.results)}")

    def _on_select(self, row: int):
        if 0 <= row < len(self.results):
            self.view.show_assembly(self.pieceset, self.results[row])
