# apps/assembly_ui/ui/components/layers_view.py
from typing import List, Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QGroupBox, QHBoxLayout, QLabel, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
)

from assembly_engine.geometry import Position
from assembly_engine.pieceset import PieceSet
from assembly_engine.render import EMPTY_CELL, OUTSIDE_CELL, layer_rows

try:
    from ..utils import piece_color, text_color_for  # type: ignore
except ImportError:  # direct run, ui folder on sys.path
    from utils import piece_color, text_color_for

CELL_PX = 44


class LayersView(QWidget):
    """One table per layer z; rows top (y = height-1) to bottom, columns x = 0..width-1."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._tables: List[QTableWidget] = []
        self._row = QHBoxLayout()
        self.lblLegend = QLabel("—", self)
        self.lblLegend.setTextFormat(Qt.RichText)

        col = QVBoxLayout(self)
        col.addWidget(self.lblLegend)
        col.addLayout(self._row)
        col.addStretch(1)

    def _ensure_tables(self, ps: PieceSet):
        if len(self._tables) == ps.grid.depth and self._tables and \
                self._tables[0].rowCount() == ps.grid.height and \
                self._tables[0].columnCount() == ps.grid.width:
            return
        while self._row.count():
            item = self._row.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._tables = []
        for z in range(ps.grid.depth):
            box = QGroupBox(f"Layer z={z}", self)
            v = QVBoxLayout(box)
            t = QTableWidget(ps.grid.height, ps.grid.width, box)
            t.setEditTriggers(QTableWidget.NoEditTriggers)
            t.setSelectionMode(QTableWidget.NoSelection)
            t.setHorizontalHeaderLabels([str(x) for x in range(ps.grid.width)])
            t.setVerticalHeaderLabels([str(y) for y in range(ps.grid.height - 1, -1, -1)])
            for x in range(ps.grid.width):
                t.setColumnWidth(x, CELL_PX)
            for r in range(ps.grid.height):
                t.setRowHeight(r, CELL_PX)
            v.addWidget(t)
            self._row.addWidget(box)
            self._tables.append(t)

    def set_legend(self, ps: PieceSet):
        parts = []
        for i, (lab, p) in enumerate(zip(ps.labels, ps.pieces)):
            c = piece_color(i)
            parts.append(f'<span style="background:{c}; color:{text_color_for(c)}">&nbsp;{lab}&nbsp;</span> {p.name}')
        self.lblLegend.setText("&nbsp;&nbsp;".join(parts))

    def clear(self):
        for t in self._tables:
            t.clearContents()

    def show_assembly(self, ps: PieceSet, assembly: Sequence[Position]):
        self._ensure_tables(ps)
        self.set_legend(ps)
        label_index = {lab: i for i, lab in enumerate(ps.labels)}
        for z, rows in enumerate(layer_rows(ps, assembly)):
            t = self._tables[z]
            for r, row in enumerate(rows):
                for x, ch in enumerate(row):
                    item = QTableWidgetItem("" if ch in (EMPTY_CELL, OUTSIDE_CELL) else ch)
                    item.setTextAlignment(Qt.AlignCenter)
                    if ch == OUTSIDE_CELL:
                        item.setBackground(QBrush(QColor("#303030")))
                    elif ch == EMPTY_CELL:
                        item.setBackground(QBrush(QColor("#f4f4f4")))
                    else:
                        c = piece_color(label_index[ch])
                        item.setBackground(QBrush(QColor(c)))
                        item.setForeground(QBrush(QColor(text_color_for(c))))
                    t.setItem(r, x, item)
