# --- local package bootstrap (run directly OR as module) ---
import os
import sys
from pathlib import Path

# Allow running this file directly: python apps/assembly_ui/ui/main.py
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

_UI_DIR = Path(__file__).resolve().parent
# If running as a script (no package), add the ui folder to sys.path
if __package__ is None or __package__ == "":
    if str(_UI_DIR) not in sys.path:
        sys.path.insert(0, str(_UI_DIR))
    from components.solve_tab import SolveTab
else:
    from .components.solve_tab import SolveTab  # type: ignore
# ---------------------------------------------------------------------------

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QMainWindow, QTabWidget, QVBoxLayout, QWidget

APP_TITLE = "Cylinder Assemblies — v0.1"


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1100, 640)
        self._build_ui()

    def _build_ui(self):
        central = QWidget(self); self.setCentralWidget(central)
        v = QVBoxLayout(central); v.setContentsMargins(8, 8, 8, 8); v.setSpacing(8)

        top = QHBoxLayout()
        self.lblStatus = QLabel("Status: Idle"); self.lblStatus.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        top.addStretch(1); top.addWidget(self.lblStatus)

        self.tabs = QTabWidget(self)
        self.solve_tab = SolveTab(self)
        self.tabs.addTab(self.solve_tab, "Solve")

        v.addLayout(top); v.addWidget(self.tabs, 1)

        self.solve_tab.status.connect(self._set_status)

    def _set_status(self, msg: str, transient_ms: int = 0):
        self.statusBar().showMessage(msg, transient_ms)
        self.lblStatus.setText(f"Status: {msg}")


def main():
    app = QApplication(sys.argv)
    win = MainWindow(); win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
