from __future__ import annotations

from PySide6 import QtWidgets

from .state import UIState
from .tabs.duct_tab import DuctTab
from .tabs.diagnostics_tab import DiagnosticsTab
from .tabs.materials_tab import MaterialsTab
from .tabs.reports_tab import ReportsTab


class App(QtWidgets.QMainWindow):
    def __init__(self, state: UIState | None = None):
        super().__init__()
        self.setWindowTitle("Field Buddy Pro")
        self.state = state or UIState()
        tabs = QtWidgets.QTabWidget()
        tabs.addTab(DuctTab(self.state), "Duct Design")
        tabs.addTab(DiagnosticsTab(self.state), "Diagnostics")
        tabs.addTab(MaterialsTab(self.state), "Materials")
        tabs.addTab(ReportsTab(self.state), "Reports")
        self.setCentralWidget(tabs)
        self.resize(1200, 780)
