from __future__ import annotations

from typing import Any, Dict
from PySide6 import QtCore, QtGui, QtWidgets

from ..widgets.inputs import OptionalReading
from ..widgets.plots import PTChart
from ..widgets.results import ReadingCard
from ..state import UIState
from ..theme import COLORS
from ... import api
from ...diagnostics import REFRIGERANTS


class DiagnosticsTab(QtWidgets.QWidget):
    def __init__(self, state: UIState, parent=None):
        super().__init__(parent)
        self.state = state
        self._build_ui()
        self._draw_curve()

    def _build_ui(self) -> None:
        root = QtWidgets.QHBoxLayout(self)

        left = QtWidgets.QVBoxLayout()
        form = QtWidgets.QFormLayout()
        self.refrigerant = QtWidgets.QComboBox()
        self.refrigerant.addItems(list(REFRIGERANTS))
        self.refrigerant.currentTextChanged.connect(lambda _: self._draw_curve())
        self.metering = QtWidgets.QComboBox()
        self.metering.addItem("TXV", "txv")
        self.metering.addItem("Fixed orifice / piston", "fixed")
        form.addRow("Refrigerant", self.refrigerant)
        form.addRow("Metering", self.metering)
        self.return_f = OptionalReading("Return air", "°F")
        self.supply_f = OptionalReading("Supply air", "°F")
        self.suction_psig = OptionalReading("Suction", "PSIG")
        self.suction_line_f = OptionalReading("Suction line", "°F")
        self.liquid_psig = OptionalReading("Liquid", "PSIG")
        self.liquid_line_f = OptionalReading("Liquid line", "°F")
        self.tons = OptionalReading("Nominal", "tons")
        self.sqft = OptionalReading("Floor area", "ft²")
        self.sqft.setToolTip("Used for the airflow estimate when tonnage is blank")
        self._readings = {
            "return_f": self.return_f, "supply_f": self.supply_f,
            "suction_psig": self.suction_psig, "suction_line_f": self.suction_line_f,
            "liquid_psig": self.liquid_psig, "liquid_line_f": self.liquid_line_f,
            "tons": self.tons, "sqft": self.sqft,
        }
        for w in self._readings.values():
            form.addRow(w)
        left.addLayout(form)

        btns = QtWidgets.QHBoxLayout()
        self.btn_eval = QtWidgets.QPushButton("Evaluate")
        self.btn_eval.clicked.connect(self.on_evaluate)
        self.btn_clear = QtWidgets.QPushButton("Clear")
        self.btn_clear.clicked.connect(self.on_clear)
        btns.addWidget(self.btn_eval)
        btns.addWidget(self.btn_clear)
        left.addLayout(btns)

        self.system = QtWidgets.QLabel("")
        self.system.setWordWrap(True)
        self.airflow = QtWidgets.QLabel("")
        left.addWidget(self.system)
        left.addWidget(self.airflow)
        left.addStretch(1)

        right = QtWidgets.QVBoxLayout()
        cards = QtWidgets.QHBoxLayout()
        self.card_dt = ReadingCard("Delta-T")
        self.card_sh = ReadingCard("Superheat")
        self.card_sc = ReadingCard("Subcool")
        for c in (self.card_dt, self.card_sh, self.card_sc):
            cards.addWidget(c)
        right.addLayout(cards)
        self.messages = QtWidgets.QListWidget()
        self.advice = QtWidgets.QLabel("")
        self.advice.setWordWrap(True)
        right.addWidget(self.messages, 1)
        right.addWidget(self.advice)
        self.chart = PTChart()
        right.addWidget(self.chart.widget, 2)
        self.btn_png = QtWidgets.QPushButton("Save chart…")
        self.btn_png.clicked.connect(self.on_export_png)
        right.addWidget(self.btn_png, 0, QtCore.Qt.AlignRight)

        root.addLayout(left, 0)
        root.addLayout(right, 1)

    def _draw_curve(self, readings: Dict[str, Any] | None = None, result: Dict[str, Any] | None = None) -> None:
        curve = api.pt_curve(self.refrigerant.currentText())
        self.chart.show_curve(curve["refrigerant"], curve["psig"], curve["sat_f"])
        if not readings or not result:
            return
        if result.get("evap_sat_f") is not None:
            self.chart.mark(readings["suction_psig"], result["evap_sat_f"], "evap", "Evap")
        if result.get("cond_sat_f") is not None:
            self.chart.mark(readings["liquid_psig"], result["cond_sat_f"], "cond", "Cond")

    def on_evaluate(self) -> None:
        try:
            readings: Dict[str, Any] = {k: w.value() for k, w in self._readings.items()}
        except ValueError as e:
            QtWidgets.QMessageBox.critical(self, "Validation error", str(e))
            return
        readings["refrigerant"] = self.refrigerant.currentText()
        readings["metering_device"] = self.metering.currentData()
        try:
            out = api.diagnose(readings)
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Compute error", str(e))
            return
        self.state.diagnosis = out
        self._render(out)
        self._draw_curve(readings, out)

    def _render(self, out: Dict[str, Any]) -> None:
        lv = out["levels"]
        t = out["targets"]
        lo, hi = t["delta_t_range"]
        self.card_dt.set_reading(out["delta_t"], lv["delta_t"], f"{lo:g}–{hi:g}°F")
        self.card_sh.set_reading(out["superheat"], lv["superheat"], f"~{t['target_sh']:g}°F")
        self.card_sc.set_reading(out["subcool"], lv["subcool"], f"~{t['target_subcool']:g}°F")
        self.messages.clear()
        for m in out["messages"]:
            item = QtWidgets.QListWidgetItem(m["message"])
            item.setData(QtCore.Qt.UserRole, m["level"])
            item.setForeground(QtGui.QColor(COLORS.get(m["level"], COLORS["muted"])))
            self.messages.addItem(item)
        self.advice.setText(out["advice"])
        self.system.setText(f"{out['refrigerant']}, {out['metering_device'].upper()} metering")
        af = out["airflow"]
        self.airflow.setText(f"Airflow: {af['nominal']} CFM nominal ({af['low']}–{af['high']})" if af else "")

    def on_clear(self) -> None:
        for w in self._readings.values():
            w.clear()
        for c in (self.card_dt, self.card_sh, self.card_sc):
            c.clear()
        self.messages.clear()
        self.advice.setText("")
        self.system.setText("")
        self.airflow.setText("")
        self.state.diagnosis = {}
        self._draw_curve()

    def on_export_png(self) -> None:
        name = f"pt_{self.refrigerant.currentText().lower()}.png"
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save chart", name, "PNG Images (*.png)")
        if not path:
            return
        try:
            self.chart.export_png(path)
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))
