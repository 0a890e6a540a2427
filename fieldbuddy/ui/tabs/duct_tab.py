from __future__ import annotations

from typing import Any, Dict, List
from PySide6 import QtWidgets, QtGui

from ..widgets.inputs import LabeledSpin
from ..widgets.tables import Column, RecordTableModel
from ..state import UIState
from ..theme import VELOCITY_WARN_FACTOR
from ... import api
from ... import calibration as CAL
from ... import io


class DuctTab(QtWidgets.QWidget):
    """Sub-plenum plan, single duct sizing, returns, friction rate and EQL."""

    def __init__(self, state: UIState, parent=None):
        super().__init__(parent)
        self.state = state
        self._build_ui()

    def _build_ui(self) -> None:
        root = QtWidgets.QHBoxLayout(self)

        # Left: plan inputs and quick tools
        left = QtWidgets.QVBoxLayout()

        grp_plan = QtWidgets.QGroupBox("Sub-plenum plan")
        form = QtWidgets.QFormLayout(grp_plan)
        self.total_cfm = LabeledSpin("Total", "CFM", decimals=0, hi=20000, value=1200, step=50)
        self.split = QtWidgets.QLineEdit(", ".join(f"{r:g}" for r in CAL.PLAN_SPLIT))
        self.split.setToolTip("Number of sub-plenums ('3') or ratios ('0.4, 0.35, 0.25')")
        self.trunk_fpm = LabeledSpin("Trunk", "FPM", decimals=0, hi=3000, value=CAL.TRUNK_FPM, step=25)
        self.branch_fpm = LabeledSpin("Branch", "FPM", decimals=0, hi=3000, value=CAL.BRANCH_FPM, step=25)
        form.addRow(self.total_cfm)
        form.addRow("Split", self.split)
        form.addRow(self.trunk_fpm)
        form.addRow(self.branch_fpm)
        self.btn_plan = QtWidgets.QPushButton("Generate plan")
        self.btn_plan.clicked.connect(self.on_plan)
        form.addRow(self.btn_plan)
        left.addWidget(grp_plan)

        grp_duct = QtWidgets.QGroupBox("Single duct")
        form = QtWidgets.QFormLayout(grp_duct)
        self.duct_cfm = LabeledSpin("Flow", "CFM", decimals=0, hi=20000, value=400, step=10)
        self.duct_fpm = LabeledSpin("Target", "FPM", decimals=0, hi=3000, value=CAL.BRANCH_FPM, step=25)
        self.shape = QtWidgets.QComboBox()
        self.shape.addItems(["round", "rect"])
        self.aspect = LabeledSpin("Aspect W:H", decimals=2, lo=0.25, hi=8, value=CAL.RECT_ASPECT, step=0.25)
        self.duct_result = QtWidgets.QLabel("—")
        btn = QtWidgets.QPushButton("Size")
        btn.clicked.connect(self.on_duct)
        for w in (self.duct_cfm, self.duct_fpm):
            form.addRow(w)
        form.addRow("Shape", self.shape)
        form.addRow(self.aspect)
        form.addRow(btn)
        form.addRow(self.duct_result)
        left.addWidget(grp_duct)

        grp_fr = QtWidgets.QGroupBox("Friction rate / equivalent length")
        form = QtWidgets.QFormLayout(grp_fr)
        self.esp = LabeledSpin("ESP", "in.w.c.", decimals=2, hi=5, value=CAL.ESP_DEFAULT, step=0.05)
        self.drops = LabeledSpin("Component drops", "in.w.c.", decimals=2, hi=5, value=CAL.DROPS_DEFAULT, step=0.05)
        self.segments = QtWidgets.QPlainTextEdit()
        self.segments.setPlaceholderText("One per line: 'elbow-90-smooth:4', 'boot:2', '35'")
        self.segments.setMaximumHeight(90)
        self.eql = LabeledSpin("EQL", "ft", decimals=0, hi=5000, value=CAL.EQL_DEFAULT, step=10)
        self.fr_result = QtWidgets.QLabel("—")
        btn_eql = QtWidgets.QPushButton("EQL from fittings")
        btn_eql.clicked.connect(self.on_eql)
        btn_fr = QtWidgets.QPushButton("Friction rate")
        btn_fr.clicked.connect(self.on_friction)
        form.addRow(self.esp)
        form.addRow(self.drops)
        form.addRow(self.segments)
        form.addRow(btn_eql)
        form.addRow(self.eql)
        form.addRow(btn_fr)
        form.addRow(self.fr_result)
        left.addWidget(grp_fr)
        left.addStretch(1)

        # Right: plan table and text
        right = QtWidgets.QVBoxLayout()
        self.model = RecordTableModel([
            Column("Sub-plenum", "sub_plenum"),
            Column("Trunk", "trunk"),
            Column("Branch", "branch"),
            Column("CFM", "cfm"),
            Column("Dia [in]", "dia"),
            Column("FPM", "fpm", limit_key="fpm_limit"),
        ])
        self.table = QtWidgets.QTableView()
        self.table.setModel(self.model)
        self.text = QtWidgets.QPlainTextEdit()
        self.text.setReadOnly(True)
        self.text.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))
        btns = QtWidgets.QHBoxLayout()
        self.btn_copy = QtWidgets.QPushButton("Copy text")
        self.btn_copy.clicked.connect(self.on_copy)
        self.btn_csv = QtWidgets.QPushButton("Export CSV")
        self.btn_csv.clicked.connect(self.on_export_csv)
        self.btn_txt = QtWidgets.QPushButton("Save TXT")
        self.btn_txt.clicked.connect(self.on_export_txt)
        for w in (self.btn_copy, self.btn_csv, self.btn_txt):
            btns.addWidget(w)
        right.addWidget(self.table, 3)
        right.addWidget(self.text, 2)
        right.addLayout(btns)

        root.addLayout(left, 0)
        root.addLayout(right, 1)

    # --- plan ---------------------------------------------------------------

    def on_plan(self) -> None:
        try:
            split = io.parse_split(self.split.text())
            out = api.sub_plenum_plan({
                "total_cfm": self.total_cfm.value(),
                "split": split,
                "trunk_fpm": self.trunk_fpm.value(),
                "branch_fpm": self.branch_fpm.value(),
            })
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Plan error", str(e))
            return
        self.state.plan = out
        self._render_plan(out)

    def _render_plan(self, plan: Dict[str, Any]) -> None:
        trunk_limit = plan["trunk_fpm"] * VELOCITY_WARN_FACTOR
        branch_limit = plan["branch_fpm"] * VELOCITY_WARN_FACTOR
        records: List[Dict[str, Any]] = []
        for sp in plan["sub_plenums"]:
            trunk = sp["trunk"]
            records.append({"sub_plenum": sp["name"], "trunk": trunk["suggestion"], "cfm": sp["cfm"],
                            "dia": trunk["dia"], "fpm": trunk["fpm"], "fpm_limit": trunk_limit})
            records += [{"branch": b["name"], "cfm": b["cfm"], "dia": b["dia"], "fpm": b["fpm"],
                         "fpm_limit": branch_limit} for b in sp["branches"]]
        self.model.set_records(records)
        self.table.resizeColumnsToContents()
        self.text.setPlainText(plan["text"])

    def on_copy(self) -> None:
        QtWidgets.QApplication.clipboard().setText(self.text.toPlainText())

    def on_export_csv(self) -> None:
        if not self.model.records:
            QtWidgets.QMessageBox.information(self, "Export", "No plan to export. Generate one first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export plan", "duct_plan.csv", "CSV Files (*.csv)")
        if not path:
            return
        try:
            self.model.export_csv(path)
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))

    def on_export_txt(self) -> None:
        if not self.state.plan:
            QtWidgets.QMessageBox.information(self, "Export", "No plan to export. Generate one first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save plan", "duct_plan.txt", "Text Files (*.txt)")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.state.plan["text"] + "\n")
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))

    # --- quick tools --------------------------------------------------------

    def on_duct(self) -> None:
        shape = self.shape.currentText()
        data: Dict[str, Any] = {"cfm": self.duct_cfm.value(), "target_fpm": self.duct_fpm.value()}
        if shape == "rect":
            data["aspect"] = self.aspect.value()
        try:
            out = api.duct_size(shape, data)
            ret = api.returns_guidance({"cfm": self.duct_cfm.value()})
        except Exception as e:
            self.duct_result.setText(f"Error: {e}")
            return
        regs = ", ".join(f"{o['w']}×{o['h']} @ ~{o['fpm']} FPM" for o in ret["supply_registers"][:2])
        self.duct_result.setText(f"{out['suggestion']}\nRegisters: {regs or 'n/a'}")

    def on_eql(self) -> None:
        try:
            segs = [io.parse_segment(ln) for ln in self.segments.toPlainText().splitlines() if ln.strip()]
            out = api.equivalent_length(segs)
        except Exception as e:
            self.fr_result.setText(f"Error: {e}")
            return
        self.eql.setValue(out["eql_ft"])
        note = f" (unknown fittings: {', '.join(out['unknown_fittings'])})" if out["unknown_fittings"] else ""
        self.fr_result.setText(f"EQL {out['eql_ft']} ft{note}")

    def on_friction(self) -> None:
        try:
            out = api.friction({"total_esp": self.esp.value(), "eql_ft": self.eql.value(), "drops": self.drops.value()})
        except Exception as e:
            self.fr_result.setText(f"Error: {e}")
            return
        msg = f"FR ≈ {out['friction_rate']:.3f} {out['unit']}"
        if not out["feasible"]:
            msg += "  (drops exceed ESP)"
        self.fr_result.setText(msg)
