from __future__ import annotations

from typing import Optional
from PySide6 import QtCore, QtGui, QtWidgets

from ..state import UIState
from ... import reports as R
from ...schemas import ServiceReport

# Report diagnostics taken from the last evaluation on the Diagnostics tab.
_DIAG_FIELDS = (
    ("Refrigerant", "refrigerant", None),
    ("Metering", "metering_device", None),
    ("Delta T", "delta_t", "°F"),
    ("Superheat", "superheat", "°F"),
    ("Subcool", "subcool", "°F"),
    ("Evap saturation", "evap_sat_f", "°F"),
    ("Cond saturation", "cond_sat_f", "°F"),
)


class ReportsTab(QtWidgets.QWidget):
    def __init__(self, state: UIState, parent=None):
        super().__init__(parent)
        self.state = state
        self.store = R.ReportStore(state.store_path)
        self._build_ui()
        self._refresh_list()

    def _build_ui(self) -> None:
        root = QtWidgets.QHBoxLayout(self)

        left = QtWidgets.QVBoxLayout()
        form = QtWidgets.QFormLayout()
        self.customer = QtWidgets.QLineEdit()
        self.address = QtWidgets.QLineEdit()
        self.tech = QtWidgets.QLineEdit(self.state.tech)
        self.tech.textChanged.connect(lambda t: setattr(self.state, "tech", t))
        self.complaint = QtWidgets.QPlainTextEdit()
        self.complaint.setMaximumHeight(70)
        self.notes = QtWidgets.QPlainTextEdit()
        self.notes.setMaximumHeight(90)
        form.addRow("Customer", self.customer)
        form.addRow("Address", self.address)
        form.addRow("Technician", self.tech)
        form.addRow("Complaint", self.complaint)
        form.addRow("Notes", self.notes)
        left.addLayout(form)
        self.chk_diag = QtWidgets.QCheckBox("Include diagnostics")
        self.chk_diag.setChecked(True)
        self.chk_mat = QtWidgets.QCheckBox("Include materials")
        self.chk_mat.setChecked(True)
        self.chk_plan = QtWidgets.QCheckBox("Append duct plan to PDF")
        for w in (self.chk_diag, self.chk_mat, self.chk_plan):
            left.addWidget(w)
        self.btn_save = QtWidgets.QPushButton("Save report")
        self.btn_save.clicked.connect(self.on_save)
        left.addWidget(self.btn_save)
        left.addStretch(1)

        right = QtWidgets.QVBoxLayout()
        self.list = QtWidgets.QListWidget()
        self.list.currentItemChanged.connect(lambda *_: self._show_selected())
        self.preview = QtWidgets.QPlainTextEdit()
        self.preview.setReadOnly(True)
        btns = QtWidgets.QHBoxLayout()
        self.btn_pdf = QtWidgets.QPushButton("Export PDF")
        self.btn_pdf.clicked.connect(self.on_export_pdf)
        self.btn_txt = QtWidgets.QPushButton("Export TXT")
        self.btn_txt.clicked.connect(self.on_export_txt)
        self.btn_mail = QtWidgets.QPushButton("Email…")
        self.btn_mail.clicked.connect(self.on_email)
        self.btn_delete = QtWidgets.QPushButton("Delete")
        self.btn_delete.clicked.connect(self.on_delete)
        self.btn_export_all = QtWidgets.QPushButton("Export all…")
        self.btn_export_all.setToolTip(f"PDF of the newest {R.EXPORT_ALL_LIMIT} reports into a folder")
        self.btn_export_all.clicked.connect(self.on_export_all)
        self.btn_clear = QtWidgets.QPushButton("Clear all")
        self.btn_clear.clicked.connect(self.on_clear)
        for w in (self.btn_pdf, self.btn_txt, self.btn_mail, self.btn_delete, self.btn_export_all, self.btn_clear):
            btns.addWidget(w)
        right.addWidget(self.list, 1)
        right.addWidget(self.preview, 2)
        right.addLayout(btns)

        root.addLayout(left, 2)
        root.addLayout(right, 3)

    def _refresh_list(self, select_id: Optional[str] = None) -> None:
        self.list.clear()
        for r in self.store.list():
            item = QtWidgets.QListWidgetItem(f"{r.customer.name} — {r.id}")
            item.setData(QtCore.Qt.UserRole, r.id)
            self.list.addItem(item)
            if r.id == select_id:
                self.list.setCurrentItem(item)
        if select_id is None and self.list.count():
            self.list.setCurrentRow(0)
        self._show_selected()

    def _selected(self) -> Optional[ServiceReport]:
        item = self.list.currentItem()
        return self.store.get(item.data(QtCore.Qt.UserRole)) if item else None

    def _show_selected(self) -> None:
        report = self._selected()
        self.preview.setPlainText(R.format_report_text(report) if report else "")

    def on_save(self) -> None:
        diag = self.state.diagnosis if self.chk_diag.isChecked() else {}
        entries = R.diagnostics_entries(
            {label: diag.get(key) for label, key, _ in _DIAG_FIELDS},
            {label: unit for label, _, unit in _DIAG_FIELDS if unit},
        )
        try:
            report = R.new_report(
                self.customer.text(), self.address.text(),
                tech=self.tech.text().strip(),
                complaint=self.complaint.toPlainText(),
                diagnostics=entries,
                materials=self.state.selection if self.chk_mat.isChecked() else None,
                notes=self.notes.toPlainText(),
            )
            self.store.add(report)
        except (ValueError, OSError) as e:
            QtWidgets.QMessageBox.critical(self, "Save error", str(e))
            return
        self._refresh_list(report.id)

    def on_delete(self) -> None:
        report = self._selected()
        if report is None:
            return
        ok = QtWidgets.QMessageBox.question(self, "Delete report", f"Delete report {report.id}?")
        if ok != QtWidgets.QMessageBox.Yes:
            return
        try:
            self.store.delete(report.id)
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Delete error", str(e))
        self._refresh_list()

    def on_export_all(self) -> None:
        reports = self.store.list()
        if not reports:
            QtWidgets.QMessageBox.information(self, "Export", "No reports to export.")
            return
        directory = QtWidgets.QFileDialog.getExistingDirectory(self, "Export reports to")
        if not directory:
            return
        try:
            written = R.export_reports(reports, directory, "pdf")
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))
            return
        QtWidgets.QMessageBox.information(self, "Export", f"Exported {len(written)} of {len(reports)} reports.")

    def on_clear(self) -> None:
        if not len(self.store):
            return
        ok = QtWidgets.QMessageBox.question(self, "Clear reports", f"Delete all {len(self.store)} saved reports?")
        if ok != QtWidgets.QMessageBox.Yes:
            return
        try:
            self.store.clear()
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Clear error", str(e))
        self._refresh_list()

    def on_export_pdf(self) -> None:
        report = self._selected()
        if report is None:
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export PDF", R.report_file_name(report, "pdf"), "PDF Files (*.pdf)")
        if not path:
            return
        extra = self.state.plan.get("text") if self.chk_plan.isChecked() and self.state.plan else None
        try:
            data = R.build_service_pdf(report, extra_text=extra)
            with open(path, "wb") as f:
                f.write(data)
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))

    def on_export_txt(self) -> None:
        report = self._selected()
        if report is None:
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export TXT", R.report_file_name(report, "txt"), "Text Files (*.txt)")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(R.format_report_text(report))
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Export error", str(e))

    def on_email(self) -> None:
        report = self._selected()
        if report is None:
            return
        to, ok = QtWidgets.QInputDialog.getText(self, "Email report", "To:")
        if not ok:
            return
        link = R.make_mailto_link(
            to=to.strip(),
            subject=f"Service Report {report.id} — {report.customer.name}",
            body=R.format_report_text(report),
        )
        QtGui.QDesktopServices.openUrl(QtCore.QUrl(link))
