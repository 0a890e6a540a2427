from __future__ import annotations

from typing import List, Optional
from PySide6 import QtWidgets, QtGui

from ..widgets.inputs import SearchBox
from ..widgets.tables import Column, RecordTableModel
from ..state import UIState
from ... import io
from ... import materials as M


class MaterialsTab(QtWidgets.QWidget):
    """Catalog search, quantity picking and a priced takeoff."""

    def __init__(self, state: UIState, parent=None):
        super().__init__(parent)
        self.state = state
        if self.state.catalog is None:
            self.state.catalog = io.load_catalog()
        self._rows: List[M.CatalogRow] = []
        self._build_ui()
        self._refresh_catalog()
        self._refresh_takeoff()

    def _build_ui(self) -> None:
        root = QtWidgets.QHBoxLayout(self)

        left = QtWidgets.QVBoxLayout()
        top = QtWidgets.QHBoxLayout()
        self.search = SearchBox("Search name, spec or SKU")
        self.search.search.connect(lambda _: self._refresh_catalog())
        self.btn_load = QtWidgets.QPushButton("Load catalog…")
        self.btn_load.clicked.connect(self.on_load_catalog)
        top.addWidget(self.search, 1)
        top.addWidget(self.btn_load)
        left.addLayout(top)

        self.model = RecordTableModel([
            Column("Category", "category"),
            Column("Item", "name"),
            Column("Spec", "spec"),
            Column("SKU", "sku"),
            Column("Price", "price", fmt=lambda v: f"${v:,.2f}"),
        ])
        self.table = QtWidgets.QTableView()
        self.table.setModel(self.model)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        left.addWidget(self.table, 1)

        qty_row = QtWidgets.QHBoxLayout()
        self.qty = QtWidgets.QSpinBox()
        self.qty.setRange(0, 999)
        self.qty.setValue(1)
        self.btn_add = QtWidgets.QPushButton("Add")
        self.btn_add.clicked.connect(self.on_add)
        self.btn_set = QtWidgets.QPushButton("Set qty")
        self.btn_set.clicked.connect(self.on_set)
        for w in (QtWidgets.QLabel("Qty"), self.qty, self.btn_add, self.btn_set):
            qty_row.addWidget(w)
        qty_row.addStretch(1)
        left.addLayout(qty_row)

        right = QtWidgets.QVBoxLayout()
        self.takeoff = QtWidgets.QPlainTextEdit()
        self.takeoff.setReadOnly(True)
        self.takeoff.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))
        self.subtotal = QtWidgets.QLabel("")
        btns = QtWidgets.QHBoxLayout()
        self.btn_copy = QtWidgets.QPushButton("Copy takeoff")
        self.btn_copy.clicked.connect(lambda: QtWidgets.QApplication.clipboard().setText(self.takeoff.toPlainText()))
        self.btn_clear = QtWidgets.QPushButton("Clear selection")
        self.btn_clear.clicked.connect(self.on_clear)
        btns.addWidget(self.btn_copy)
        btns.addWidget(self.btn_clear)
        right.addWidget(self.takeoff, 1)
        right.addWidget(self.subtotal)
        right.addLayout(btns)

        root.addLayout(left, 3)
        root.addLayout(right, 2)

    def _refresh_catalog(self) -> None:
        found = M.search_catalog(self.state.catalog, self.search.text())
        self._rows = M.flatten(M.sort_items_in_category(found))
        self.model.set_records([
            {"category": r.category, "name": r.name, "spec": r.spec, "sku": r.sku, "price": r.price}
            for r in self._rows
        ])
        self.table.resizeColumnsToContents()

    def _refresh_takeoff(self) -> None:
        prices = M.price_map_from_catalog(self.state.catalog)
        cost = M.summarize_selection_cost(self.state.selection, prices)
        text = M.format_selected_for_text(self.state.selection)
        if cost.lines:
            text += "\n\n" + "\n".join(cost.lines)
        self.takeoff.setPlainText(text)
        missing = f"  ({len(cost.missing_prices)} without price)" if cost.missing_prices else ""
        self.subtotal.setText(f"Subtotal: ${cost.subtotal:.2f}{missing}")

    def _current_key(self) -> Optional[M.MaterialKey]:
        idx = self.table.currentIndex()
        if not idx.isValid() or idx.row() >= len(self._rows):
            return None
        return self._rows[idx.row()].key

    def on_add(self) -> None:
        key = self._current_key()
        if key is None:
            return
        self.state.selection = M.merge_selections(self.state.selection, {key: self.qty.value()})
        self._refresh_takeoff()

    def on_set(self) -> None:
        key = self._current_key()
        if key is None:
            return
        self.state.selection = M.set_quantity(self.state.selection, key, self.qty.value())
        self._refresh_takeoff()

    def on_clear(self) -> None:
        self.state.selection = {}
        self._refresh_takeoff()

    def on_load_catalog(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Open catalog", "", "JSON Files (*.json)")
        if not path:
            return
        try:
            self.state.catalog = io.load_catalog(path)
        except Exception as e:
            QtWidgets.QMessageBox.critical(self, "Import error", str(e))
            return
        self._refresh_catalog()
        self._refresh_takeoff()
