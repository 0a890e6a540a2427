from __future__ import annotations

import csv
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
from PySide6 import QtCore, QtGui

from ..theme import COLORS


def _plain(v: Any) -> str:
    if v is None:
        return "—"
    return f"{v:g}" if isinstance(v, float) else str(v)


@dataclass(frozen=True)
class Column:
    title: str
    key: str
    fmt: Callable[[Any], str] = _plain
    # Record key holding the ceiling for this column; values above it are tinted.
    limit_key: Optional[str] = None


class RecordTableModel(QtCore.QAbstractTableModel):
    """Read-only table over dict records, one Column per displayed key."""

    def __init__(self, columns: Sequence[Column], records: Sequence[Dict[str, Any]] = ()):
        super().__init__()
        self.columns = list(columns)
        self.records: List[Dict[str, Any]] = list(records)

    def rowCount(self, parent=QtCore.QModelIndex()):
        return len(self.records)

    def columnCount(self, parent=QtCore.QModelIndex()):
        return len(self.columns)

    def data(self, index, role=QtCore.Qt.DisplayRole):
        if not index.isValid():
            return None
        col = self.columns[index.column()]
        rec = self.records[index.row()]
        val = rec.get(col.key)
        if role == QtCore.Qt.DisplayRole:
            return col.fmt(val) if val is not None else "—"
        if role == QtCore.Qt.BackgroundRole and col.limit_key and isinstance(val, (int, float)):
            limit = rec.get(col.limit_key)
            if limit is not None and val > limit:
                return QtGui.QColor(COLORS["warn"]).lighter(170)
        return None

    def headerData(self, section, orientation, role=QtCore.Qt.DisplayRole):
        if role == QtCore.Qt.DisplayRole and orientation == QtCore.Qt.Horizontal:
            return self.columns[section].title
        return None

    def set_records(self, records: Sequence[Dict[str, Any]]) -> None:
        self.beginResetModel()
        self.records = list(records)
        self.endResetModel()

    def export_csv(self, path: str) -> None:
        """Raw values (not display text), blank for missing."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow([c.title for c in self.columns])
            for rec in self.records:
                w.writerow(["" if rec.get(c.key) is None else rec[c.key] for c in self.columns])
