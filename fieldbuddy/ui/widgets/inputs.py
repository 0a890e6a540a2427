from __future__ import annotations

from typing import Optional
from PySide6 import QtCore, QtWidgets

from ...io import parse_optional_number


def _row(parent: QtWidgets.QWidget, label: str, editor: QtWidgets.QWidget) -> None:
    layout = QtWidgets.QHBoxLayout(parent)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.addWidget(QtWidgets.QLabel(label))
    layout.addWidget(editor, 1)


class LabeledSpin(QtWidgets.QWidget):
    """Design input with its unit as suffix (CFM, FPM, in.w.c., ft)."""

    def __init__(self, label: str, suffix: str = "", parent=None, *,
                 decimals: int = 1, lo: float = 0.0, hi: float = 1e6, value: float = 0.0, step: float = 1.0):
        super().__init__(parent)
        self.spin = QtWidgets.QDoubleSpinBox()
        self.spin.setDecimals(decimals)
        self.spin.setRange(lo, hi)
        self.spin.setSingleStep(step)
        self.spin.setValue(value)
        if suffix:
            self.spin.setSuffix(f" {suffix}")
        _row(self, label, self.spin)

    def value(self) -> float:
        return float(self.spin.value())

    def setValue(self, v: float):
        self.spin.setValue(v)


class OptionalReading(QtWidgets.QWidget):
    """A gauge or thermometer reading that may be left blank.

    Decimal commas are accepted; bad text raises ValueError from value().
    """

    def __init__(self, label: str, unit: str = "", parent=None):
        super().__init__(parent)
        self.edit = QtWidgets.QLineEdit()
        self.edit.setPlaceholderText(unit or "—")
        _row(self, label, self.edit)

    def value(self) -> Optional[float]:
        return parse_optional_number(self.edit.text())

    def clear(self):
        self.edit.clear()


class SearchBox(QtWidgets.QLineEdit):
    """Emits `search` with the current text once typing pauses."""
    search = QtCore.Signal(str)

    def __init__(self, placeholder: str = "", delay_ms: int = 250, parent=None):
        super().__init__(parent)
        self.setPlaceholderText(placeholder)
        self.setClearButtonEnabled(True)
        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(lambda: self.search.emit(self.text()))
        self.textChanged.connect(lambda _: self._timer.start())
