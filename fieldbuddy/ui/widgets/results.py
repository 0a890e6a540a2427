from __future__ import annotations

from typing import Optional
from PySide6 import QtCore, QtGui, QtWidgets

from ..theme import COLORS, LEVEL_BADGES


class ReadingCard(QtWidgets.QFrame):
    """One derived reading (delta-T, superheat, subcool) with its health level and target."""

    def __init__(self, title: str, unit: str = "°F", parent=None):
        super().__init__(parent)
        self.setFrameShape(QtWidgets.QFrame.StyledPanel)
        self.setObjectName("ReadingCard")
        self.unit = unit
        grid = QtWidgets.QGridLayout(self)
        self.title = QtWidgets.QLabel(title)
        self.badge = QtWidgets.QLabel("")
        self.badge.setAlignment(QtCore.Qt.AlignRight)
        self.reading = QtWidgets.QLabel("—")
        font = self.reading.font()
        font.setPointSizeF(font.pointSizeF() * 1.8)
        self.reading.setFont(font)
        self.target = QtWidgets.QLabel("")
        grid.addWidget(self.title, 0, 0)
        grid.addWidget(self.badge, 0, 1)
        grid.addWidget(self.reading, 1, 0, 1, 2)
        grid.addWidget(self.target, 2, 0, 1, 2)

    def set_reading(self, value: Optional[float], level: Optional[str] = None, target: str = "") -> None:
        if value is None:
            self.clear()
            return
        self.reading.setText(f"{value:g} {self.unit}")
        self.target.setText(f"target {target}" if target else "")
        self.badge.setText(LEVEL_BADGES.get(level or "", ""))
        pal = self.badge.palette()
        pal.setColor(QtGui.QPalette.WindowText, QtGui.QColor(COLORS.get(level or "muted", COLORS["muted"])))
        self.badge.setPalette(pal)

    def clear(self) -> None:
        self.reading.setText("—")
        self.target.setText("")
        self.badge.setText("")
