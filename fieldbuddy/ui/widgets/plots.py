from __future__ import annotations

from typing import List, Sequence
from PySide6 import QtCore
import pyqtgraph as pg
from pyqtgraph.exporters import ImageExporter

from ..theme import COLORS
from ...diagnostics import PTPoint, interpolate_pt


class PTChart(QtCore.QObject):
    """Saturation curve of one refrigerant, with evaporator and condenser markers.

    Hovering shows the cursor pressure and the tabulated saturation temperature
    at that pressure (same interpolation as the diagnostics engine).
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        pg.setConfigOptions(antialias=True)
        self.widget = pg.PlotWidget(background=COLORS["background"])
        item = self.widget.getPlotItem()
        item.showGrid(x=True, y=True, alpha=0.25)
        for side in ("left", "bottom"):
            item.getAxis(side).setPen(COLORS["axis"])
        item.setLabel("bottom", "Pressure", units="PSIG")
        item.setLabel("left", "Saturation", units="°F")
        item.addLegend(offset=(-10, 10))

        self._table: List[PTPoint] = []
        self._guide = pg.InfiniteLine(angle=90, movable=False,
                                      pen=pg.mkPen(COLORS["gridline"], style=QtCore.Qt.DashLine))
        self._readout = pg.TextItem("", color=COLORS["axis"], anchor=(0, 1))  # type: ignore[arg-type]
        self._add_hover_items()
        self._mouse_proxy = pg.SignalProxy(self.widget.scene().sigMouseMoved, rateLimit=30, slot=self._on_mouse)

    def _add_hover_items(self) -> None:
        self._guide.setZValue(10)
        self._readout.setZValue(1000)
        self.widget.addItem(self._guide, ignoreBounds=True)
        self.widget.addItem(self._readout, ignoreBounds=True)

    def show_curve(self, refrigerant: str, psig: Sequence[float], sat_f: Sequence[float]) -> None:
        """Replace the chart with the PT table of one refrigerant."""
        self.widget.clear()
        self._add_hover_items()
        self._table = [PTPoint(p, t) for p, t in zip(psig, sat_f)]
        self.widget.plot(list(psig), list(sat_f), name=refrigerant,
                         pen=pg.mkPen(COLORS["pt_curve"], width=2),
                         symbol="o", symbolSize=5, symbolBrush=COLORS["pt_curve"])
        self.widget.enableAutoRange("xy", True)

    def mark(self, psig: float, sat_f: float, color_token: str, label: str) -> None:
        """A gauge reading placed on its saturation temperature."""
        color = COLORS.get(color_token, COLORS["muted"])
        dot = pg.ScatterPlotItem([psig], [sat_f], size=11, brush=pg.mkBrush(color), pen=pg.mkPen(color))
        self.widget.addItem(dot)
        tag = pg.TextItem(f"{label} {psig:g} PSIG / {sat_f:g}°F", color=color, anchor=(0, 1))  # type: ignore[arg-type]
        tag.setPos(psig, sat_f)
        self.widget.addItem(tag, ignoreBounds=True)

    def export_png(self, path: str) -> None:
        ImageExporter(self.widget.plotItem).export(path)

    def _on_mouse(self, evt) -> None:
        pos = evt[0] if isinstance(evt, (list, tuple)) else evt
        vb = self.widget.plotItem.vb
        if vb is None or pos is None or not self.widget.sceneBoundingRect().contains(pos):
            return
        p = vb.mapSceneToView(pos)
        self._guide.setPos(p.x())
        text = f"{p.x():.0f} PSIG"
        if self._table:
            text += f" → {interpolate_pt(p.x(), self._table):.1f}°F"
        self._readout.setText(text)
        (x0, _), (_, y1) = vb.viewRange()
        self._readout.setPos(x0, y1)
