from __future__ import annotations

COLORS = {
  "pt_curve": "#29B6F6",
  "evap": "#26A69A",
  "cond": "#FF7043",
  "ok": "#00C853",
  "warn": "#FFB300",
  "muted": "#90A4AE",
  "background": "#101418",
  "axis": "#B0BEC5",
  "gridline": "#37474F",
}

# Plan table rows whose velocity exceeds their own target by this factor are tinted.
VELOCITY_WARN_FACTOR = 1.10

LEVEL_BADGES = {"ok": "OK", "warn": "CHECK"}
