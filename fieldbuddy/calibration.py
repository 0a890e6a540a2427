"""
Centralized field-guidance constants for duct sizing and diagnostics.

Values are sourced from anchors.ANCHORS. Threshold groups are exposed as
frozen dataclasses so callers can pass a tuned copy into the evaluation
functions (dataclasses.replace) without touching module state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .anchors import ANCHORS

# --- Duct sizing defaults ---
TRUNK_FPM: float = float(ANCHORS["TRUNK_FPM"])      # [FPM]
BRANCH_FPM: float = float(ANCHORS["BRANCH_FPM"])    # [FPM]
TRUNK_MIN_DIA: int = int(ANCHORS["TRUNK_MIN_DIA"])  # [in]
TRUNK_MAX_DIA: int = int(ANCHORS["TRUNK_MAX_DIA"])  # [in]
BRANCH_MIN_DIA: int = int(ANCHORS["BRANCH_MIN_DIA"])
BRANCH_MAX_DIA: int = int(ANCHORS["BRANCH_MAX_DIA"])
DUCT_MIN_DIA: int = int(ANCHORS["DUCT_MIN_DIA"])
DUCT_MAX_DIA: int = int(ANCHORS["DUCT_MAX_DIA"])
RECT_ASPECT: float = float(ANCHORS["RECT_ASPECT"])
RECT_MIN_W: int = int(ANCHORS["RECT_MIN_W"])
RECT_MIN_H: int = int(ANCHORS["RECT_MIN_H"])
BRANCHES_PER_SUB: int = int(ANCHORS["BRANCHES_PER_SUB"])
FACE_FPM: float = float(ANCHORS["FACE_FPM"])
PLAN_RETURN_FPM: float = float(ANCHORS["PLAN_RETURN_FPM"])
PLAN_SPLIT: Tuple[float, ...] = (0.4, 0.35, 0.25)

ESP_DEFAULT: float = float(ANCHORS["ESP_DEFAULT"])      # [in.w.c.]
EQL_DEFAULT: float = float(ANCHORS["EQL_DEFAULT"])      # [ft]
DROPS_DEFAULT: float = float(ANCHORS["DROPS_DEFAULT"])  # [in.w.c.]

# Equivalent length of common fittings [ft], added on top of the segment length.
EQL_LIBRARY: Dict[str, float] = {
    "elbow-90-smooth": 15,
    "elbow-45-smooth": 7,
    "wye-branch": 10,
    "boot": 10,
    "flex-per-ft": 2,
    "damper": 5,
}

# Standard return grilles and ceiling supply registers, (W, H) in inches.
RETURN_GRILLES: Tuple[Tuple[int, int], ...] = ((20, 25), (24, 24), (16, 25), (14, 30), (12, 36))
SUPPLY_REGISTERS: Tuple[Tuple[int, int], ...] = ((4, 10), (4, 12), (6, 10), (6, 12))

# --- Airflow / targets ---
CFM_PER_TON: float = float(ANCHORS["CFM_PER_TON"])
CFM_PER_SQFT: float = float(ANCHORS["CFM_PER_SQFT"])
AIRFLOW_LOW_FACTOR: float = float(ANCHORS["AIRFLOW_LOW_FACTOR"])
AIRFLOW_HIGH_FACTOR: float = float(ANCHORS["AIRFLOW_HIGH_FACTOR"])
DELTA_T_TARGET: Tuple[float, float] = (float(ANCHORS["DELTA_T_TARGET_LOW"]), float(ANCHORS["DELTA_T_TARGET_HIGH"]))
SUBCOOL_TARGET_R410A: float = float(ANCHORS["SUBCOOL_TARGET_R410A"])
SUBCOOL_TARGET_OTHER: float = float(ANCHORS["SUBCOOL_TARGET_OTHER"])
SH_TARGET_TXV: float = float(ANCHORS["SH_TARGET_TXV"])
SH_TARGET_FIXED: float = float(ANCHORS["SH_TARGET_FIXED"])

DEFAULT_REFRIGERANT: str = str(ANCHORS["DEFAULT_REFRIGERANT"])
DEFAULT_METERING: str = str(ANCHORS["DEFAULT_METERING"])


@dataclass(frozen=True)
class HealthThresholds:
    """Warn limits used by diagnostics.evaluate_cooling_health (°F).

    A value equal to a limit is inside the ok range.
    """
    delta_t_low: float = float(ANCHORS["DELTA_T_LOW"])
    delta_t_high: float = float(ANCHORS["DELTA_T_HIGH"])
    txv_subcool_low: float = float(ANCHORS["TXV_SUBCOOL_LOW"])
    txv_subcool_high: float = float(ANCHORS["TXV_SUBCOOL_HIGH"])
    txv_superheat_low: float = float(ANCHORS["TXV_SH_LOW"])
    txv_superheat_high: float = float(ANCHORS["TXV_SH_HIGH"])
    fixed_superheat_low: float = float(ANCHORS["FIXED_SH_LOW"])
    fixed_superheat_high: float = float(ANCHORS["FIXED_SH_HIGH"])
    fixed_subcool_low: float = float(ANCHORS["FIXED_SUBCOOL_LOW"])
    fixed_subcool_high: float = float(ANCHORS["FIXED_SUBCOOL_HIGH"])


@dataclass(frozen=True)
class ChargeBands:
    """Half-widths of the 'close enough' band around charge targets (°F)."""
    subcool: float = float(ANCHORS["CHARGE_SUBCOOL_BAND"])
    superheat: float = float(ANCHORS["CHARGE_SH_BAND"])


DEFAULT_HEALTH_THRESHOLDS = HealthThresholds()
DEFAULT_CHARGE_BANDS = ChargeBands()
CHARGE_SUBCOOL_TARGET: float = float(ANCHORS["CHARGE_SUBCOOL_TARGET"])
CHARGE_SH_TARGET: float = float(ANCHORS["CHARGE_SH_TARGET"])
