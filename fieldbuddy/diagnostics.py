# diagnostics.py
# -----------------------------------------------------------------------------
# Cooling-mode refrigerant diagnostics: PT lookups, superheat / subcool,
# delta-T, airflow by tonnage and rule-based health / charge guidance.
# -----------------------------------------------------------------------------
# Units: temperatures in °F, pressures in PSIG, lengths in ft.
# PT tables are compact "tech range" lookups centred on residential AC and
# interpolated linearly. Values are approximate and meant for field guidance,
# not factory commissioning. Guidance is advisory text only: no charge
# amounts are ever computed.
# -----------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from . import calibration as CAL
from .calibration import ChargeBands, HealthThresholds
from .numeric import all_finite, fmt_num, is_finite, round_half_up, to_fixed

Level = Literal["ok", "warn"]


@dataclass(frozen=True)
class PTPoint:
    psig: float
    sat_f: float


@dataclass(frozen=True)
class HealthMessage:
    level: Level
    message: str


@dataclass(frozen=True)
class AirflowRange:
    nominal: int
    low: int
    high: int


@dataclass(frozen=True)
class Targets:
    delta_t_range: Tuple[float, float]
    target_subcool: float
    target_sh: float


def _table(*pairs: Tuple[float, float]) -> Tuple[PTPoint, ...]:
    return tuple(PTPoint(p, f) for p, f in pairs)


# -----------------------------------------------------------------------------
# 1) PT tables (PSIG, °F saturation), ascending by pressure
# -----------------------------------------------------------------------------

PT_TABLES: Dict[str, Tuple[PTPoint, ...]] = {
    "R410A": _table(
        (90, 26), (110, 33), (130, 39), (150, 45), (170, 50), (190, 55),
        (210, 60), (230, 64), (250, 68), (275, 73), (300, 77), (325, 81),
        (350, 85),
    ),
    "R22": _table(
        (50, 28), (60, 33), (70, 38), (80, 42), (90, 46), (100, 50),
        (110, 54), (120, 57), (130, 60), (150, 66), (170, 71), (190, 76),
    ),
    "R454B": _table(
        (90, 22), (110, 29), (130, 35), (150, 41), (170, 46), (190, 51),
        (210, 56), (230, 60), (250, 64), (275, 69), (300, 73), (325, 77),
    ),
    "R32": _table(
        (90, 16), (110, 22), (130, 28), (150, 33), (170, 38), (190, 43),
        (210, 47), (230, 51), (250, 55), (275, 60), (300, 64), (325, 67),
    ),
}

REFRIGERANTS: Tuple[str, ...] = tuple(PT_TABLES)


def normalize_refrigerant(code: Optional[str]) -> str:
    """'r-410a' → 'R410A'. Unknown or empty codes fall back to R410A."""
    ref = (code or CAL.DEFAULT_REFRIGERANT).upper().replace("-", "").replace(" ", "")
    return ref if ref in PT_TABLES else CAL.DEFAULT_REFRIGERANT


def is_txv(metering_device: Optional[str]) -> bool:
    """'txv' in any case (or no value) is TXV; anything else is fixed orifice."""
    return (metering_device or CAL.DEFAULT_METERING).strip().lower() == "txv"


def interpolate_pt(psig: float, table: Sequence[PTPoint]) -> float:
    """
    Linear interpolation over an ascending PT table, clamped at both ends:
        T = f1 + (p - p1) / (p2 - p1) * (f2 - f1)
    """
    if psig <= table[0].psig:
        return table[0].sat_f
    if psig >= table[-1].psig:
        return table[-1].sat_f
    for lo, hi in zip(table, table[1:]):
        if lo.psig <= psig <= hi.psig:
            r = (psig - lo.psig) / (hi.psig - lo.psig)
            return lo.sat_f + r * (hi.sat_f - lo.sat_f)
    return table[0].sat_f


# -----------------------------------------------------------------------------
# 2) Derived readings
# -----------------------------------------------------------------------------


def psig_to_saturation_temp(psig: float, refrigerant: str = CAL.DEFAULT_REFRIGERANT) -> Optional[float]:
    """
    Saturation temperature [°F] for a gauge pressure.
    Args:
        psig: gauge pressure [PSIG]
        refrigerant: R410A, R22, R454B or R32 (unknown → R410A)
    Returns:
        float | None: 1 decimal; None for a non-finite pressure
    """
    if not is_finite(psig):
        return None
    table = PT_TABLES[normalize_refrigerant(refrigerant)]
    return to_fixed(interpolate_pt(psig, table), 1)


def calc_delta_t(return_f: float, supply_f: float) -> Optional[float]:
    """Return minus supply air temperature [°F], 1 decimal."""
    if not all_finite(return_f, supply_f):
        return None
    return to_fixed(return_f - supply_f, 1)


def calc_superheat(suction_psig: float, suction_line_f: float, refrigerant: str = CAL.DEFAULT_REFRIGERANT) -> Optional[float]:
    """Superheat [°F] = suction line temp - evaporator saturation temp."""
    if not all_finite(suction_psig, suction_line_f):
        return None
    evap_sat_f = psig_to_saturation_temp(suction_psig, refrigerant)
    return to_fixed(suction_line_f - evap_sat_f, 1)


def calc_subcool(liquid_psig: float, liquid_line_f: float, refrigerant: str = CAL.DEFAULT_REFRIGERANT) -> Optional[float]:
    """Subcool [°F] = condenser saturation temp - liquid line temp."""
    if not all_finite(liquid_psig, liquid_line_f):
        return None
    cond_sat_f = psig_to_saturation_temp(liquid_psig, refrigerant)
    return to_fixed(cond_sat_f - liquid_line_f, 1)


def _airflow_range(nominal: float) -> AirflowRange:
    return AirflowRange(
        nominal=round_half_up(nominal),
        low=round_half_up(nominal * CAL.AIRFLOW_LOW_FACTOR),
        high=round_half_up(nominal * CAL.AIRFLOW_HIGH_FACTOR),
    )


def airflow_by_tonnage(tons: float) -> Optional[AirflowRange]:
    """Nominal 400 CFM/ton with a -12.5 % / +5 % working range."""
    if not is_finite(tons):
        return None
    return _airflow_range(tons * CAL.CFM_PER_TON)


def airflow_by_area(sqft: float) -> Optional[AirflowRange]:
    """
    Planning airflow from conditioned floor area, for when tonnage is unknown:
    0.8 CFM/ft², rounded to whole CFM before the same working range is applied.
    """
    if not is_finite(sqft) or sqft <= 0:
        return None
    return _airflow_range(round_half_up(sqft * CAL.CFM_PER_SQFT))


def friction_rate(
    total_esp: float,
    supply_drop: float = 0.0,
    return_drop: float = 0.0,
    total_eql: float = CAL.EQL_DEFAULT,
) -> Optional[float]:
    """
    Friction rate [in.w.c./100 ft] with supply and return side drops:
        FR = (ESP - (supply_drop + return_drop)) / EQL * 100
    Args:
        total_esp: available system ESP [in.w.c.]
        supply_drop, return_drop: expected component losses [in.w.c.]
        total_eql: total equivalent length [ft] (> 0)
    Returns:
        float | None: 3 decimals
    """
    if not all_finite(total_esp, supply_drop, return_drop, total_eql) or total_eql <= 0:
        return None
    avail = total_esp - (supply_drop + return_drop)
    return to_fixed((avail / total_eql) * 100, 3)


def targets_for(refrigerant: str = CAL.DEFAULT_REFRIGERANT, metering_device: str = CAL.DEFAULT_METERING) -> Targets:
    """Typical residential targets by refrigerant and metering device."""
    ref = normalize_refrigerant(refrigerant)
    return Targets(
        delta_t_range=CAL.DELTA_T_TARGET,
        target_subcool=CAL.SUBCOOL_TARGET_R410A if ref == "R410A" else CAL.SUBCOOL_TARGET_OTHER,
        target_sh=CAL.SH_TARGET_TXV if is_txv(metering_device) else CAL.SH_TARGET_FIXED,
    )


# -----------------------------------------------------------------------------
# 3) Health evaluation and charge guidance
# -----------------------------------------------------------------------------


def _band(value: float, low: float, high: float, below: str, above: str, inside: str) -> HealthMessage:
    v = fmt_num(value)
    if value < low:
        return HealthMessage("warn", below.format(v=v))
    if value > high:
        return HealthMessage("warn", above.format(v=v))
    return HealthMessage("ok", inside.format(v=v))


def evaluate_cooling_health(
    delta_t: Optional[float] = None,
    superheat: Optional[float] = None,
    subcool: Optional[float] = None,
    metering_device: Optional[str] = CAL.DEFAULT_METERING,
    thresholds: HealthThresholds = CAL.DEFAULT_HEALTH_THRESHOLDS,
) -> List[HealthMessage]:
    """
    Quick-rule health check, one message per metric supplied.

    Delta-T is checked first. TXV systems are judged by subcool, then
    superheat; fixed orifice systems by superheat, then subcool, each with
    their own limits. Missing or non-finite metrics are skipped.
    """
    t = thresholds
    msgs: List[HealthMessage] = []

    if is_finite(delta_t):
        msgs.append(_band(
            delta_t, t.delta_t_low, t.delta_t_high,
            "Low delta-T ({v}°F). Check airflow, charge, coil cleanliness, and return leaks.",
            "High delta-T ({v}°F). Potential low airflow or freezing risk — inspect filter, blower speed, coil frost.",
            "Delta-T in expected range ({v}°F).",
        ))

    if is_txv(metering_device):
        if is_finite(subcool):
            msgs.append(_band(
                subcool, t.txv_subcool_low, t.txv_subcool_high,
                "Low subcool ({v}°F). Possible undercharge or restricted metering.",
                "High subcool ({v}°F). Possible overcharge or condenser airflow issue.",
                "Subcool looks good ({v}°F).",
            ))
        if is_finite(superheat):
            msgs.append(_band(
                superheat, t.txv_superheat_low, t.txv_superheat_high,
                "Very low superheat ({v}°F). Watch for flooding/slugging — verify TXV bulb and airflow.",
                "High superheat ({v}°F). Could be low charge, TXV starved, or low airflow.",
                "Superheat reasonable ({v}°F).",
            ))
    else:
        if is_finite(superheat):
            msgs.append(_band(
                superheat, t.fixed_superheat_low, t.fixed_superheat_high,
                "Low superheat ({v}°F). Potential overcharge or low airflow.",
                "High superheat ({v}°F). Likely undercharge or liquid line restriction.",
                "Superheat acceptable for fixed orifice ({v}°F).",
            ))
        if is_finite(subcool):
            msgs.append(_band(
                subcool, t.fixed_subcool_low, t.fixed_subcool_high,
                "Low subcool ({v}°F). Often undercharge on fixed orifice.",
                "High subcool ({v}°F). Possible overcharge or condenser airflow problem.",
                "Subcool within expected range ({v}°F).",
            ))

    return msgs


ADVICE = {
    "txv_low": "Subcool low — likely undercharged. Verify airflow and fix any leaks, then add refrigerant to target subcool.",
    "txv_high": "Subcool high — likely overcharged. Recover to target subcool after verifying condenser airflow.",
    "txv_ok": "Charge appears close for TXV (subcool near target).",
    "txv_missing": "Provide liquid pressure and liquid line temperature to compute subcool for TXV systems.",
    "fixed_high": "Superheat high — likely undercharged. Verify airflow, then add charge to bring SH toward target.",
    "fixed_low": "Superheat low — likely overcharged or airflow low. Reduce charge only after confirming proper airflow.",
    "fixed_ok": "Charge appears close for fixed metering (superheat near target).",
    "fixed_missing": "Provide suction pressure and suction line temperature to compute superheat for fixed orifice systems.",
}


def suggest_charge_adjust(
    superheat: Optional[float] = None,
    subcool: Optional[float] = None,
    metering_device: Optional[str] = CAL.DEFAULT_METERING,
    target_subcool: float = CAL.CHARGE_SUBCOOL_TARGET,
    target_sh: float = CAL.CHARGE_SH_TARGET,
    bands: ChargeBands = CAL.DEFAULT_CHARGE_BANDS,
) -> str:
    """
    Direction of charge adjustment as advisory text (never an amount).
    TXV: subcool vs target ± bands.subcool. Fixed orifice: superheat vs
    target ± bands.superheat.
    """
    if is_txv(metering_device):
        if not is_finite(subcool):
            return ADVICE["txv_missing"]
        if subcool < target_subcool - bands.subcool:
            return ADVICE["txv_low"]
        if subcool > target_subcool + bands.subcool:
            return ADVICE["txv_high"]
        return ADVICE["txv_ok"]

    if not is_finite(superheat):
        return ADVICE["fixed_missing"]
    if superheat > target_sh + bands.superheat:
        return ADVICE["fixed_high"]
    if superheat < target_sh - bands.superheat:
        return ADVICE["fixed_low"]
    return ADVICE["fixed_ok"]
