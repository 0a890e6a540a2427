"""
Thin, stable API for the UI layer and the CLI.

Contracts (do not change signatures during UI work):
  - sub_plenum_plan(inputs) -> dict           (includes "text")
  - duct_size(shape, inputs) -> dict
  - returns_guidance(inputs) -> dict
  - friction(inputs) -> dict
  - equivalent_length(segments) -> dict
  - saturation(inputs) -> dict
  - diagnose(readings) -> dict
  - charge_advice(inputs) -> dict
  - takeoff(lines, catalog) -> dict

Inputs are plain dicts of already-parsed values (see io.py for text
parsing). Validation is performed via Pydantic schemas; a ValidationError
propagates to the caller. BackendError is raised when validated input still
cannot produce a result.
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Literal, Any, Optional
import logging

from . import calibration as CAL
from . import diagnostics as D
from . import ductsizing as DS
from . import materials as M
from .schemas import (
    PlanInputs, RoundDuctInputs, RectDuctInputs, ReturnInputs,
    FrictionInputs, SegmentIn, PTInputs, SystemReadings, ChargeInputs, MaterialLine,
)


Shape = Literal["round", "rect"]


class BackendError(Exception):
    """Raised when backend API computation fails in a controlled way."""
    pass


def _require(value: Any, what: str) -> Any:
    if value is None:
        raise BackendError(f"{what}: no result for the given input")
    return value


def sub_plenum_plan(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Sub-plenum plan as a dict, plus its export text under "text"."""
    try:
        p = PlanInputs(**inputs)
        plan = _require(DS.generate_sub_plenum_plan(p.total_cfm, p.split, p.trunk_fpm, p.branch_fpm), "plan")
    except Exception:
        logging.getLogger(__name__).exception("sub_plenum_plan failed")
        raise
    out = asdict(plan)
    out["text"] = DS.format_plan_text(plan)
    return out


def duct_size(shape: Shape, inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Size one duct. Units must be consistent: CFM, FPM, inches."""
    if shape == "round":
        r = RoundDuctInputs(**inputs)
        res = DS.size_round_duct(r.cfm, r.target_fpm, r.min_dia, r.max_dia, r.even)
        out = asdict(_require(res, "round duct"))
        out["suggestion"] = f'{out["dia"]:g}" round @ ~{out["fpm"]} FPM'
        return out
    elif shape == "rect":
        r = RectDuctInputs(**inputs)
        res = DS.size_rect_duct(r.cfm, r.target_fpm, r.aspect, r.min_w, r.min_h)
        out = asdict(_require(res, "rect duct"))
        out["suggestion"] = f'{out["w"]:g}×{out["h"]:g} @ ~{out["fpm"]} FPM'
        return out
    else:
        raise ValueError("shape must be 'round' or 'rect'")


def returns_guidance(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Return grille sizing plus ceiling supply register options for the same flow."""
    r = ReturnInputs(**inputs)
    ret = _require(DS.return_sizing(r.cfm, r.max_face_vel), "return sizing")
    out = asdict(ret)
    out["supply_registers"] = [asdict(o) for o in DS.supply_register_sizing(r.cfm, r.max_face_vel)]
    return out


def friction(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Friction rate [in.w.c./100 ft]; uses the supply/return split when given."""
    f = FrictionInputs(**inputs)
    if f.supply_drop is not None or f.return_drop is not None:
        fr = D.friction_rate(f.total_esp, f.supply_drop or 0.0, f.return_drop or 0.0, f.eql_ft)
    else:
        fr = DS.friction_rate_quick(f.total_esp, f.eql_ft, f.drops)
    fr = _require(fr, "friction rate")
    return {"friction_rate": fr, "feasible": fr > 0, "unit": "in.w.c./100 ft"}


def equivalent_length(segments: List[Dict[str, Any]]) -> Dict[str, Any]:
    segs = [DS.Segment(s.length_ft, s.type) for s in (SegmentIn(**x) for x in segments)]
    unknown = sorted({s.type for s in segs if s.type and s.type not in CAL.EQL_LIBRARY})
    return {"eql_ft": DS.equivalent_length(segs), "unknown_fittings": unknown}


def saturation(inputs: Dict[str, Any]) -> Dict[str, Any]:
    p = PTInputs(**inputs)
    ref = D.normalize_refrigerant(p.refrigerant)
    return {"refrigerant": ref, "psig": p.psig, "sat_f": _require(D.psig_to_saturation_temp(p.psig, ref), "saturation")}


def diagnose(readings: Dict[str, Any]) -> Dict[str, Any]:
    """Derived metrics, health messages, charge advice and targets from raw readings."""
    try:
        r = SystemReadings(**readings)
    except Exception:
        logging.getLogger(__name__).exception("diagnose: invalid readings")
        raise
    ref = D.normalize_refrigerant(r.refrigerant)
    txv = D.is_txv(r.metering_device)

    def _opt(fn, *args) -> Optional[float]:
        return fn(*args) if all(a is not None for a in args) else None

    delta_t = _opt(D.calc_delta_t, r.return_f, r.supply_f)
    superheat = None
    subcool = None
    if r.suction_psig is not None and r.suction_line_f is not None:
        superheat = D.calc_superheat(r.suction_psig, r.suction_line_f, ref)
    if r.liquid_psig is not None and r.liquid_line_f is not None:
        subcool = D.calc_subcool(r.liquid_psig, r.liquid_line_f, ref)

    targets = D.targets_for(ref, r.metering_device)
    msgs = D.evaluate_cooling_health(delta_t, superheat, subcool, r.metering_device)
    advice = D.suggest_charge_adjust(
        superheat, subcool, r.metering_device,
        target_subcool=targets.target_subcool, target_sh=targets.target_sh,
    )
    airflow = None
    if r.tons is not None:
        airflow = D.airflow_by_tonnage(r.tons)
    elif r.sqft is not None:
        airflow = D.airflow_by_area(r.sqft)
    levels = {}
    for name, kwargs in (("delta_t", {"delta_t": delta_t}), ("superheat", {"superheat": superheat}), ("subcool", {"subcool": subcool})):
        one = D.evaluate_cooling_health(metering_device=r.metering_device, **kwargs)
        levels[name] = one[0].level if one else None
    return {
        "refrigerant": ref,
        "metering_device": "txv" if txv else "fixed",
        "delta_t": delta_t,
        "superheat": superheat,
        "subcool": subcool,
        "evap_sat_f": _opt(D.psig_to_saturation_temp, r.suction_psig, ref),
        "cond_sat_f": _opt(D.psig_to_saturation_temp, r.liquid_psig, ref),
        "messages": [asdict(m) for m in msgs],
        "levels": levels,
        "advice": advice,
        "targets": asdict(targets),
        "airflow": asdict(airflow) if airflow else None,
    }


def charge_advice(inputs: Dict[str, Any]) -> Dict[str, Any]:
    c = ChargeInputs(**inputs)
    return {
        "advice": D.suggest_charge_adjust(c.superheat, c.subcool, c.metering_device, c.target_subcool, c.target_sh),
    }


def airflow(tons: Optional[float] = None, sqft: Optional[float] = None) -> Dict[str, Any]:
    """Airflow range from nominal tonnage, or from floor area when no tonnage is given."""
    if tons is not None:
        return asdict(_require(D.airflow_by_tonnage(tons), "airflow"))
    if sqft is not None:
        return asdict(_require(D.airflow_by_area(sqft), "airflow"))
    raise BackendError("airflow: give tons or sqft")


def pt_curve(refrigerant: str) -> Dict[str, Any]:
    """Tabulated PT points for plotting."""
    ref = D.normalize_refrigerant(refrigerant)
    table = D.PT_TABLES[ref]
    return {"refrigerant": ref, "psig": [p.psig for p in table], "sat_f": [p.sat_f for p in table]}


def takeoff(lines: List[Dict[str, Any]], catalog: Optional[M.Catalog] = None) -> Dict[str, Any]:
    """Material takeoff text and priced summary for [{category, name, qty}, ...]."""
    selection: M.Selection = {}
    for raw in lines:
        ln = MaterialLine(**raw)
        key = M.MaterialKey(ln.category, ln.name)
        selection = M.merge_selections(selection, {key: ln.qty})
    prices = M.price_map_from_catalog(catalog) if catalog is not None else {}
    cost = M.summarize_selection_cost(selection, prices)
    return {
        "text": M.format_selected_for_text(selection),
        "cost_lines": cost.lines,
        "subtotal": cost.subtotal,
        "missing_prices": [str(k) for k in cost.missing_prices],
    }
