"""
Field engine: duct sizing and refrigerant diagnostics under one namespace.

    from fieldbuddy.engine import FieldEngine
    FieldEngine.duct.split_cfm(1200, 3)
    FieldEngine.diagnostics.calc_superheat(118, 52, "R410A")

Every name is also re-exported flat at module level.
"""
from __future__ import annotations

from . import diagnostics, ductsizing
from .diagnostics import (
    AirflowRange, HealthMessage, PTPoint, Targets,
    airflow_by_area, airflow_by_tonnage, calc_delta_t, calc_subcool, calc_superheat,
    evaluate_cooling_health, friction_rate, psig_to_saturation_temp,
    suggest_charge_adjust, targets_for,
)
from .ductsizing import (
    Branch, DuctPick, GrilleOption, RectDuct, ReturnSizing, RoundDuct, Segment,
    SubPlenum, SubPlenumPlan,
    area_rect, area_round, branch_suggestion, equivalent_length, format_plan_text,
    friction_rate_quick, generate_sub_plenum_plan, return_sizing, size_rect_duct,
    size_round_duct, split_cfm, supply_register_sizing, trunk_suggestion, velocity,
)


class FieldEngine:
    duct = ductsizing
    diagnostics = diagnostics


__all__ = [
    "FieldEngine",
    # duct sizing
    "Branch", "DuctPick", "GrilleOption", "RectDuct", "ReturnSizing", "RoundDuct",
    "Segment", "SubPlenum", "SubPlenumPlan",
    "area_rect", "area_round", "branch_suggestion", "equivalent_length",
    "format_plan_text", "friction_rate_quick", "generate_sub_plenum_plan",
    "return_sizing", "size_rect_duct", "size_round_duct", "split_cfm",
    "supply_register_sizing", "trunk_suggestion", "velocity",
    # diagnostics
    "AirflowRange", "HealthMessage", "PTPoint", "Targets",
    "airflow_by_area", "airflow_by_tonnage", "calc_delta_t", "calc_subcool", "calc_superheat",
    "evaluate_cooling_health", "friction_rate", "psig_to_saturation_temp",
    "suggest_charge_adjust", "targets_for",
]
