# ductsizing.py
# -----------------------------------------------------------------------------
# Sub-plenum and branch sizing helpers for residential / light commercial
# layouts: velocity checks, friction-rate rough-ins and equivalent length.
# -----------------------------------------------------------------------------
# Units: flow in CFM, velocity in FPM, dimensions in inches, areas in ft².
# The module is stateless and deterministic. Invalid or non-finite input
# yields None (single results) or an empty list (list results); nothing here
# raises for bad numbers.
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from collections import abc
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from . import calibration as CAL
from .numeric import all_finite, clamp, fmt_num, is_finite, round_half_up, to_fixed


# -----------------------------------------------------------------------------
# 1) Result types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class RoundDuct:
    """Round duct selection.
    - dia: diameter [in]
    - fpm: actual velocity at that diameter [FPM]
    - area_ft2: cross-section [ft²], 3 decimals
    """

    dia: float
    fpm: int
    area_ft2: float


@dataclass(frozen=True)
class RectDuct:
    """Rectangular duct selection, width w and height h in inches."""

    w: float
    h: float
    fpm: int
    area_ft2: float


@dataclass(frozen=True)
class Segment:
    """One run of the longest path: straight length plus optional fitting tag."""

    length_ft: float
    type: Optional[str] = None


@dataclass(frozen=True)
class GrilleOption:
    w: int
    h: int
    fpm: int
    face_area_ft2: float


@dataclass(frozen=True)
class ReturnSizing:
    area_ft2: float
    grille_sizes: Tuple[GrilleOption, ...]
    note: str


@dataclass(frozen=True)
class DuctPick:
    """Round pick inside a plan; dia/fpm are None when the flow is zero."""

    dia: Optional[float]
    fpm: Optional[int]
    suggestion: str


@dataclass(frozen=True)
class Branch:
    name: str
    cfm: int
    dia: Optional[float]
    fpm: Optional[int]
    suggestion: str


@dataclass(frozen=True)
class SubPlenum:
    name: str
    cfm: int
    trunk: DuctPick
    branches: Tuple[Branch, ...]


@dataclass(frozen=True)
class SubPlenumPlan:
    total_cfm: int
    trunk_fpm: float
    branch_fpm: float
    sub_plenums: Tuple[SubPlenum, ...]
    returns: Optional[ReturnSizing]


# -----------------------------------------------------------------------------
# 2) Areas and velocity
# -----------------------------------------------------------------------------


def area_round(dia_in: float) -> float:
    """
    Round duct area [ft²]:
        A = pi * r^2, r = (d/2)/12
    Args:
        dia_in: diameter [in]
    Returns:
        float: area [ft²]
    """
    r = (dia_in / 2) / 12
    return math.pi * r * r


def area_rect(w_in: float, h_in: float) -> float:
    """Rectangular area [ft²] = (w/12) * (h/12)."""
    return (w_in / 12) * (h_in / 12)


def velocity(cfm: float, area_ft2: float) -> Optional[int]:
    """
    Air velocity [FPM] = cfm / area, rounded to a whole number.
    Args:
        cfm: flow [CFM]
        area_ft2: free area [ft²] (> 0)
    Returns:
        int | None: velocity, None for a non-positive area or non-finite input
    """
    if not all_finite(cfm, area_ft2) or area_ft2 <= 0:
        return None
    return int(to_fixed(cfm / area_ft2, 0))


# -----------------------------------------------------------------------------
# 3) CFM splitting
# -----------------------------------------------------------------------------


def split_cfm(total_cfm: float, ratios_or_count: Union[Sequence[float], int]) -> List[int]:
    """
    Split a total flow by ratios or into N near-equal parts.

    Ratios are normalised by their sum (a zero sum counts as 1) and each part
    is rounded on its own. A count uses floor division and hands the remainder
    to the first parts. Any rounding drift is then added to part 0, so the
    parts always sum to the total. The total is rounded to whole CFM first;
    a whole-valued float count (3.0) is accepted as a count.

    Args:
        total_cfm: total flow [CFM] (> 0)
        ratios_or_count: sequence of ratios or a positive whole-number count
    Returns:
        list[int]: parts; empty when the total or the split is invalid
    """
    if not is_finite(total_cfm):
        return []
    total = round_half_up(total_cfm)
    if total <= 0 or isinstance(ratios_or_count, bool):
        return []
    if isinstance(ratios_or_count, float) and ratios_or_count.is_integer():
        ratios_or_count = int(ratios_or_count)
    parts: List[int] = []
    if isinstance(ratios_or_count, int):
        if ratios_or_count <= 0:
            return []
        base, rem = divmod(total, ratios_or_count)
        parts = [base + (1 if i < rem else 0) for i in range(ratios_or_count)]
    elif isinstance(ratios_or_count, abc.Sequence) and not isinstance(ratios_or_count, str):
        ratios = [r if is_finite(r) else 0 for r in ratios_or_count]
        total_ratio = sum(ratios) or 1
        parts = [round_half_up(r / total_ratio * total) for r in ratios]
    else:
        return []

    # Rounding drift always lands on the first part
    diff = total - sum(parts)
    if diff != 0 and parts:
        parts[0] += diff
    return parts


# -----------------------------------------------------------------------------
# 4) Duct sizing
# -----------------------------------------------------------------------------


def size_round_duct(
    cfm: float,
    target_fpm: float = CAL.TRUNK_FPM,
    min_dia: float = CAL.DUCT_MIN_DIA,
    max_dia: float = CAL.DUCT_MAX_DIA,
    even: bool = True,
) -> Optional[RoundDuct]:
    """
    Round duct selector by target velocity.
        A = Q / V  →  D = sqrt(4 * A * 144 / pi)
    The diameter is rounded (to an even inch by default) and clamped into
    [min_dia, max_dia]; velocity and area are then recomputed from the clamped
    size, so a clamped result reports its true velocity, not target_fpm.
    Args:
        cfm: flow [CFM] (> 0)
        target_fpm: design velocity [FPM] (> 0)
        min_dia, max_dia: size bounds [in]
        even: round to even inches
    Returns:
        RoundDuct | None
    """
    if not is_finite(cfm) or cfm <= 0:
        return None
    if not is_finite(target_fpm) or target_fpm <= 0:
        return None
    area = cfm / target_fpm
    dia = math.sqrt((area * 144 * 4) / math.pi)
    dia = round_half_up(dia / 2) * 2 if even else round_half_up(dia)
    dia = clamp(dia, min_dia, max_dia)

    a_ft2 = area_round(dia)
    return RoundDuct(dia=dia, fpm=velocity(cfm, a_ft2), area_ft2=to_fixed(a_ft2, 3))


def size_rect_duct(
    cfm: float,
    target_fpm: float = CAL.TRUNK_FPM,
    aspect: float = CAL.RECT_ASPECT,
    min_w: float = CAL.RECT_MIN_W,
    min_h: float = CAL.RECT_MIN_H,
) -> Optional[RectDuct]:
    """
    Rectangular duct picker by aspect ratio (W:H).
        (W/12)(H/12) = A, W = aspect * H  →  H = sqrt(A * 144 / aspect)
    Each side is rounded to a whole inch and clamped to its own minimum, which
    may change the realised aspect ratio.
    """
    if not is_finite(cfm) or cfm <= 0:
        return None
    if not all_finite(target_fpm, aspect) or target_fpm <= 0 or aspect < 0:
        return None
    area = cfm / target_fpm
    h = math.sqrt((area * 144) / (aspect or 1))
    w = aspect * h

    h = max(min_h, round_half_up(h))
    w = max(min_w, round_half_up(w))

    a_ft2 = area_rect(w, h)
    return RectDuct(w=w, h=h, fpm=velocity(cfm, a_ft2), area_ft2=to_fixed(a_ft2, 3))


def _suggestion(pick: Optional[RoundDuct]) -> str:
    if pick is None:
        return "n/a"
    return f'{fmt_num(pick.dia)}" round @ ~{fmt_num(pick.fpm)} FPM'


def trunk_suggestion(cfm: float, fpm: float = CAL.TRUNK_FPM) -> str:
    """Friendly trunk pick, e.g. '14" round @ ~748 FPM', or 'n/a'."""
    return _suggestion(size_round_duct(cfm, fpm, CAL.TRUNK_MIN_DIA, CAL.TRUNK_MAX_DIA, True))


def branch_suggestion(cfm: float, fpm: float = CAL.BRANCH_FPM) -> str:
    """Friendly branch pick (6..16 in), or 'n/a'."""
    return _suggestion(size_round_duct(cfm, fpm, CAL.BRANCH_MIN_DIA, CAL.BRANCH_MAX_DIA, True))


# -----------------------------------------------------------------------------
# 5) Friction rate and equivalent length
# -----------------------------------------------------------------------------


def friction_rate_quick(
    total_esp: float = CAL.ESP_DEFAULT,
    eql_ft: float = CAL.EQL_DEFAULT,
    drops: float = CAL.DROPS_DEFAULT,
) -> Optional[float]:
    """
    Quick friction rate [in.w.c./100 ft]:
        FR = (ESP - drops) / EQL * 100
    A negative result means the component drops exceed the available static
    pressure; it is returned as is.
    Args:
        total_esp: available external static pressure [in.w.c.]
        eql_ft: total equivalent length of the longest run [ft] (> 0)
        drops: coil/filter/accessory drops [in.w.c.]
    Returns:
        float | None: friction rate, 3 decimals
    """
    if not all_finite(total_esp, eql_ft, drops) or eql_ft <= 0:
        return None
    avail = total_esp - drops
    return to_fixed((avail / eql_ft) * 100, 3)


def equivalent_length(segments: Sequence[Segment] = ()) -> int:
    """
    Total equivalent length [ft] = sum(length + fitting penalty).
    Unknown or missing fitting types add nothing; a non-finite length counts
    as 0. The total is floored at zero and rounded.
    """
    total = 0.0
    for s in segments:
        length = s.length_ft if is_finite(s.length_ft) else 0
        if not s.type:
            total += length
            continue
        total += length + CAL.EQL_LIBRARY.get(s.type, 0)
    return max(0, round_half_up(total))


# -----------------------------------------------------------------------------
# 6) Returns and registers
# -----------------------------------------------------------------------------


def _rank_grilles(cfm: float, catalog: Sequence[Tuple[int, int]], max_face_vel: float) -> List[GrilleOption]:
    options = []
    for w, h in catalog:
        a = area_rect(w, h)
        options.append(GrilleOption(w=w, h=h, fpm=velocity(cfm, a), face_area_ft2=to_fixed(a, 3)))
    # stable: equal distances keep catalog order
    return sorted(options, key=lambda o: abs(max_face_vel - o.fpm))


def return_sizing(total_cfm: float, max_face_vel: float = CAL.FACE_FPM) -> Optional[ReturnSizing]:
    """
    Return grille guidance by face velocity.
    Args:
        total_cfm: system flow [CFM] (> 0)
        max_face_vel: face velocity ceiling [FPM] (> 0)
    Returns:
        ReturnSizing | None: target face area plus the standard grilles ranked
        by closeness of their face velocity to max_face_vel
    """
    if not is_finite(total_cfm) or total_cfm <= 0:
        return None
    if not is_finite(max_face_vel) or max_face_vel <= 0:
        return None
    area_ft2 = total_cfm / max_face_vel
    return ReturnSizing(
        area_ft2=to_fixed(area_ft2, 3),
        grille_sizes=tuple(_rank_grilles(total_cfm, CAL.RETURN_GRILLES, max_face_vel)),
        note=f"Aim for ≤ {fmt_num(max_face_vel)} FPM across return filter/grille to control noise and drop.",
    )


def supply_register_sizing(cfm: float, max_face_vel: float = CAL.FACE_FPM) -> List[GrilleOption]:
    """Ceiling supply registers ranked by face velocity fit; empty list if invalid."""
    if not all_finite(cfm, max_face_vel) or cfm <= 0:
        return []
    return _rank_grilles(cfm, CAL.SUPPLY_REGISTERS, max_face_vel)


# -----------------------------------------------------------------------------
# 7) Plan generator
# -----------------------------------------------------------------------------


def _pick(cfm: float, fpm: float, lo: int, hi: int) -> DuctPick:
    r = size_round_duct(cfm, fpm, lo, hi, True)
    if r is None:
        return DuctPick(dia=None, fpm=None, suggestion="n/a")
    return DuctPick(dia=r.dia, fpm=r.fpm, suggestion=_suggestion(r))


def generate_sub_plenum_plan(
    total_cfm: float,
    split: Union[Sequence[float], int] = CAL.PLAN_SPLIT,
    trunk_fpm: float = CAL.TRUNK_FPM,
    branch_fpm: float = CAL.BRANCH_FPM,
) -> Optional[SubPlenumPlan]:
    """
    Sub-plenum plan with trunk and branch picks.

    The total is rounded to whole CFM and split across sub-plenums; every
    sub-plenum gets a trunk (8..24 in) and five branches (6..16 in). Return
    guidance is sized once for the whole system at 450 FPM.

    Args:
        total_cfm: system flow [CFM]
        split: ratios (sum ≈ 1) or a number of equal sub-plenums
        trunk_fpm: trunk target velocity [FPM]
        branch_fpm: branch target velocity [FPM]
    Returns:
        SubPlenumPlan | None: None when the rounded total is not positive or
        the split yields no sub-plenums
    """
    if not is_finite(total_cfm):
        return None
    cfm = round_half_up(total_cfm)
    if cfm <= 0:
        return None

    sub_cfms = split_cfm(cfm, split)
    if not sub_cfms:
        return None

    subs = []
    for idx, cfm_sub in enumerate(sub_cfms):
        trunk = _pick(cfm_sub, trunk_fpm, CAL.TRUNK_MIN_DIA, CAL.TRUNK_MAX_DIA)
        branches = []
        for i, q in enumerate(split_cfm(cfm_sub, CAL.BRANCHES_PER_SUB)):
            pick = _pick(q, branch_fpm, CAL.BRANCH_MIN_DIA, CAL.BRANCH_MAX_DIA)
            branches.append(Branch(name=f"B{idx + 1}.{i + 1}", cfm=q, dia=pick.dia, fpm=pick.fpm, suggestion=pick.suggestion))
        subs.append(SubPlenum(name=f"Sub-Plenum {idx + 1}", cfm=cfm_sub, trunk=trunk, branches=tuple(branches)))

    return SubPlenumPlan(
        total_cfm=cfm,
        trunk_fpm=trunk_fpm,
        branch_fpm=branch_fpm,
        sub_plenums=tuple(subs),
        returns=return_sizing(cfm, CAL.PLAN_RETURN_FPM),
    )


PLAN_NOTES = (
    "Notes: keep ESP ≤ 0.50 in.w.c., friction rate ≈ 0.08 in.w.c./100 ft on design run, "
    "balance at sub-plenums, limit flex, and use smooth radius fittings."
)


def format_plan_text(plan: Optional[SubPlenumPlan]) -> str:
    """Plain-text plan block for print/export. The layout is kept byte-stable."""
    if plan is None:
        return "No plan generated."
    lines = [
        f"Total CFM: {fmt_num(plan.total_cfm)} (Trunk target ~{fmt_num(plan.trunk_fpm)} FPM, "
        f"Branch target ~{fmt_num(plan.branch_fpm)} FPM)",
        "",
        "Sub-Plenums:",
    ]
    for sp in plan.sub_plenums:
        lines.append(f"  • {sp.name} — {fmt_num(sp.cfm)} CFM — Trunk: {sp.trunk.suggestion}")
        for b in sp.branches:
            lines.append(f"      - {b.name}: {fmt_num(b.cfm)} CFM → {b.suggestion}")
    if plan.returns is not None:
        lines.append("")
        lines.append(f"Returns: target face area ≈ {fmt_num(plan.returns.area_ft2)} ft²")
        best = ", ".join(f"{g.w}×{g.h} @ ~{fmt_num(g.fpm)} FPM" for g in plan.returns.grille_sizes[:3])
        lines.append(f"  Options: {best}")
        if plan.returns.note:
            lines.append(f"  Note: {plan.returns.note}")
    lines.append("")
    lines.append(PLAN_NOTES)
    return "\n".join(lines)
