"""
Field Buddy command line (no GUI).

Usage examples:
  fieldbuddy plan --cfm 1200 --split 0.4,0.35,0.25 --text
  fieldbuddy duct --cfm 400 --fpm 700
  fieldbuddy diagnose --refrigerant R410A --metering txv \\
      --return-f 75 --supply-f 57 --suction-psig 118 --suction-line-f 52
  fieldbuddy reports list

Commands:
  - plan: sub-plenum plan (JSON, CSV branch table or plain text)
  - duct / returns / friction / eql: quick duct design helpers
  - pt / diagnose / airflow: refrigerant side checks
  - takeoff: material takeoff with catalog pricing
  - reports: list / show / add / delete / export / export-all / clear saved service reports
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from typing import Any, Dict, List

from pydantic import ValidationError

from . import api
from . import calibration as CAL
from . import reports as R
from .anchors import ANCHORS
from .materials import MaterialKey
from .schemas import ServiceReport
from .io import (
    load_catalog, parse_metering_device, parse_number, parse_optional_number,
    parse_refrigerant, parse_segment, parse_split, read_json,
)

log = logging.getLogger(__name__)


def _fail_on_drift() -> None:
    guarded = [
        "TRUNK_FPM", "BRANCH_FPM", "FACE_FPM", "PLAN_RETURN_FPM", "CFM_PER_TON", "CFM_PER_SQFT",
        "AIRFLOW_LOW_FACTOR", "AIRFLOW_HIGH_FACTOR", "CHARGE_SUBCOOL_TARGET", "CHARGE_SH_TARGET",
    ]
    mismatches: List[str] = []
    for k in guarded:
        if float(ANCHORS[k]) != float(getattr(CAL, k)):
            mismatches.append(f"{k}: anchors={ANCHORS[k]!r} vs calibration={getattr(CAL, k)!r}")
    if mismatches:
        raise SystemExit("Calibration drift detected (anchors vs runtime):\n" + "\n".join(" - " + m for m in mismatches))


def _write_output(obj: Any, path: str | None, text: str | None = None) -> None:
    """JSON to stdout, or to a .json / .csv / .txt file."""
    if not path:
        if text is not None:
            sys.stdout.write(text + "\n")
            return
        json.dump(obj, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
    elif ext == ".csv":
        # Flatten dict-of-scalars or dict-of-lists
        if not isinstance(obj, dict):
            raise SystemExit("CSV output needs a table-shaped result")
        keys = list(obj.keys())
        n = max([len(v) for v in obj.values() if isinstance(v, list)] or [1])
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(keys)
            for i in range(n):
                row = []
                for k in keys:
                    v = obj[k]
                    if isinstance(v, list):
                        row.append(v[i] if i < len(v) else "")
                    else:
                        row.append(v if i == 0 else "")
                w.writerow(row)
    elif ext == ".txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(text if text is not None else json.dumps(obj, ensure_ascii=False, indent=2))
            f.write("\n")
    else:
        raise SystemExit(f"Unsupported output extension: {ext} (use .json, .csv or .txt)")


def _plan_table(plan: Dict[str, Any]) -> Dict[str, List[Any]]:
    """One CSV row per branch, with the owning sub-plenum and its trunk."""
    table: Dict[str, List[Any]] = {k: [] for k in ("sub_plenum", "trunk", "branch", "cfm", "dia", "fpm", "suggestion")}
    for sp in plan["sub_plenums"]:
        for b in sp["branches"]:
            table["sub_plenum"].append(sp["name"])
            table["trunk"].append(sp["trunk"]["suggestion"])
            table["branch"].append(b["name"])
            table["cfm"].append(b["cfm"])
            table["dia"].append(b["dia"])
            table["fpm"].append(b["fpm"])
            table["suggestion"].append(b["suggestion"])
    return table


def cmd_plan(args: argparse.Namespace) -> int:
    out = api.sub_plenum_plan({
        "total_cfm": args.cfm,
        "split": args.split,
        "trunk_fpm": args.trunk_fpm,
        "branch_fpm": args.branch_fpm,
    })
    if args.output and args.output.lower().endswith(".csv"):
        _write_output(_plan_table(out), args.output)
    else:
        _write_output(out, args.output, out["text"] if (args.text or (args.output or "").lower().endswith(".txt")) else None)
    return 0


def cmd_duct(args: argparse.Namespace) -> int:
    if args.shape == "round":
        data = {"cfm": args.cfm, "target_fpm": args.fpm, "min_dia": args.min_dia, "max_dia": args.max_dia, "even": not args.any_size}
    else:
        data = {"cfm": args.cfm, "target_fpm": args.fpm, "aspect": args.aspect}
    _write_output(api.duct_size(args.shape, data), args.output)
    return 0


def cmd_returns(args: argparse.Namespace) -> int:
    out = api.returns_guidance({"cfm": args.cfm, "max_face_vel": args.face_fpm})
    _write_output(out, args.output)
    return 0


def cmd_friction(args: argparse.Namespace) -> int:
    data: Dict[str, Any] = {"total_esp": args.esp, "eql_ft": args.eql, "drops": args.drops}
    if args.supply_drop is not None:
        data["supply_drop"] = args.supply_drop
    if args.return_drop is not None:
        data["return_drop"] = args.return_drop
    _write_output(api.friction(data), args.output)
    return 0


def cmd_eql(args: argparse.Namespace) -> int:
    segments: List[Dict[str, Any]] = read_json(args.input) if args.input else []
    segments += [parse_segment(s) for s in args.segment or []]
    _write_output(api.equivalent_length(segments), args.output)
    return 0


def cmd_pt(args: argparse.Namespace) -> int:
    _write_output(api.saturation({"psig": args.psig, "refrigerant": args.refrigerant}), args.output)
    return 0


def cmd_diagnose(args: argparse.Namespace) -> int:
    data: Dict[str, Any] = read_json(args.input) if args.input else {}
    flags = {
        "refrigerant": args.refrigerant,
        "metering_device": args.metering,
        "return_f": args.return_f,
        "supply_f": args.supply_f,
        "suction_psig": args.suction_psig,
        "suction_line_f": args.suction_line_f,
        "liquid_psig": args.liquid_psig,
        "liquid_line_f": args.liquid_line_f,
        "tons": args.tons,
        "sqft": args.sqft,
    }
    data.update({k: v for k, v in flags.items() if v is not None})
    out = api.diagnose(data)
    text = None
    if args.text:
        text = "\n".join([f"[{m['level']}] {m['message']}" for m in out["messages"]] + [out["advice"]])
    _write_output(out, args.output, text)
    return 0


def cmd_airflow(args: argparse.Namespace) -> int:
    _write_output(api.airflow(tons=args.tons, sqft=args.sqft), args.output)
    return 0


def _parse_item(s: str) -> Dict[str, Any]:
    """'Category|Item name=qty' (qty defaults to 1)."""
    head, sep, qty = s.rpartition("=")
    if not sep:
        head, qty = s, "1"
    category, sep, name = head.partition("|")
    if not sep:
        raise ValueError(f"Invalid item '{s}' (expected 'Category|Item name=qty')")
    return {"category": category.strip(), "name": name.strip(), "qty": int(parse_number(qty))}


def cmd_takeoff(args: argparse.Namespace) -> int:
    lines: List[Dict[str, Any]] = read_json(args.input) if args.input else []
    lines += [_parse_item(s) for s in args.item or []]
    catalog = None if args.no_prices else load_catalog(args.catalog)
    out = api.takeoff(lines, catalog)
    text = None
    if args.text:
        text = out["text"]
        if out["cost_lines"]:
            text += "\n\n" + "\n".join(out["cost_lines"]) + f"\nSubtotal: ${out['subtotal']:.2f}"
    _write_output(out, args.output, text)
    return 0


# --- reports -----------------------------------------------------------------


def _get_report(store: R.ReportStore, report_id: str) -> ServiceReport:
    report = store.get(report_id)
    if report is None:
        raise SystemExit(f"No report with id {report_id!r}")
    return report


def cmd_reports_list(args: argparse.Namespace) -> int:
    store = R.ReportStore(args.store)
    rows = {"id": [], "date": [], "customer": [], "address": [], "tech": []}
    for r in store.list():
        rows["id"].append(r.id)
        rows["date"].append(r.date)
        rows["customer"].append(r.customer.name)
        rows["address"].append(r.customer.addr)
        rows["tech"].append(r.tech)
    _write_output(rows, args.output)
    return 0


def cmd_reports_show(args: argparse.Namespace) -> int:
    report = _get_report(R.ReportStore(args.store), args.id)
    text = R.format_report_text(report, include_diagnostics=not args.no_diagnostics, include_materials=not args.no_materials)
    sys.stdout.write(text + "\n")
    return 0


def cmd_reports_add(args: argparse.Namespace) -> int:
    store = R.ReportStore(args.store)
    diagnostics = []
    if args.diagnose:
        out = api.diagnose(read_json(args.diagnose))
        diagnostics = R.diagnostics_entries(
            {"Delta T": out["delta_t"], "Superheat": out["superheat"], "Subcool": out["subcool"]},
            {"Delta T": "°F", "Superheat": "°F", "Subcool": "°F"},
        )
    materials = {}
    for s in args.item or []:
        item = _parse_item(s)
        materials[MaterialKey(item["category"], item["name"])] = item["qty"]
    report = R.new_report(
        args.name, args.address,
        tech=args.tech, complaint=args.complaint, diagnostics=diagnostics,
        materials=materials, notes=args.notes,
    )
    store.add(report)
    sys.stdout.write(report.id + "\n")
    return 0


def cmd_reports_delete(args: argparse.Namespace) -> int:
    if not R.ReportStore(args.store).delete(args.id):
        raise SystemExit(f"No report with id {args.id!r}")
    return 0


def cmd_reports_export(args: argparse.Namespace) -> int:
    report = _get_report(R.ReportStore(args.store), args.id)
    path = args.output or R.report_file_name(report, "pdf")
    if path.lower().endswith(".pdf"):
        with open(path, "wb") as f:
            f.write(R.build_service_pdf(report, brand=args.brand))
    else:
        _write_output(R.report_to_dict(report), path, R.format_report_text(report))
    log.info("report %s exported to %s", report.id, path)
    sys.stdout.write(path + "\n")
    return 0


def cmd_reports_export_all(args: argparse.Namespace) -> int:
    store = R.ReportStore(args.store)
    if not len(store):
        raise SystemExit("No reports to export")
    for path in R.export_reports(store.list(), args.dir, args.format, limit=args.limit, brand=args.brand):
        sys.stdout.write(f"{path}\n")
    return 0


def cmd_reports_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        raise SystemExit("Refusing to delete all reports without --yes")
    store = R.ReportStore(args.store)
    count = len(store)
    store.clear()
    sys.stdout.write(f"Deleted {count} reports\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fieldbuddy", description="HVAC field calculations (no GUI)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    p.add_argument("--fail-on-drift", action="store_true", help="Fail if calibration differs from anchors")
    sub = p.add_subparsers(dest="cmd", required=True)

    def _out(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--output", required=False, help="Output file (.json, .csv or .txt)")

    sp = sub.add_parser("plan", help="Sub-plenum / trunk / branch plan")
    sp.add_argument("--cfm", required=True, type=parse_number, help="Total system CFM")
    sp.add_argument("--split", type=parse_split, default=list(CAL.PLAN_SPLIT),
                    help="Sub-plenum count ('3') or ratios ('0.4,0.35,0.25')")
    sp.add_argument("--trunk-fpm", type=parse_number, default=CAL.TRUNK_FPM)
    sp.add_argument("--branch-fpm", type=parse_number, default=CAL.BRANCH_FPM)
    sp.add_argument("--text", action="store_true", help="Print the plan text instead of JSON")
    _out(sp)
    sp.set_defaults(func=cmd_plan)

    sp = sub.add_parser("duct", help="Size one round or rectangular duct")
    sp.add_argument("--cfm", required=True, type=parse_number)
    sp.add_argument("--shape", choices=["round", "rect"], default="round")
    sp.add_argument("--fpm", type=parse_number, default=CAL.TRUNK_FPM, help="Target velocity [FPM]")
    sp.add_argument("--min-dia", type=parse_number, default=CAL.DUCT_MIN_DIA)
    sp.add_argument("--max-dia", type=parse_number, default=CAL.DUCT_MAX_DIA)
    sp.add_argument("--any-size", action="store_true", help="Allow odd diameters")
    sp.add_argument("--aspect", type=parse_number, default=CAL.RECT_ASPECT, help="Rect W:H ratio")
    _out(sp)
    sp.set_defaults(func=cmd_duct)

    sp = sub.add_parser("returns", help="Return grille and supply register options")
    sp.add_argument("--cfm", required=True, type=parse_number)
    sp.add_argument("--face-fpm", type=parse_number, default=CAL.FACE_FPM)
    _out(sp)
    sp.set_defaults(func=cmd_returns)

    sp = sub.add_parser("friction", help="Available friction rate [in.w.c./100 ft]")
    sp.add_argument("--esp", type=parse_number, default=CAL.ESP_DEFAULT, help="Total external static [in.w.c.]")
    sp.add_argument("--eql", type=parse_number, default=CAL.EQL_DEFAULT, help="Total equivalent length [ft]")
    sp.add_argument("--drops", type=parse_number, default=CAL.DROPS_DEFAULT, help="Component drops [in.w.c.]")
    sp.add_argument("--supply-drop", type=parse_optional_number)
    sp.add_argument("--return-drop", type=parse_optional_number)
    _out(sp)
    sp.set_defaults(func=cmd_friction)

    sp = sub.add_parser("eql", help="Total equivalent length of a run")
    sp.add_argument("--input", help="JSON list of {length_ft, type}")
    sp.add_argument("--segment", action="append", help="'fitting:length' or 'length' (repeatable)")
    _out(sp)
    sp.set_defaults(func=cmd_eql)

    sp = sub.add_parser("pt", help="Saturation temperature from gauge pressure")
    sp.add_argument("--psig", required=True, type=parse_number)
    sp.add_argument("--refrigerant", type=parse_refrigerant, default=CAL.DEFAULT_REFRIGERANT)
    _out(sp)
    sp.set_defaults(func=cmd_pt)

    sp = sub.add_parser("diagnose", help="Cooling health check from readings")
    sp.add_argument("--input", help="JSON readings file (flags override)")
    sp.add_argument("--refrigerant", type=parse_refrigerant)
    sp.add_argument("--metering", type=parse_metering_device, help="txv or fixed")
    sp.add_argument("--return-f", type=parse_optional_number)
    sp.add_argument("--supply-f", type=parse_optional_number)
    sp.add_argument("--suction-psig", type=parse_optional_number)
    sp.add_argument("--suction-line-f", type=parse_optional_number)
    sp.add_argument("--liquid-psig", type=parse_optional_number)
    sp.add_argument("--liquid-line-f", type=parse_optional_number)
    sp.add_argument("--tons", type=parse_optional_number)
    sp.add_argument("--sqft", type=parse_optional_number, help="Conditioned floor area, used when --tons is absent")
    sp.add_argument("--text", action="store_true", help="Print messages and advice only")
    _out(sp)
    sp.set_defaults(func=cmd_diagnose)

    sp = sub.add_parser("airflow", help="Nominal airflow range by tonnage or floor area")
    grp = sp.add_mutually_exclusive_group(required=True)
    grp.add_argument("--tons", type=parse_number)
    grp.add_argument("--sqft", type=parse_number, help="Conditioned floor area [ft²]")
    _out(sp)
    sp.set_defaults(func=cmd_airflow)

    sp = sub.add_parser("takeoff", help="Material takeoff with pricing")
    sp.add_argument("--input", help="JSON list of {category, name, qty}")
    sp.add_argument("--item", action="append", help="'Category|Item name=qty' (repeatable)")
    sp.add_argument("--catalog", help="Catalog JSON (defaults to the bundled catalog)")
    sp.add_argument("--no-prices", action="store_true")
    sp.add_argument("--text", action="store_true")
    _out(sp)
    sp.set_defaults(func=cmd_takeoff)

    rp = sub.add_parser("reports", help="Saved service reports")
    rp.add_argument("--store", help="Report store file (default ~/.fieldbuddy/reports.json)")
    rsub = rp.add_subparsers(dest="reports_cmd", required=True)

    sp = rsub.add_parser("list")
    _out(sp)
    sp.set_defaults(func=cmd_reports_list)

    sp = rsub.add_parser("show")
    sp.add_argument("id")
    sp.add_argument("--no-diagnostics", action="store_true")
    sp.add_argument("--no-materials", action="store_true")
    sp.set_defaults(func=cmd_reports_show)

    sp = rsub.add_parser("add")
    sp.add_argument("--name", required=True, help="Customer name")
    sp.add_argument("--address", required=True)
    sp.add_argument("--tech", default="")
    sp.add_argument("--complaint", default="")
    sp.add_argument("--notes", default="")
    sp.add_argument("--diagnose", help="JSON readings file; derived values go into the report")
    sp.add_argument("--item", action="append", help="'Category|Item name=qty' (repeatable)")
    sp.set_defaults(func=cmd_reports_add)

    sp = rsub.add_parser("delete")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_reports_delete)

    sp = rsub.add_parser("export")
    sp.add_argument("id")
    sp.add_argument("--output", help="Output file (.pdf, .txt or .json)")
    sp.add_argument("--brand", default="")
    sp.set_defaults(func=cmd_reports_export)

    sp = rsub.add_parser("export-all", help=f"Export the newest {R.EXPORT_ALL_LIMIT} reports into a directory")
    sp.add_argument("--dir", default=".", help="Output directory (created if missing)")
    sp.add_argument("--format", choices=["pdf", "txt"], default="pdf")
    sp.add_argument("--limit", type=int, default=R.EXPORT_ALL_LIMIT)
    sp.add_argument("--brand", default="")
    sp.set_defaults(func=cmd_reports_export_all)

    sp = rsub.add_parser("clear", help="Delete every saved report")
    sp.add_argument("--yes", action="store_true", help="Confirm deletion")
    sp.set_defaults(func=cmd_reports_clear)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    if args.fail_on_drift:
        _fail_on_drift()
    try:
        return args.func(args)
    except (api.BackendError, ValidationError, ValueError) as e:
        log.debug("command failed", exc_info=True)
        sys.stderr.write(f"error: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
