import csv
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from fieldbuddy import reports as R
from fieldbuddy.cli import main


def _json(capsys):
    return json.loads(capsys.readouterr().out)


def test_plan_text(capsys):
    assert main(["plan", "--cfm", "1200", "--text"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Total CFM: 1200 (Trunk target ~800 FPM, Branch target ~700 FPM)")
    assert "  • Sub-Plenum 3 — 300 CFM" in out


def test_plan_json_file_with_equal_split(tmp_path):
    path = tmp_path / "plan.json"
    assert main(["plan", "--cfm", "1200", "--split", "3", "--output", str(path)]) == 0
    plan = json.loads(path.read_text(encoding="utf-8"))
    assert [sp["cfm"] for sp in plan["sub_plenums"]] == [400, 400, 400]


def test_plan_csv_has_one_row_per_branch(tmp_path):
    path = tmp_path / "plan.csv"
    assert main(["plan", "--cfm", "1200", "--output", str(path)]) == 0
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["sub_plenum", "trunk", "branch", "cfm", "dia", "fpm", "suggestion"]
    assert len(rows) == 1 + 15
    assert rows[1][:4] == ["Sub-Plenum 1", '10" round @ ~880 FPM', "B1.1", "96"]


def test_plan_txt_file(tmp_path):
    path = tmp_path / "plan.txt"
    assert main(["plan", "--cfm", "1200", "--output", str(path)]) == 0
    assert path.read_text(encoding="utf-8").startswith("Total CFM: 1200")


def test_duct_and_returns(capsys):
    assert main(["duct", "--cfm", "400", "--fpm", "700"]) == 0
    assert _json(capsys)["dia"] == 10
    assert main(["duct", "--cfm", "800", "--shape", "rect"]) == 0
    assert _json(capsys)["suggestion"] == "17×8 @ ~847 FPM"
    assert main(["returns", "--cfm", "1200"]) == 0
    assert _json(capsys)["grille_sizes"][0]["w"] == 16


def test_friction_accepts_decimal_comma(capsys):
    assert main(["friction", "--esp", "0,3", "--drops", "0.5"]) == 0
    out = _json(capsys)
    assert out["friction_rate"] == pytest.approx(-0.133)
    assert out["feasible"] is False


def test_eql_segments(capsys):
    assert main(["eql", "--segment", "elbow-90-smooth:20", "--segment", "10"]) == 0
    assert _json(capsys)["eql_ft"] == 45


def test_pt(capsys):
    assert main(["pt", "--psig", "100", "--refrigerant", "r-410a"]) == 0
    assert _json(capsys)["sat_f"] == 29.5


def test_diagnose_text(capsys):
    argv = ["diagnose", "--metering", "fixed", "--suction-psig", "118", "--suction-line-f", "60", "--text"]
    assert main(argv) == 0
    lines = capsys.readouterr().out.strip().split("\n")
    assert lines[0] == "[ok] Superheat acceptable for fixed orifice (24.6°F)."
    assert lines[1].startswith("Superheat high")


def test_diagnose_from_file_with_override(tmp_path, capsys):
    path = tmp_path / "readings.json"
    path.write_text(json.dumps({"return_f": 75, "supply_f": 50}), encoding="utf-8")
    assert main(["diagnose", "--input", str(path), "--supply-f", "61"]) == 0
    out = _json(capsys)
    assert out["delta_t"] == 14.0
    assert out["levels"]["delta_t"] == "ok"


def test_airflow(capsys):
    assert main(["airflow", "--tons", "3"]) == 0
    assert _json(capsys) == {"nominal": 1200, "low": 1050, "high": 1260}


def test_airflow_by_floor_area(capsys):
    assert main(["airflow", "--sqft", "1500"]) == 0
    assert _json(capsys) == {"nominal": 1200, "low": 1050, "high": 1260}


def test_airflow_needs_tons_or_sqft(capsys):
    with pytest.raises(SystemExit):
        main(["airflow"])
    with pytest.raises(SystemExit):
        main(["airflow", "--tons", "3", "--sqft", "1500"])


def test_takeoff_text(capsys):
    assert main(["takeoff", "--item", "Refrigerant|R-410A 25 lb cylinder=2", "--text"]) == 0
    out = capsys.readouterr().out
    assert "2 × R-410A 25 lb cylinder  —  Refrigerant" in out
    assert "Subtotal: $578.00" in out


def test_reports_lifecycle(tmp_path, capsys):
    store = str(tmp_path / "reports.json")
    readings = tmp_path / "readings.json"
    readings.write_text(json.dumps({"suction_psig": 118, "suction_line_f": 52}), encoding="utf-8")

    assert main(["reports", "--store", store, "add", "--name", "Jane Doe", "--address", "12 Elm St",
                 "--tech", "Sam", "--diagnose", str(readings),
                 "--item", "Electrical|Contactor 1-pole 30A=1"]) == 0
    report_id = capsys.readouterr().out.strip()
    assert report_id.startswith("R")

    assert main(["reports", "--store", store, "list"]) == 0
    assert _json(capsys)["id"] == [report_id]

    assert main(["reports", "--store", store, "show", report_id]) == 0
    shown = capsys.readouterr().out
    assert "Customer: Jane Doe" in shown
    assert "  • Superheat: 16.6 °F" in shown
    assert "  • 1 × Contactor 1-pole 30A — Electrical" in shown

    txt = tmp_path / "r.txt"
    assert main(["reports", "--store", store, "export", report_id, "--output", str(txt)]) == 0
    assert txt.read_text(encoding="utf-8").startswith("Field Buddy Pro — Service Report")

    assert main(["reports", "--store", store, "delete", report_id]) == 0
    with pytest.raises(SystemExit):
        main(["reports", "--store", store, "delete", report_id])


def _seed_store(path, count):
    store = R.ReportStore(path)
    for i in range(count):
        store.add(R.new_report(f"Customer {i}", "1 Main", now=datetime(2025, 7, 4, 9, 0, i, tzinfo=timezone.utc)))
    return store


def test_reports_export_all(tmp_path, capsys):
    store = str(tmp_path / "reports.json")
    _seed_store(store, 3)
    out_dir = tmp_path / "exported"
    assert main(["reports", "--store", store, "export-all", "--dir", str(out_dir), "--format", "txt", "--limit", "2"]) == 0
    paths = capsys.readouterr().out.splitlines()
    assert [Path(p).name.split("_R")[0] for p in paths] == ["Customer_2", "Customer_1"]
    assert sorted(f.name for f in out_dir.iterdir()) == sorted(Path(p).name for p in paths)


def test_reports_export_all_empty_store(tmp_path):
    with pytest.raises(SystemExit):
        main(["reports", "--store", str(tmp_path / "reports.json"), "export-all", "--dir", str(tmp_path)])


def test_reports_clear_needs_confirmation(tmp_path, capsys):
    store = str(tmp_path / "reports.json")
    _seed_store(store, 2)
    with pytest.raises(SystemExit):
        main(["reports", "--store", store, "clear"])
    assert len(R.ReportStore(store)) == 2
    assert main(["reports", "--store", store, "clear", "--yes"]) == 0
    assert capsys.readouterr().out.strip() == "Deleted 2 reports"
    assert len(R.ReportStore(store)) == 0


def test_reports_pdf_export(tmp_path, capsys):
    pytest.importorskip("reportlab")
    store = str(tmp_path / "reports.json")
    assert main(["reports", "--store", store, "add", "--name", "Jane", "--address", "1 Main"]) == 0
    report_id = capsys.readouterr().out.strip()
    pdf = tmp_path / "r.pdf"
    assert main(["reports", "--store", store, "export", report_id, "--output", str(pdf)]) == 0
    assert pdf.read_bytes().startswith(b"%PDF")


@pytest.mark.parametrize("argv", [
    ["plan", "--cfm", "0.2"],
    ["plan", "--cfm", "-5"],
    ["airflow", "--sqft", "0"],
    ["takeoff", "--item", "no separator"],
    ["reports", "--store", "unused.json", "add", "--name", " ", "--address", "x"],
])
def test_errors_exit_with_status_2(argv, capsys, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(argv) == 2
    assert capsys.readouterr().err.startswith("error:")


def test_fail_on_drift_passes_with_shipped_calibration(capsys):
    assert main(["--fail-on-drift", "airflow", "--tons", "1"]) == 0
