import json
from datetime import datetime, timezone

import pytest

from fieldbuddy import reports as R
from fieldbuddy.materials import MaterialKey
from fieldbuddy.schemas import DiagnosticEntry

WHEN = datetime(2025, 7, 4, 14, 5, tzinfo=timezone.utc)


def _report(**kw):
    args = dict(
        tech="Sam",
        complaint="Upstairs not cooling",
        diagnostics=[DiagnosticEntry(label="Superheat", value=16.6, unit="°F")],
        materials={MaterialKey("Electrical", "Run capacitor 45/5 MFD"): 1, MaterialKey("Duct", "Mastic"): 0},
        notes="Replaced capacitor.",
        now=WHEN,
    )
    args.update(kw)
    return R.new_report("Jane Doe", "12 Elm St", **args)


def test_new_report_fields():
    r = _report()
    assert r.id == f"R{int(WHEN.timestamp() * 1000)}"
    assert r.date == WHEN.isoformat()
    assert r.customer.name == "Jane Doe"
    # zero quantities are not carried into the report
    assert [(m.category, m.name, m.qty) for m in r.materials] == [("Electrical", "Run capacitor 45/5 MFD", 1)]


@pytest.mark.parametrize("name,addr", [("", "12 Elm St"), ("Jane", "   "), (None, "x")])
def test_new_report_requires_customer(name, addr):
    with pytest.raises(ValueError, match="required"):
        R.new_report(name, addr)


def test_diagnostics_entries_skip_empty_values():
    entries = R.diagnostics_entries({"Delta T": 18.0, "Subcool": None, "Note": ""}, {"Delta T": "°F"})
    assert [(e.label, e.value, e.unit) for e in entries] == [("Delta T", 18.0, "°F")]


def test_store_roundtrip(tmp_path):
    path = tmp_path / "nested" / "reports.json"
    store = R.ReportStore(path)
    assert len(store) == 0
    a = store.add(_report(now=WHEN))
    b = store.add(_report(now=datetime(2025, 7, 5, tzinfo=timezone.utc)))
    assert [r.id for r in store.list()] == [b.id, a.id]

    reopened = R.ReportStore(path)
    assert [r.id for r in reopened.list()] == [b.id, a.id]
    assert reopened.get(a.id).diagnostics[0].value == pytest.approx(16.6)
    assert reopened.get("R0") is None


def test_store_delete_and_clear(tmp_path):
    store = R.ReportStore(tmp_path / "reports.json")
    r = store.add(_report())
    assert store.delete("missing") is False
    assert store.delete(r.id) is True
    assert len(R.ReportStore(tmp_path / "reports.json")) == 0
    store.add(_report())
    store.clear()
    assert store.list() == []


def test_store_failed_write_leaves_store_unchanged(tmp_path, monkeypatch):
    path = tmp_path / "reports.json"
    store = R.ReportStore(path)
    kept = store.add(_report())

    def _fail(*args):
        raise OSError("disk full")

    monkeypatch.setattr(R.os, "replace", _fail)
    with pytest.raises(OSError, match="disk full"):
        store.add(_report(now=datetime(2025, 7, 5, tzinfo=timezone.utc)))
    with pytest.raises(OSError):
        store.delete(kept.id)
    with pytest.raises(OSError):
        store.clear()
    assert [r.id for r in store.list()] == [kept.id]
    assert [r["id"] for r in json.loads(path.read_text(encoding="utf-8"))] == [kept.id]
    assert not (tmp_path / "reports.json.tmp").exists()


def test_store_corrupt_file_loads_empty(tmp_path, caplog):
    path = tmp_path / "reports.json"
    path.write_text("{not json", encoding="utf-8")
    store = R.ReportStore(path)
    assert store.list() == []
    assert "could not read report store" in caplog.text
    store.add(_report())
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 1


def test_default_store_path_honours_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FIELDBUDDY_HOME", str(tmp_path))
    assert R.default_store_path() == tmp_path / "reports.json"


def test_report_text():
    text = R.format_report_text(_report())
    lines = text.split("\n")
    assert lines[:6] == [
        "Field Buddy Pro — Service Report",
        f"Report ID: {_report().id}",
        "Date: 2025-07-04 14:05",
        "Technician: Sam",
        "Customer: Jane Doe",
        "Address: 12 Elm St",
    ]
    assert "Customer Complaint:" in lines
    assert "  • Superheat: 16.6 °F" in lines
    assert "  • 1 × Run capacitor 45/5 MFD — Electrical" in lines
    assert lines[lines.index("Technician Notes:") + 1] == "Replaced capacitor."


def test_report_text_sections_can_be_left_out():
    text = R.format_report_text(_report(), include_header=False, include_diagnostics=False, include_materials=False)
    assert "Service Report" not in text
    assert "Diagnostics:" not in text
    assert "Materials Selected:" not in text
    assert text.startswith("Customer Complaint:")


def test_safe_file_name():
    assert R.safe_file_name("Jane Doe / 12 Elm") == "Jane_Doe_12_Elm"
    assert R.safe_file_name("  ") == ""


def test_mailto_link():
    link = R.make_mailto_link(to="jane@example.com", subject="Report R1", body="Line 1\nLine 2")
    assert link == "mailto:jane@example.com?subject=Report%20R1&body=Line%201%0ALine%202"
    assert R.make_mailto_link() == "mailto:"


def test_pdf_export():
    pytest.importorskip("reportlab")
    data = R.build_service_pdf(_report(), brand="Cool Air LLC", extra_text="Total CFM: 1200")
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_report_to_dict_is_json_ready():
    d = R.report_to_dict(_report())
    assert json.loads(json.dumps(d))["customer"] == {"name": "Jane Doe", "addr": "12 Elm St"}


def _many(count):
    return [_report(now=datetime(2025, 7, 4, 14, 5, i, tzinfo=timezone.utc)) for i in reversed(range(count))]


def test_report_file_name():
    r = _report()
    assert R.report_file_name(r, "txt") == f"Jane_Doe_{r.id}.txt"
    assert R.report_file_name(r.model_copy(update={"customer": r.customer.model_copy(update={"name": "***"})})) == f"report_{r.id}.pdf"


def test_export_reports_writes_newest_first_up_to_limit(tmp_path):
    reports = _many(3)
    written = R.export_reports(reports, tmp_path / "out", "txt", limit=2)
    assert [p.name for p in written] == [R.report_file_name(r, "txt") for r in reports[:2]]
    assert written[0].read_text(encoding="utf-8").startswith("Field Buddy Pro — Service Report")


def test_export_reports_default_limit(tmp_path):
    written = R.export_reports(_many(30), tmp_path, "txt")
    assert len(written) == R.EXPORT_ALL_LIMIT == 25
    assert len(list(tmp_path.glob("*.txt"))) == 25


def test_export_reports_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="format"):
        R.export_reports(_many(1), tmp_path, "docx")


def test_export_reports_pdf(tmp_path):
    pytest.importorskip("reportlab")
    (path,) = R.export_reports(_many(1), tmp_path, "pdf")
    assert path.suffix == ".pdf"
    assert path.read_bytes().startswith(b"%PDF")
