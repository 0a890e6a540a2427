"""
Service call reports: local JSON store, plain-text and PDF rendering, mail links.

The store is a single JSON document (newest report first). Rendering works on
validated ServiceReport models and formatted strings produced by the
calculators; nothing here computes engineering values.
"""
from __future__ import annotations

import io
import json
import logging
import os
import re
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import ValidationError

from .materials import MaterialKey
from .schemas import Customer, DiagnosticEntry, MaterialLine, ServiceReport

log = logging.getLogger(__name__)

REPORTS_FILE = "reports.json"
EXPORT_ALL_LIMIT = 25


def default_store_path() -> Path:
    """~/.fieldbuddy/reports.json, or $FIELDBUDDY_HOME/reports.json."""
    home = os.environ.get("FIELDBUDDY_HOME")
    base = Path(home) if home else Path.home() / ".fieldbuddy"
    return base / REPORTS_FILE


def new_report(
    customer_name: str,
    address: str,
    *,
    tech: str = "",
    complaint: str = "",
    diagnostics: Iterable[DiagnosticEntry] = (),
    materials: Optional[Mapping[MaterialKey, int]] = None,
    notes: str = "",
    now: Optional[datetime] = None,
) -> ServiceReport:
    """Create a report stamped R<epoch-ms>. Name and address are required."""
    name = (customer_name or "").strip()
    addr = (address or "").strip()
    if not name or not addr:
        raise ValueError("Customer name and address are required")
    now = now or datetime.now(timezone.utc)
    lines = [
        MaterialLine(category=k.category, name=k.name, qty=q)
        for k, q in sorted((materials or {}).items())
        if q > 0
    ]
    return ServiceReport(
        id=f"R{int(now.timestamp() * 1000)}",
        date=now.isoformat(),
        tech=tech,
        customer=Customer(name=name, addr=addr),
        complaint=(complaint or "").strip(),
        diagnostics=list(diagnostics),
        materials=lines,
        notes=(notes or "").strip(),
    )


def diagnostics_entries(values: Mapping[str, Any], units: Optional[Mapping[str, str]] = None) -> List[DiagnosticEntry]:
    """Turn calculator outputs into report lines, skipping empty values."""
    units = units or {}
    return [
        DiagnosticEntry(label=label, value=value, unit=units.get(label))
        for label, value in values.items()
        if value is not None and value != ""
    ]


class ReportStore:
    """Append / delete / list over a local JSON file.

    An unreadable or corrupt file loads as an empty store (with a warning);
    the next write replaces it.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else default_store_path()
        self._reports: List[ServiceReport] = self._load()

    def _load(self) -> List[ServiceReport]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [ServiceReport.model_validate(r) for r in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            log.warning("could not read report store %s (%s); starting empty", self.path, e)
            return []

    def _save(self, reports: List[ServiceReport]) -> None:
        """Write reports to disk, then adopt them; a failed write leaves memory and file as they were."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump([r.model_dump() for r in reports], f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        self._reports = reports
        log.debug("saved %d reports to %s", len(reports), self.path)

    def list(self) -> List[ServiceReport]:
        return list(self._reports)

    def get(self, report_id: str) -> Optional[ServiceReport]:
        return next((r for r in self._reports if r.id == report_id), None)

    def add(self, report: ServiceReport) -> ServiceReport:
        self._save([report] + self._reports)
        log.info("report %s saved for %s", report.id, report.customer.name)
        return report

    def delete(self, report_id: str) -> bool:
        kept = [r for r in self._reports if r.id != report_id]
        if len(kept) == len(self._reports):
            return False
        self._save(kept)
        return True

    def clear(self) -> None:
        self._save([])
        log.info("report store %s cleared", self.path)

    def __len__(self) -> int:
        return len(self._reports)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def safe_file_name(s: str = "") -> str:
    return re.sub(r"[^a-z0-9._-]+", "_", str(s).strip(), flags=re.IGNORECASE).strip("_")


def _fmt_date(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return iso


def _wrap(text: str, width: int = 100) -> List[str]:
    out: List[str] = []
    for para in (text or "").splitlines():
        out.extend(textwrap.wrap(para, width) if para.strip() else [""])
    return out


def _diag_line(d: DiagnosticEntry) -> str:
    value = "" if d.value is None else d.value
    unit = f" {d.unit}" if d.unit else ""
    return f"{d.label}: {value}{unit}"


def _material_line(m: MaterialLine) -> str:
    return f"{m.qty} × {m.name} — {m.category}"


def format_report_text(
    report: ServiceReport,
    include_header: bool = True,
    include_diagnostics: bool = True,
    include_materials: bool = True,
) -> str:
    lines: List[str] = []
    if include_header:
        lines += [
            "Field Buddy Pro — Service Report",
            f"Report ID: {report.id}",
            f"Date: {_fmt_date(report.date)}",
            f"Technician: {report.tech}",
            f"Customer: {report.customer.name}",
            f"Address: {report.customer.addr}",
            "",
        ]
    if report.complaint:
        lines.append("Customer Complaint:")
        lines += _wrap(report.complaint)
        lines.append("")
    if include_diagnostics and report.diagnostics:
        lines.append("Diagnostics:")
        lines += [f"  • {_diag_line(d)}" for d in report.diagnostics]
        lines.append("")
    if include_materials and report.materials:
        lines.append("Materials Selected:")
        lines += [f"  • {_material_line(m)}" for m in sorted(report.materials, key=lambda m: (m.category, m.name))]
        lines.append("")
    if report.notes:
        lines.append("Technician Notes:")
        lines += _wrap(report.notes)
        lines.append("")
    return "\n".join(lines)


def make_mailto_link(to: str = "", cc: str = "", bcc: str = "", subject: str = "", body: str = "") -> str:
    params = [(k, v) for k, v in (("cc", cc), ("bcc", bcc), ("subject", subject), ("body", body)) if v]
    query = "&".join(f"{k}={quote(v, safe='')}" for k, v in params)
    return f"mailto:{quote(to, safe='@')}" + (f"?{query}" if query else "")


def build_service_pdf(
    report: ServiceReport,
    *,
    logo_text: str = "Field Buddy Pro",
    brand: str = "",
    include_diagnostics: bool = True,
    include_materials: bool = True,
    extra_text: Optional[str] = None,
) -> bytes:
    """Render a report to PDF bytes using reportlab.

    extra_text (for example a formatted duct plan) is appended verbatim in a
    monospaced block.
    """
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import letter
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Paragraph, Preformatted, SimpleDocTemplate, Spacer, Table, TableStyle
    from xml.sax.saxutils import escape

    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=letter,
                            topMargin=0.75*inch, bottomMargin=0.75*inch,
                            leftMargin=0.75*inch, rightMargin=0.75*inch,
                            title=f"Service Report {report.id}")
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("FBTitle", parent=styles["Title"], fontSize=18, spaceAfter=4,
                                 textColor=colors.HexColor("#1E3A5F"))
    h2_style = ParagraphStyle("FBH2", parent=styles["Heading2"], fontSize=12, spaceBefore=12, spaceAfter=6)
    normal = styles["Normal"]
    small = ParagraphStyle("FBSmall", parent=normal, fontSize=8, textColor=colors.gray)
    mono = ParagraphStyle("FBMono", parent=normal, fontName="Courier", fontSize=8, leading=10)

    story: List[Any] = [Paragraph(escape(logo_text), title_style)]
    if brand:
        story.append(Paragraph(escape(brand), small))
    story.append(Spacer(1, 10))

    meta = [
        ["Report ID", report.id],
        ["Date", _fmt_date(report.date)],
        ["Technician", report.tech],
        ["Customer", report.customer.name],
        ["Address", report.customer.addr],
    ]
    t = Table(meta, colWidths=[1.4*inch, 5.6*inch])
    t.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]))
    story.append(t)

    if report.complaint:
        story.append(Paragraph("Customer Complaint", h2_style))
        story.append(Paragraph(escape(report.complaint), normal))
    if include_diagnostics and report.diagnostics:
        story.append(Paragraph("Diagnostics", h2_style))
        for d in report.diagnostics:
            story.append(Paragraph("• " + escape(_diag_line(d)), normal))
    if include_materials and report.materials:
        story.append(Paragraph("Materials Selected", h2_style))
        for m in sorted(report.materials, key=lambda m: (m.category, m.name)):
            story.append(Paragraph("• " + escape(_material_line(m)), normal))
    if report.notes:
        story.append(Paragraph("Technician Notes", h2_style))
        story.append(Paragraph(escape(report.notes), normal))
    if extra_text:
        story.append(Spacer(1, 8))
        story.append(Preformatted(extra_text, mono))

    story.append(Spacer(1, 16))
    story.append(Paragraph("Generated by Field Buddy Pro", small))
    doc.build(story)
    buf.seek(0)
    return buf.read()


def report_to_dict(report: ServiceReport) -> Dict[str, Any]:
    return report.model_dump()


def report_file_name(report: ServiceReport, ext: str = "pdf") -> str:
    """'<customer>_<id>.<ext>', with 'report' standing in for an unusable name."""
    return f"{safe_file_name(report.customer.name) or 'report'}_{report.id}.{ext}"


def export_reports(
    reports: Iterable[ServiceReport],
    directory: Union[str, Path],
    fmt: str = "pdf",
    *,
    limit: int = EXPORT_ALL_LIMIT,
    brand: str = "",
) -> List[Path]:
    """Write up to `limit` reports (newest first) into directory as PDF or TXT files."""
    if fmt not in ("pdf", "txt"):
        raise ValueError("format must be 'pdf' or 'txt'")
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for report in list(reports)[:limit]:
        path = out_dir / report_file_name(report, fmt)
        if fmt == "pdf":
            path.write_bytes(build_service_pdf(report, brand=brand))
        else:
            path.write_text(format_report_text(report) + "\n", encoding="utf-8")
        written.append(path)
    log.info("exported %d reports to %s", len(written), out_dir)
    return written
