from __future__ import annotations

# =========================================
# pdf_utils.py
# Estimator - quote PDF generation helpers
# =========================================
# Renders an Estimate, the selected scope of work and client/project
# metadata into a printable A4 quote using ReportLab.
# =========================================

import re
from datetime import date
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .catalog import Catalog
from .formatting import fmt_eur, vat_label
from .pricing import Estimate, Selection

DEFAULT_DISCLAIMER = (
    "This estimate is non-binding and based on the scope listed above. "
    "Changes in scope will be quoted separately."
)


def _safe(s) -> str:
    if s is None:
        return ""
    return str(s)


def _wrap(text: str, max_chars: int) -> list[str]:
    if len(text) <= max_chars:
        return [text]
    words = text.split()
    lines, cur = [], ""
    for w in words:
        if len(cur) + len(w) + 1 <= max_chars:
            cur = (cur + " " + w).strip()
        else:
            if cur:
                lines.append(cur)
            cur = w
    if cur:
        lines.append(cur)
    return lines


def quote_date(d: Optional[date] = None) -> str:
    """DD.MM.YYYY"""
    return (d or date.today()).strftime("%d.%m.%Y")


def quote_filename(client_name: str) -> str:
    client = (client_name or "").strip() or "Client"
    client = re.sub(r"\s+", "_", client)
    return f"Estimate_{client}.pdf"


def selected_line_items(selection: Selection, catalog: Catalog) -> list[dict]:
    """Rows of {label, qty} for every selected feature, in selection order."""
    rows = []
    for module, features in selection.features.items():
        for feature, qty in features.items():
            if qty <= 0:
                continue
            rows.append({"label": catalog.feature_label(module, feature), "qty": qty})
    return rows


def _line_item_text(row: dict) -> str:
    label = _safe(row.get("label"))
    qty = row.get("qty") or 1
    return f"{label} (× {qty})" if qty > 1 else label


def build_quote_pdf_bytes(
    meta: dict,
    estimate: Estimate,
    items: list[dict],
    tax_rate: float,
    disclaimer: str = DEFAULT_DISCLAIMER,
) -> bytes:
    """
    Returns PDF bytes.
    meta: client_name, project_name, date (datetime.date, optional)
    items: rows from selected_line_items()
    """
    client_name = _safe(meta.get("client_name")).strip() or "Client"
    project_name = _safe(meta.get("project_name")).strip() or "Project"

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Estimate - {project_name}")
    width, height = A4

    margin = 18 * mm
    y = height - margin

    # ---- Header
    c.setFont("Helvetica-Bold", 18)
    c.drawString(margin, y, "Project Estimate")
    c.setFont("Helvetica", 10)
    c.drawRightString(width - margin, y, f"Date: {quote_date(meta.get('date'))}")
    y -= 9 * mm

    c.setFont("Helvetica", 10)
    c.drawString(margin, y, f"Client: {client_name}")
    y -= 5 * mm
    c.drawString(margin, y, f"Project: {project_name}")
    y -= 6 * mm

    c.setLineWidth(0.5)
    c.line(margin, y, width - margin, y)
    y -= 9 * mm

    # ---- Scope of work
    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y, "Scope of Work")
    y -= 7 * mm

    c.setFont("Helvetica", 10)
    if not items:
        c.drawString(margin, y, "(Base package only)")
        y -= 5 * mm
    else:
        for row in items:
            lines = _wrap(_line_item_text(row), 90)
            for i, line in enumerate(lines):
                if y < margin + 45 * mm:
                    c.showPage()
                    y = height - margin
                    c.setFont("Helvetica-Bold", 12)
                    c.drawString(margin, y, "Scope of Work (cont.)")
                    y -= 7 * mm
                    c.setFont("Helvetica", 10)
                prefix = "• " if i == 0 else "  "
                c.drawString(margin, y, prefix + line)
                y -= 5 * mm
            y -= 1 * mm

    # ---- Pricing summary
    y -= 6 * mm
    c.line(margin, y, width - margin, y)
    y -= 8 * mm

    c.setFont("Helvetica", 10)
    c.drawString(margin, y, "Net price")
    c.drawRightString(width - margin, y, fmt_eur(estimate.net_price_eur))
    y -= 6 * mm
    c.drawString(margin, y, vat_label(tax_rate))
    c.drawRightString(width - margin, y, fmt_eur(estimate.tax_amount_eur))
    y -= 8 * mm

    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y, "Total (gross)")
    c.drawRightString(width - margin, y, fmt_eur(estimate.gross_price_eur))

    # ---- Footer disclaimer
    c.setFont("Helvetica-Oblique", 8)
    fy = margin
    for line in reversed(_wrap(_safe(disclaimer), 120)):
        c.drawString(margin, fy, line)
        fy += 4 * mm

    c.showPage()
    c.save()

    buf.seek(0)
    return buf.read()
