# root: tests/test_pdf_utils.py
from datetime import date

from estimator.pdf_utils import build_quote_pdf_bytes, quote_date, quote_filename, selected_line_items
from estimator.pricing import Selection, compute


def test_quote_filename():
    assert quote_filename("Acme  GmbH Berlin") == "Estimate_Acme_GmbH_Berlin.pdf"
    assert quote_filename("") == "Estimate_Client.pdf"


def test_quote_date():
    assert quote_date(date(2024, 3, 7)) == "07.03.2024"


def test_selected_line_items(catalog):
    sel = Selection(features={"Dev": {"SimpleSection": 3, "Mystery": 1}, "Data": {"CSV": 0}})
    assert selected_line_items(sel, catalog) == [
        {"label": "Simple section", "qty": 3},
        {"label": "Mystery", "qty": 1},
    ]


def test_build_quote_pdf_bytes(catalog):
    sel = Selection(
        project_type="NewBuild",
        tax_rate=0.19,
        features={"Dev": {"SimpleSection": 2}, "Content": {"FullServiceFlatFee": 1}},
    )
    pdf = build_quote_pdf_bytes(
        {"client_name": "Acme", "project_name": "Relaunch", "date": date(2024, 1, 2)},
        compute(sel, catalog),
        items=selected_line_items(sel, catalog),
        tax_rate=sel.tax_rate,
    )
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 500


def test_build_quote_pdf_paginates_long_scope(catalog):
    items = [{"label": f"Line item number {i} " + "with a long description " * 6, "qty": i} for i in range(1, 80)]
    pdf = build_quote_pdf_bytes({}, compute(Selection(), catalog), items=items, tax_rate=0)
    assert pdf.startswith(b"%PDF")
    pages = pdf.count(b"/Type /Page") - pdf.count(b"/Type /Pages")
    assert pages >= 2
