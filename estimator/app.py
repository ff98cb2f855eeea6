import os
from datetime import date
from io import BytesIO
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, render_template, request, send_file

from .catalog import DEFAULT_CATALOG, load_catalog_file
from .form import parse_hourly_rate, parse_tax_rate, selection_from_form, selection_from_json
from .formatting import estimate_display, fmt_eur, fmt_hours, vat_percent
from .pdf_utils import DEFAULT_DISCLAIMER, build_quote_pdf_bytes, quote_filename, selected_line_items
from .pricing import Selection, compute

load_dotenv()

BASE_DIR = Path(__file__).parent.resolve()

# --- Flask app ---------------------------------------------------------------
app = Flask(
    __name__,
    template_folder=str(BASE_DIR / "templates"),
)
app.secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")


def _cfg(key: str, default=None):
    # Prefer Flask app.config, fall back to environment
    if key in app.config:
        return app.config.get(key, default)
    return os.getenv(key, default)


# --- Catalog -----------------------------------------------------------------
_catalog_path = os.getenv("ESTIMATOR_CATALOG_PATH")
app.config["CATALOG"] = load_catalog_file(_catalog_path) if _catalog_path else DEFAULT_CATALOG


def _configure_defaults():
    # form defaults go through the same clamps as submitted values
    app.config["DEFAULT_VAT_RATE"] = parse_tax_rate(os.getenv("DEFAULT_VAT_RATE", "0.19"))
    app.config["DEFAULT_HOURLY_RATE"] = parse_hourly_rate(os.getenv("DEFAULT_HOURLY_RATE", "75"))
    app.config["QUOTE_DISCLAIMER"] = os.getenv("QUOTE_DISCLAIMER", DEFAULT_DISCLAIMER)


_configure_defaults()


def _catalog():
    return current_app.config["CATALOG"]


def _selection_from_request():
    """Returns (selection, error_response)."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            current_app.logger.warning("Rejected estimate request with invalid JSON body")
            return None, (jsonify({"ok": False, "error": "Body must be a JSON object"}), 400)
        return selection_from_json(data, _catalog()), None
    return selection_from_form(request.form, _catalog()), None


# --- Filters -----------------------------------------------------------------
@app.template_filter("eur")
def eur_filter(v):
    try:
        return fmt_eur(float(v))
    except (TypeError, ValueError):
        return v


@app.template_filter("hours")
def hours_filter(v):
    try:
        return fmt_hours(float(v))
    except (TypeError, ValueError):
        return v


# --- Form --------------------------------------------------------------------
@app.get("/")
def index():
    catalog = _catalog()
    project_types = list(catalog.project_types)
    selection = Selection(
        project_type=project_types[0] if project_types else "",
        hourly_rate=_cfg("DEFAULT_HOURLY_RATE"),
        tax_rate=_cfg("DEFAULT_VAT_RATE"),
    )
    estimate = compute(selection, catalog)
    return render_template(
        "estimator.html",
        catalog=catalog,
        selection=selection,
        estimate=estimate,
        display=estimate_display(estimate, selection.tax_rate),
        vat_pct=vat_percent(selection.tax_rate),
    )


@app.get("/catalog")
def catalog_json():
    return jsonify(_catalog().to_dict())


# --- Estimate ----------------------------------------------------------------
@app.post("/estimate")
def estimate():
    """
    POST /estimate
    Form data or JSON: project_type, design, risk_buffer, hourly_rate,
    vat_rate, features. Returns raw numbers plus display strings.
    """
    selection, error = _selection_from_request()
    if error:
        return error

    result = compute(selection, _catalog())
    return jsonify({
        "ok": True,
        "result": result.to_dict(),
        "display": estimate_display(result, selection.tax_rate),
        "taxRate": selection.tax_rate,
    })


@app.post("/estimate/pdf")
def estimate_pdf():
    selection, error = _selection_from_request()
    if error:
        return error

    source = request.get_json(silent=True) if request.is_json else request.form
    meta = {
        "client_name": (source.get("client_name") or "").strip() or "Client",
        "project_name": (source.get("project_name") or "").strip() or "Project",
        "date": date.today(),
    }

    catalog = _catalog()
    result = compute(selection, catalog)
    items = selected_line_items(selection, catalog)

    try:
        pdf_bytes = build_quote_pdf_bytes(
            meta,
            result,
            items=items,
            tax_rate=selection.tax_rate,
            disclaimer=_cfg("QUOTE_DISCLAIMER", DEFAULT_DISCLAIMER),
        )
    except Exception:
        current_app.logger.exception("Quote PDF generation failed")
        return jsonify({"ok": False, "error": "PDF generation failed"}), 500

    filename = quote_filename(meta["client_name"])
    current_app.logger.info(
        "Exported quote %s (%s, gross %s)", filename, selection.project_type, fmt_eur(result.gross_price_eur)
    )
    return send_file(
        BytesIO(pdf_bytes),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )


# --- Dev entry ---------------------------------------------------------------
if __name__ == "__main__":
    # flask --app estimator.app run --debug   (from project root), or:
    # python -m estimator.app
    app.run(debug=True)
