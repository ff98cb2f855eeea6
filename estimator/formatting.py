# Display helpers shared by the form sidebar, the JSON API and the PDF quote.

from __future__ import annotations


def fmt_number(n: float) -> str:
    """Integers as-is, everything else to 2 places with trailing zeros trimmed."""
    n = round(n, 2)
    if n == 0:
        n = 0.0  # no "-0"
    if float(n).is_integer():
        return str(int(n))
    return f"{n:.2f}".rstrip("0").rstrip(".")


def fmt_hours(n: float) -> str:
    return f"{fmt_number(n)} hrs"


def fmt_eur(n: float) -> str:
    # de-DE: "." groups thousands, "," separates decimals, symbol trails
    s = f"{abs(n):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if round(n, 2) < 0 else ""
    return f"{sign}{s} €"


def vat_percent(tax_rate: float) -> int:
    return int(round(tax_rate * 100))


def vat_label(tax_rate: float) -> str:
    return f"VAT ({vat_percent(tax_rate)}%)"


def estimate_display(estimate, tax_rate: float) -> dict:
    """Formatted strings for every Estimate field, keyed like Estimate.to_dict()."""
    return {
        "baseHours": fmt_hours(estimate.base_hours),
        "featureHours": fmt_hours(estimate.feature_hours),
        "bufferHours": fmt_hours(estimate.buffer_hours),
        "totalHours": fmt_hours(estimate.total_hours),
        "flatFees": fmt_eur(estimate.flat_fees),
        "netPriceEUR": fmt_eur(estimate.net_price_eur),
        "vatLabel": f"+ {vat_label(tax_rate)}",
        "taxAmountEUR": fmt_eur(estimate.tax_amount_eur),
        "grossPriceEUR": fmt_eur(estimate.gross_price_eur),
    }
