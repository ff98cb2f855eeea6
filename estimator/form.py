from __future__ import annotations

# =========================================
# form.py
# Estimator - form / JSON input boundary
# =========================================
# Turns submitted fields into a sanitized Selection:
#   - hourly rate: invalid/0 -> 75, clamped to [1, 10000]
#   - VAT rate:    invalid   -> 0,  clamped to [0, 1]
#   - risk buffer: invalid   -> 0,  passed through unclamped
#   - quantities:  invalid/0 -> 1,  clamped to [1, 9999] (+-inf included)
#                  JSON null/false/<= 0 unchecks the feature
#   - features of modules hidden for the project type are dropped
# Form checkboxes are named "feature" with values "<Module>.<Feature>";
# quantities come as "qty.<Module>.<Feature>".
# =========================================

import logging
from typing import Mapping, Optional

from .catalog import DEFAULT_CATALOG, Catalog
from .pricing import DEFAULT_HOURLY_RATE, Selection

log = logging.getLogger(__name__)

MIN_HOURLY_RATE = 1.0
MAX_HOURLY_RATE = 10000.0
MAX_QTY = 9999


def _parse_float(val, allow_inf: bool = False) -> Optional[float]:
    """Parse a number from user input. Returns None when it isn't one."""
    if val is None or isinstance(val, bool):
        return None
    try:
        num = float(str(val).strip().replace(",", "."))
    except ValueError:
        return None
    if num != num:
        return None
    if not allow_inf and num in (float("inf"), float("-inf")):
        return None
    return num


def _clamp(val: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, val))


def parse_hourly_rate(val) -> float:
    rate = _parse_float(val)
    if not rate:
        rate = DEFAULT_HOURLY_RATE
    return _clamp(rate, MIN_HOURLY_RATE, MAX_HOURLY_RATE)


def parse_tax_rate(val) -> float:
    rate = _parse_float(val)
    if rate is None:
        rate = 0.0
    return _clamp(rate, 0.0, 1.0)


def parse_risk_buffer(val) -> float:
    buf = _parse_float(val)
    return 0.0 if buf is None else buf


def parse_quantity(val) -> int:
    # fractions truncate; +-inf clamp like any other out-of-range value
    qty = _parse_float(val, allow_inf=True)
    if not qty:
        return 1
    return int(_clamp(qty, 1, MAX_QTY))


def _split_feature(value) -> Optional[tuple[str, str]]:
    module, sep, feature = str(value or "").strip().partition(".")
    if not sep or not module or not feature:
        return None
    return module, feature


def _drop_hidden(features: dict, project_type: str, catalog: Catalog) -> dict:
    hidden = catalog.hidden_modules.get(project_type, frozenset())
    kept = {}
    for module, rows in features.items():
        if module in hidden:
            log.debug("Dropping features of hidden module %s for %s", module, project_type)
            continue
        kept[module] = rows
    return kept


def selection_from_form(form, catalog: Catalog = DEFAULT_CATALOG) -> Selection:
    """
    Build a Selection from form fields (a werkzeug MultiDict or a plain dict).
    """
    if hasattr(form, "getlist"):
        checked = form.getlist("feature")
    else:
        checked = form.get("feature") or []
        if isinstance(checked, str):
            checked = [checked]

    project_type = (form.get("project_type") or "").strip()

    features: dict[str, dict[str, int]] = {}
    for value in checked:
        parts = _split_feature(value)
        if parts is None:
            log.warning("Ignoring malformed feature value %r", value)
            continue
        module, feature = parts
        qty = parse_quantity(form.get(f"qty.{module}.{feature}"))
        features.setdefault(module, {})[feature] = qty

    return Selection(
        project_type=project_type,
        design=(form.get("design") or "standard").strip(),
        risk_buffer=parse_risk_buffer(form.get("risk_buffer")),
        hourly_rate=parse_hourly_rate(form.get("hourly_rate")),
        tax_rate=parse_tax_rate(form.get("vat_rate")),
        features=_drop_hidden(features, project_type, catalog),
    )


def selection_from_json(data: Mapping, catalog: Catalog = DEFAULT_CATALOG) -> Selection:
    """
    Same as selection_from_form, but for a JSON body whose "features" is a
    nested {module: {feature: qty}} mapping.
    """
    project_type = str(data.get("project_type") or "").strip()

    features: dict[str, dict[str, int]] = {}
    raw = data.get("features") or {}
    if not isinstance(raw, Mapping):
        log.warning("Ignoring non-object 'features' in JSON body")
        raw = {}
    for module, rows in raw.items():
        if not isinstance(rows, Mapping):
            log.warning("Ignoring non-object feature list for module %r", module)
            continue
        for feature, qty in rows.items():
            # null, false and quantities <= 0 uncheck the feature
            if qty is None or qty is False:
                continue
            num = _parse_float(qty, allow_inf=True)
            if num is not None and num <= 0:
                continue
            features.setdefault(str(module), {})[str(feature)] = parse_quantity(qty)

    return Selection(
        project_type=project_type,
        design=str(data.get("design") or "standard").strip(),
        risk_buffer=parse_risk_buffer(data.get("risk_buffer")),
        hourly_rate=parse_hourly_rate(data.get("hourly_rate")),
        tax_rate=parse_tax_rate(data.get("vat_rate", data.get("tax_rate"))),
        features=_drop_hidden(features, project_type, catalog),
    )
