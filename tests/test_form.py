# root: tests/test_form.py
import pytest
from werkzeug.datastructures import MultiDict

from estimator.form import (
    parse_hourly_rate,
    parse_quantity,
    parse_risk_buffer,
    parse_tax_rate,
    selection_from_form,
    selection_from_json,
)


@pytest.mark.parametrize(
    "raw, expected",
    [("90", 90), ("", 75), (None, 75), ("abc", 75), ("0", 75), ("-5", 1), ("50000", 10000), ("82,5", 82.5)],
)
def test_parse_hourly_rate(raw, expected):
    assert parse_hourly_rate(raw) == expected


@pytest.mark.parametrize("raw, expected", [("0.19", 0.19), ("", 0), ("x", 0), ("1.5", 1), ("-0.2", 0)])
def test_parse_tax_rate(raw, expected):
    assert parse_tax_rate(raw) == expected


def test_parse_risk_buffer_is_not_clamped():
    assert parse_risk_buffer("150") == 150
    assert parse_risk_buffer("-10") == -10
    assert parse_risk_buffer("nan") == 0
    assert parse_risk_buffer(None) == 0


@pytest.mark.parametrize("raw, expected", [("3", 3), (None, 1), ("0", 1), ("-2", 1), ("20000", 9999), ("x", 1)])
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_selection_from_form(catalog):
    form = MultiDict([
        ("project_type", "NewBuild"),
        ("design", "custom"),
        ("risk_buffer", "10"),
        ("hourly_rate", "100"),
        ("vat_rate", "0.19"),
        ("feature", "Dev.SimpleSection"),
        ("feature", "Content.FullServiceFlatFee"),
        ("feature", "garbage"),
        ("qty.Dev.SimpleSection", "4"),
    ])
    sel = selection_from_form(form, catalog)
    assert sel.project_type == "NewBuild"
    assert sel.design == "custom"
    assert sel.risk_buffer == 10
    assert sel.hourly_rate == 100
    assert sel.tax_rate == 0.19
    assert sel.features == {"Dev": {"SimpleSection": 4}, "Content": {"FullServiceFlatFee": 1}}


def test_hidden_modules_are_dropped(catalog):
    form = MultiDict([
        ("project_type", "Audit"),
        ("feature", "Dev.SimpleSection"),
        ("feature", "Data.CSV"),
        ("feature", "Content.FullServiceFlatFee"),
    ])
    sel = selection_from_form(form, catalog)
    assert sel.features == {"Data": {"CSV": 1}}


def test_plain_dict_form_defaults(catalog):
    sel = selection_from_form({"project_type": "Tweaks", "feature": "Dev.ComplexSection"}, catalog)
    assert sel.hourly_rate == 75
    assert sel.tax_rate == 0
    assert sel.risk_buffer == 0
    assert sel.design == "standard"
    assert sel.features == {"Dev": {"ComplexSection": 1}}


def test_reserved_looking_keys_are_just_strings(catalog):
    form = MultiDict([("project_type", "Tweaks"), ("feature", "__proto__.constructor")])
    sel = selection_from_form(form, catalog)
    assert sel.features == {"__proto__": {"constructor": 1}}


def test_selection_from_json(catalog):
    sel = selection_from_json(
        {
            "project_type": "Migration",
            "hourly_rate": 0,
            "tax_rate": 0.07,
            "features": {"Apps": {"Standard": 1}, "Data": {"CSV": 2, "Metafields": 0}, "Dev": "bad"},
        },
        catalog,
    )
    assert sel.hourly_rate == 75
    assert sel.tax_rate == 0.07
    assert sel.features == {"Data": {"CSV": 2}}


@pytest.mark.parametrize("qty", [-2, False, None, 0, "-1", float("-inf")])
def test_json_non_positive_or_unset_quantity_unchecks_feature(catalog, qty):
    sel = selection_from_json({"project_type": "Tweaks", "features": {"Dev": {"SimpleSection": qty}}}, catalog)
    assert sel.features == {}


def test_json_unchecked_features_bill_nothing(client):
    resp = client.post(
        "/estimate",
        json={"project_type": "Tweaks", "features": {"Dev": {"SimpleSection": -2, "ComplexSection": None}}},
    )
    assert resp.get_json()["result"]["featureHours"] == 0


def test_json_true_counts_as_one(catalog):
    sel = selection_from_json({"project_type": "Tweaks", "features": {"Dev": {"SimpleSection": True}}}, catalog)
    assert sel.features == {"Dev": {"SimpleSection": 1}}


@pytest.mark.parametrize("raw, expected", [("1e400", 9999), ("-1e400", 1), (float("inf"), 9999), ("2.7", 2)])
def test_parse_quantity_extremes(raw, expected):
    assert parse_quantity(raw) == expected
