# Central pricing calculation shared by the form, the JSON API and the PDF quote

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .catalog import DEFAULT_CATALOG, Catalog

DEFAULT_HOURLY_RATE = 75.0
CUSTOM_DESIGN = "custom"


@dataclass(frozen=True)
class Selection:
    project_type: str = ""
    design: str = "standard"
    risk_buffer: float = 0.0
    hourly_rate: float = DEFAULT_HOURLY_RATE
    tax_rate: float = 0.0
    # module -> feature -> quantity
    features: Mapping[str, Mapping[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class Estimate:
    base_hours: float
    feature_hours: float
    buffer_hours: float
    total_hours: float
    flat_fees: float
    net_price_eur: float
    tax_amount_eur: float
    gross_price_eur: float

    def to_dict(self) -> dict:
        return {
            "baseHours": self.base_hours,
            "featureHours": self.feature_hours,
            "bufferHours": self.buffer_hours,
            "totalHours": self.total_hours,
            "flatFees": self.flat_fees,
            "netPriceEUR": self.net_price_eur,
            "taxAmountEUR": self.tax_amount_eur,
            "grossPriceEUR": self.gross_price_eur,
        }


def compute(selection: Selection, catalog: Catalog = DEFAULT_CATALOG) -> Estimate:
    """
    Price a selection against the catalog. Pure: unknown project types,
    modules and features contribute nothing instead of raising.
    """
    base_hours = catalog.base_hours(selection.project_type)

    dev_hours = 0.0
    other_hours = 0.0
    flat_fees = 0.0

    for module, features in selection.features.items():
        for feature, quantity in features.items():
            if quantity <= 0:
                continue

            cost = catalog.feature(module, feature)
            if cost is None:
                continue

            if cost.is_flat_fee:
                flat_fees += cost.flat_fee * quantity
            elif module == catalog.multiplier_module:
                dev_hours += cost.hours * quantity
            else:
                other_hours += cost.hours * quantity

    # once, after accumulation
    if selection.design == CUSTOM_DESIGN:
        dev_hours *= catalog.custom_design_multiplier

    feature_hours = dev_hours + other_hours
    buffer_hours = (base_hours + feature_hours) * (selection.risk_buffer / 100)
    total_hours = base_hours + feature_hours + buffer_hours

    # flat fees bypass the rate, the buffer and the design multiplier
    net_price = total_hours * selection.hourly_rate + flat_fees
    tax_amount = net_price * selection.tax_rate
    gross_price = net_price + tax_amount

    return Estimate(
        base_hours=base_hours,
        feature_hours=feature_hours,
        buffer_hours=buffer_hours,
        total_hours=total_hours,
        flat_fees=flat_fees,
        net_price_eur=net_price,
        tax_amount_eur=tax_amount,
        gross_price_eur=gross_price,
    )
