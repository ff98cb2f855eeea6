# Reference data for the estimator: base hours per project type and the
# per-module feature costs. Loaded once, never mutated.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

log = logging.getLogger(__name__)

PROJECT_TYPES = {
    "Audit": {"base_hours": 6},
    "Tweaks": {"base_hours": 2},
    "NewBuild": {"base_hours": 16},
    "Migration": {"base_hours": 24},
    "CustomApp": {"base_hours": 10},
}

# Each feature is tagged: "hours" or "flat_fee" (EUR), never both.
MODULES = {
    "Design": {},
    "Data": {
        "CSV": {"label": "CSV import", "hours": 3},
        "ComplexMigration": {"label": "Complex data migration", "hours": 12},
        "Metafields": {"label": "Metafields setup", "hours": 4},
    },
    "Dev": {
        "SimpleSection": {"label": "Simple section", "hours": 2},
        "ComplexSection": {"label": "Complex section", "hours": 6},
    },
    "Apps": {
        "Standard": {"label": "Standard app integration", "hours": 1},
        "Complex": {"label": "Complex app integration", "hours": 6},
        "B2B_Plus": {"label": "B2B / Plus setup", "hours": 12},
        "TrackingBasic": {"label": "Basic tracking", "hours": 1},
        "TrackingAdvanced": {"label": "Advanced tracking", "hours": 7},
    },
    "Commerce": {
        "Markets": {"label": "Markets setup", "hours": 6},
    },
    "Content": {
        "ClientProvides": {"label": "Content transfer (client provides)", "hours": 4},
        "FullServiceFlatFee": {"label": "Full-service content", "flat_fee": 1500},
    },
}

MULTIPLIER_MODULE = "Dev"
CUSTOM_DESIGN_MULTIPLIER = 1.3

# Modules not offered for a project type; their features never reach pricing.
HIDDEN_MODULES = {
    "Audit": ["Dev", "Apps", "Commerce", "Content"],
    "Tweaks": [],
    "NewBuild": [],
    "Migration": ["Apps"],
    "CustomApp": ["Design", "Data", "Commerce", "Content"],
}


class CatalogError(ValueError):
    """Reference data failed validation."""


@dataclass(frozen=True)
class FeatureCost:
    module: str
    key: str
    label: str
    hours: float = 0.0
    flat_fee: Optional[float] = None

    @property
    def is_flat_fee(self) -> bool:
        return self.flat_fee is not None


@dataclass(frozen=True)
class Catalog:
    project_types: Mapping[str, float]
    modules: Mapping[str, Mapping[str, FeatureCost]]
    multiplier_module: str = MULTIPLIER_MODULE
    custom_design_multiplier: float = CUSTOM_DESIGN_MULTIPLIER
    hidden_modules: Mapping[str, frozenset] = field(default_factory=dict)

    def base_hours(self, project_type: str) -> float:
        return self.project_types.get(project_type, 0.0)

    def feature(self, module: str, feature: str) -> Optional[FeatureCost]:
        return self.modules.get(module, {}).get(feature)

    def feature_label(self, module: str, feature: str) -> str:
        cost = self.feature(module, feature)
        return cost.label if cost else feature

    def visible_modules(self, project_type: str) -> list[str]:
        hidden = self.hidden_modules.get(project_type, frozenset())
        return [m for m in self.modules if m not in hidden]

    def to_dict(self) -> dict:
        modules = {}
        for mod, features in self.modules.items():
            modules[mod] = {}
            for key, cost in features.items():
                row = {"label": cost.label}
                if cost.is_flat_fee:
                    row["flat_fee"] = cost.flat_fee
                else:
                    row["hours"] = cost.hours
                modules[mod][key] = row
        return {
            "project_types": {k: {"base_hours": v} for k, v in self.project_types.items()},
            "modules": modules,
            "multiplier_module": self.multiplier_module,
            "custom_design_multiplier": self.custom_design_multiplier,
            "hidden_modules": {k: sorted(v) for k, v in self.hidden_modules.items()},
        }


def _number(value, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CatalogError(f"{where}: expected a number, got {value!r}")
    if value < 0:
        raise CatalogError(f"{where}: must be non-negative, got {value!r}")
    return float(value)


def _feature_cost(module: str, key: str, raw) -> FeatureCost:
    where = f"modules.{module}.{key}"
    if not isinstance(raw, Mapping):
        raise CatalogError(f"{where}: expected a mapping")
    has_hours = "hours" in raw
    has_fee = "flat_fee" in raw
    if has_hours == has_fee:
        raise CatalogError(f"{where}: needs exactly one of 'hours' or 'flat_fee'")
    label = str(raw.get("label") or key)
    if has_fee:
        return FeatureCost(module, key, label, flat_fee=_number(raw["flat_fee"], where))
    return FeatureCost(module, key, label, hours=_number(raw["hours"], where))


def load_catalog(
    project_types: Mapping = PROJECT_TYPES,
    modules: Mapping = MODULES,
    multiplier_module: str = MULTIPLIER_MODULE,
    custom_design_multiplier: float = CUSTOM_DESIGN_MULTIPLIER,
    hidden_modules: Mapping = HIDDEN_MODULES,
) -> Catalog:
    """
    Build a validated, read-only Catalog from plain dicts.
    Raises CatalogError on malformed reference data.
    """
    types = {}
    for name, cfg in project_types.items():
        if not isinstance(cfg, Mapping) or "base_hours" not in cfg:
            raise CatalogError(f"project_types.{name}: missing 'base_hours'")
        types[name] = _number(cfg["base_hours"], f"project_types.{name}.base_hours")

    mods = {}
    for mod, features in modules.items():
        if not isinstance(features, Mapping):
            raise CatalogError(f"modules.{mod}: expected a mapping of features")
        mods[mod] = MappingProxyType({k: _feature_cost(mod, k, v) for k, v in features.items()})

    if multiplier_module not in mods:
        raise CatalogError(f"multiplier module {multiplier_module!r} is not a known module")
    if isinstance(custom_design_multiplier, bool) or not isinstance(custom_design_multiplier, (int, float)) \
            or custom_design_multiplier <= 0:
        raise CatalogError(f"custom design multiplier must be positive, got {custom_design_multiplier!r}")

    hidden = {k: frozenset(v) for k, v in (hidden_modules or {}).items()}

    return Catalog(
        project_types=MappingProxyType(types),
        modules=MappingProxyType(mods),
        multiplier_module=multiplier_module,
        custom_design_multiplier=float(custom_design_multiplier),
        hidden_modules=MappingProxyType(hidden),
    )


def load_catalog_file(path) -> Catalog:
    """Load a catalog from a JSON file shaped like Catalog.to_dict()."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"{path}: invalid JSON ({e})") from e

    if not isinstance(raw, dict):
        raise CatalogError(f"{path}: top level must be an object")

    log.info("Loading catalog from %s", path)
    return load_catalog(
        project_types=raw.get("project_types", {}),
        modules=raw.get("modules", {}),
        multiplier_module=raw.get("multiplier_module", MULTIPLIER_MODULE),
        custom_design_multiplier=raw.get("custom_design_multiplier", CUSTOM_DESIGN_MULTIPLIER),
        hidden_modules=raw.get("hidden_modules", {}),
    )


DEFAULT_CATALOG = load_catalog()
