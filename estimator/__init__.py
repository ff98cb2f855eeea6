from .catalog import DEFAULT_CATALOG, Catalog, CatalogError, FeatureCost, load_catalog, load_catalog_file
from .pricing import Estimate, Selection, compute

__all__ = [
    "DEFAULT_CATALOG",
    "Catalog",
    "CatalogError",
    "Estimate",
    "FeatureCost",
    "Selection",
    "compute",
    "load_catalog",
    "load_catalog_file",
]
