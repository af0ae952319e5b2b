"""Catalog factory.

get_catalog() / set_catalog() swap the product lookup used when catalog
items are added to a cart. Defaults to the in-memory catalog.
"""

from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.catalog.port import CatalogPort

_current_catalog: CatalogPort | None = None


def get_catalog() -> CatalogPort:
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: CatalogPort) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
