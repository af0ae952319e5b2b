"""Catalog port: read-only price lookup for catalog products.

The cart never owns catalog prices; it snapshots them when an item is added.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogProduct:
    product_id: str
    title: str
    base_price: float
    offer_price: float
    image: str | None = None
    colors: tuple[str, ...] = ()


class CatalogPort(ABC):
    @abstractmethod
    def get_product(self, product_id: str) -> CatalogProduct:
        """Return the product, raising ``ObjectNotFoundError`` if it does not exist."""
        ...
