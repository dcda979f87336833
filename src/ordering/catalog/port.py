"""Catalog port: read-only view of the product catalog used at checkout.

Ordering never owns product data. Checkout asks the catalog for the name
and SKU of each product so that order lines carry a snapshot of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ordering.shared.money import Money


@dataclass(frozen=True)
class ProductSnapshot:
    """What the catalog knows about a product at lookup time."""

    product_id: str
    name: str
    sku: str
    price: Money | None = None


class CatalogPort(ABC):
    """Abstract interface for catalog adapters."""

    @abstractmethod
    def find_product(self, product_id: str) -> ProductSnapshot:
        """Look up a product.

        Raises:
            NotFoundError: if the catalog has no such product.
        """
        ...
