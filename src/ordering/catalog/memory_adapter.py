"""In-memory catalog adapter: deterministic catalog for testing and development."""

from ordering.catalog.port import CatalogPort, ProductSnapshot
from ordering.errors import NotFoundError
from ordering.shared.money import Money


class InMemoryCatalog(CatalogPort):
    def __init__(self):
        self._products: dict[str, ProductSnapshot] = {}

    def register(self, product_id, name: str, sku: str, price: Money | None = None) -> ProductSnapshot:
        """Add or replace a product in the catalog."""
        snapshot = ProductSnapshot(product_id=str(product_id), name=name, sku=sku, price=price)
        self._products[snapshot.product_id] = snapshot
        return snapshot

    def unregister(self, product_id) -> None:
        self._products.pop(str(product_id), None)

    def find_product(self, product_id) -> ProductSnapshot:
        try:
            return self._products[str(product_id)]
        except KeyError:
            raise NotFoundError({"product_id": [f"Product {product_id} does not exist in the catalog"]}) from None
