"""Read helpers for carts and orders.

Lookups go straight to the aggregate repositories; there are no read
models in the ordering domain.
"""

from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.order.order import Order


def get_cart(cart_id) -> ShoppingCart:
    """Load a cart. Raises ``NotFoundError`` if it does not exist."""
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def get_order(order_id) -> Order:
    """Load an order. Raises ``NotFoundError`` if it does not exist."""
    return current_domain.repository_for(Order).get(order_id)


def list_orders(customer_id=None) -> list[Order]:
    """All orders, oldest first, optionally restricted to one customer."""
    query = current_domain.repository_for(Order)._dao.query
    if customer_id is not None:
        query = query.filter(customer_id=str(customer_id))
    return list(query.order_by("created_at").all().items)
