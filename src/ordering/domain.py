"""Ordering bounded context: Shopping Cart and Order Management.

Handles the shopping cart lifecycle, the order fulfillment lifecycle,
and the checkout flow that converts carts to orders.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
ordering = Domain(name="ordering")
