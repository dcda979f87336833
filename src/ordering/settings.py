"""Business settings for the Ordering domain, read from the environment."""

import os
from decimal import Decimal

# Currency used for carts, orders, zero discounts and the checkout minimum
DEFAULT_CURRENCY = os.environ.get("ORDERING_CURRENCY", "MXN")

# Minimum cart total (in units of DEFAULT_CURRENCY) required to start checkout
MIN_CHECKOUT_TOTAL = Decimal(os.environ.get("ORDERING_MIN_CHECKOUT_TOTAL", "50"))

# The only country orders can be shipped to
SHIPPING_COUNTRY = os.environ.get("ORDERING_SHIPPING_COUNTRY", "México")

# Catalog adapter built by ordering.catalog.get_catalog()
CATALOG_ADAPTER = os.environ.get("CATALOG_ADAPTER", "memory")
