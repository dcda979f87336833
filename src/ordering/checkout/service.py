"""Checkout: turns a cart that is in checkout into a pending order.

The service coordinates two aggregates and the catalog. It does not manage
transactions itself: callers run it inside a unit of work (the
``CreateOrderFromCart`` handler does) so that the new order and the
completed cart are committed together or not at all.
"""

import structlog

from ordering.cart.cart import CartStatus
from ordering.errors import NotFoundError, StateConflictError
from ordering.order.order import Order, OrderItem

logger = structlog.get_logger(__name__)


class CheckoutService:
    def __init__(self, carts, orders, catalog):
        self.carts = carts
        self.orders = orders
        self.catalog = catalog

    def create_order_from_cart(self, cart_id, shipping_address) -> Order:
        """Create an order from the cart's items, discount and customer.

        The cart must already be in checkout. Unit prices are the ones locked
        in the cart; product names and SKUs come from the catalog.
        """
        cart = self.carts.get(cart_id)
        if cart is None:
            raise NotFoundError({"cart_id": [f"Cart {cart_id} does not exist"]})

        if CartStatus(cart.status) != CartStatus.CHECKOUT:
            logger.warning("Checkout rejected", cart_id=str(cart_id), cart_status=cart.status)
            raise StateConflictError({"status": [f"Cart must be in Checkout to create an order (cart is {cart.status})"]})

        order_items = []
        for cart_item in cart.items:
            product = self.catalog.find_product(cart_item.product_id)
            order_items.append(
                OrderItem(
                    product_id=cart_item.product_id,
                    product_name=product.name,
                    sku=product.sku,
                    quantity=cart_item.quantity.value,
                    unit_price=cart_item.unit_price,
                )
            )

        discount = cart.discount if cart.discount is not None and cart.discount.is_positive() else None
        order = Order.create(
            customer_id=cart.customer_id,
            items=order_items,
            shipping_address=shipping_address,
            discount=discount,
            cart_id=cart.id,
        )
        cart.complete_checkout()

        self.orders.add(order)
        self.carts.add(cart)

        logger.info(
            "Order created from cart",
            cart_id=str(cart.id),
            order_id=str(order.id),
            total=order.total.amount,
            currency=order.total.currency,
        )
        return order
