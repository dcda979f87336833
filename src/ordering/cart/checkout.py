"""Cart checkout lifecycle: commands and handler.

``StartCheckout`` locks the cart. ``CompleteCheckout`` only marks the cart;
converting it into an order goes through ``CreateOrderFromCart``, which
completes the cart itself.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class StartCheckout:
    cart_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class CompleteCheckout:
    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class CartCheckoutHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.start_checkout()
        repo.add(cart)
        logger.info("Checkout started", cart_id=str(cart.id), total=str(cart.total))

    @handle(CompleteCheckout)
    def complete_checkout(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.complete_checkout()
        repo.add(cart)
        logger.info("Checkout completed", cart_id=str(cart.id))
