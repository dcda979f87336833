"""Cart management: commands and handler.

Handles cart creation and abandonment of carts left in checkout.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering
from ordering.settings import DEFAULT_CURRENCY

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class CreateCart:
    """Open a new, empty shopping cart for a customer."""

    customer_id = Identifier(required=True)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)


@ordering.command(part_of="ShoppingCart")
class AbandonCart:
    """Give up on a cart that is in checkout."""

    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = ShoppingCart.create(
            customer_id=command.customer_id,
            currency=command.currency or DEFAULT_CURRENCY,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        logger.info("Cart created", cart_id=str(cart.id), customer_id=str(cart.customer_id))
        return str(cart.id)

    @handle(AbandonCart)
    def abandon_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.abandon()
        repo.add(cart)
        logger.info("Cart abandoned", cart_id=str(cart.id))
