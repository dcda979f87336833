"""Cart to order conversion: command and handler."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.catalog import get_catalog
from ordering.checkout.service import CheckoutService
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.shared.payloads import decode_json_field
from ordering.utils.logging import add_context, clear_context


@ordering.command(part_of="Order")
class CreateOrderFromCart:
    """Place an order for everything in a cart that is in checkout."""

    cart_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict


@ordering.command_handler(part_of=Order)
class CreateOrderFromCartHandler:
    @handle(CreateOrderFromCart)
    def create_order_from_cart(self, command):
        shipping_address = decode_json_field("shipping_address", command.shipping_address, dict)
        service = CheckoutService(
            carts=current_domain.repository_for(ShoppingCart),
            orders=current_domain.repository_for(Order),
            catalog=get_catalog(),
        )
        add_context(cart_id=str(command.cart_id))
        try:
            order = service.create_order_from_cart(command.cart_id, shipping_address)
        finally:
            clear_context()
        return str(order.id)
