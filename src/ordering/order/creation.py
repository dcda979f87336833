"""Order creation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.settings import DEFAULT_CURRENCY
from ordering.shared.money import Money
from ordering.shared.payloads import decode_json_field

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    shipping_address = Text(required=True)  # JSON: address dict
    discount = String(max_length=64)  # Decimal text, optional
    currency = String(max_length=3, default=DEFAULT_CURRENCY)


@ordering.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        items_data = decode_json_field("items", command.items, list)
        shipping_address = decode_json_field("shipping_address", command.shipping_address, dict)
        currency = command.currency or DEFAULT_CURRENCY

        for item in items_data:
            if isinstance(item, dict):
                item.setdefault("currency", currency)

        order = Order.create(
            customer_id=command.customer_id,
            items=items_data,
            shipping_address=shipping_address,
            discount=Money.of(command.discount, currency) if command.discount else None,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order created",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            total=order.total.amount,
        )
        return str(order.id)
