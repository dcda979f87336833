"""Order payment: command and handler.

Only an opaque reference from the payment gateway is recorded; card data
never reaches the ordering domain.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ProcessPayment:
    order_id = Identifier(required=True)
    payment_reference = String(required=True, max_length=255)
    payment_method = String(max_length=50, default="card")


@ordering.command_handler(part_of=Order)
class ProcessPaymentHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.process_payment(
            reference=command.payment_reference,
            method=command.payment_method or "card",
        )
        repo.add(order)
        logger.info(
            "Payment recorded",
            order_id=str(order.id),
            payment_method=order.payment_summary.method,
            amount=order.total.amount,
        )
