"""Order fulfillment: commands and handler.

Handles the fulfillment pipeline: preparation without a prepaid payment,
carrier handoff and delivery recording.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkInProcess:
    """Signal that the warehouse has started preparing a confirmed order."""

    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class MarkShipped:
    """Record that the order has been handed to a carrier."""

    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = String(max_length=10)  # ISO date string


@ordering.command(part_of="Order")
class MarkDelivered:
    """Record that the carrier has confirmed delivery to the customer."""

    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class RecordFulfillmentHandler:
    @handle(MarkInProcess)
    def mark_in_process(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_in_process()
        repo.add(order)
        logger.info("Order in preparation", order_id=str(order.id))

    @handle(MarkShipped)
    def mark_shipped(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_shipped(
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            estimated_delivery=command.estimated_delivery,
        )
        repo.add(order)
        logger.info("Order shipped", order_id=str(order.id), tracking_number=order.shipping_info.tracking_number)

    @handle(MarkDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered()
        repo.add(order)
        logger.info("Order delivered", order_id=str(order.id))
