"""Domain events for the Order aggregate.

All events are versioned, immutable facts raised after the aggregate has
accepted a change. They are written to the event store alongside the order.
"""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderCreated:
    """A new order was placed, directly or from a checked-out cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = String(required=True)
    discount = String(required=True)
    total = String(required=True)
    currency = String(required=True, max_length=3)
    cart_id = Identifier()  # Set when the order came from a cart
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderItemAdded:
    """A line item was added while the order was still being composed."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String()
    quantity = Integer(required=True)
    unit_price = String(required=True)
    new_total = String(required=True)


@ordering.event(part_of="Order")
class OrderDiscountApplied:
    """A discount replaced any previous discount and the total was recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    amount = String(required=True)
    new_total = String(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="Order")
class OrderConfirmed:
    """The order was confirmed and awaits payment or preparation."""

    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentProcessed:
    """Payment was recorded against the order; preparation can start."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    payment_method = String()
    amount = String(required=True)
    currency = String(required=True, max_length=3)
    processed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderInProcess:
    """Preparation started without a recorded payment (non-prepaid flow)."""

    __version__ = 1

    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    """The order left the warehouse with a carrier."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String()
    estimated_delivery = String()
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """The carrier confirmed delivery to the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before it shipped."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)
