"""Order aggregate: the core of the ordering domain.

An order is a snapshot of purchased items with a shipping address, a
discount and a total, driven through a fulfillment lifecycle. Every accepted
transition is appended to the order's status history, which is the audit
trail of the aggregate.

State Machine:
    PENDING → CONFIRMED → PREPARATION → SHIPPED → DELIVERED
    CANCELLED (from PENDING, CONFIRMED, PREPARATION)
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import BusinessRuleViolation, StateConflictError
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderDiscountApplied,
    OrderInProcess,
    OrderItemAdded,
    OrderShipped,
    PaymentProcessed,
)
from ordering.settings import DEFAULT_CURRENCY, SHIPPING_COUNTRY
from ordering.shared.discounts import resolve_discount
from ordering.shared.money import Money

MIN_CANCELLATION_REASON_LENGTH = 10
MIN_TRACKING_NUMBER_LENGTH = 5

_POSTAL_CODE = re.compile(r"^\d{5}$")
_CONTACT_PHONE = re.compile(r"^\d{10}$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PREPARATION = "Preparation"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARATION, OrderStatus.CANCELLED},
    OrderStatus.PREPARATION: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """A delivery address captured at order time.

    Validated in full on construction: a 5-digit postal code, a 10-digit
    contact phone and the single supported shipping country. Once recorded on
    an Order it never changes.
    """

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    region = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=5)
    country = String(max_length=100, default=SHIPPING_COUNTRY)
    contact_phone = String(required=True, max_length=10)

    @invariant.post
    def text_fields_cannot_be_blank(self):
        for field_name in ("street", "city", "region"):
            value = getattr(self, field_name)
            if value is not None and not value.strip():
                raise ValidationError({field_name: [f"{field_name.capitalize()} cannot be blank"]})

    @invariant.post
    def postal_code_must_have_five_digits(self):
        if self.postal_code is not None and not _POSTAL_CODE.match(self.postal_code):
            raise ValidationError({"postal_code": ["Postal code must be exactly 5 digits"]})

    @invariant.post
    def contact_phone_must_have_ten_digits(self):
        if self.contact_phone is not None and not _CONTACT_PHONE.match(self.contact_phone):
            raise ValidationError({"contact_phone": ["Contact phone must be exactly 10 digits"]})

    @invariant.post
    def country_must_be_supported(self):
        if self.country != SHIPPING_COUNTRY:
            raise ValidationError({"country": [f"Orders can only be shipped to {SHIPPING_COUNTRY}"]})


@ordering.value_object(part_of="Order")
class PaymentSummary:
    """How and when the order was paid. Only an opaque gateway reference is kept."""

    method = String(max_length=50)
    reference = String(max_length=255)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    processed_at = DateTime()


@ordering.value_object(part_of="Order")
class ShippingInfo:
    carrier = String(max_length=100)
    tracking_number = String(required=True, max_length=255)
    estimated_delivery = String(max_length=10)  # ISO date string


@ordering.value_object(part_of="Order")
class StateChange:
    """One accepted lifecycle transition of an order."""

    changed_at = DateTime(required=True)
    from_status = String(required=True, max_length=20)
    to_status = String(required=True, max_length=20)
    reason = String(max_length=500)

    def to_record(self):
        return {
            "changed_at": self.changed_at.isoformat(),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "reason": self.reason,
        }

    @classmethod
    def from_record(cls, record):
        return cls(
            changed_at=datetime.fromisoformat(record["changed_at"]),
            from_status=record["from_status"],
            to_status=record["to_status"],
            reason=record.get("reason"),
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A purchased line: product, quantity and the price locked at order time."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Money, required=True)

    @property
    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    discount = ValueObject(Money)
    total = ValueObject(Money)
    payment_summary = ValueObject(PaymentSummary)
    shipping_info = ValueObject(ShippingInfo)
    cancellation_reason = String(max_length=500)
    status_history = Text(default="[]")  # JSON array of StateChange records
    cart_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cancelled_order_must_have_a_reason(self):
        if self.status == OrderStatus.CANCELLED.value and not self.cancellation_reason:
            raise ValidationError({"cancellation_reason": ["A cancelled order must record its reason"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id, items, shipping_address, discount=None, cart_id=None):
        """Create a new PENDING order.

        Args:
            customer_id: The customer placing the order.
            items: Non-empty list of ``OrderItem`` instances or dicts with
                product_id, product_name, sku, quantity and unit_price.
            shipping_address: A ``ShippingAddress`` or a dict with street,
                city, region, postal_code and contact_phone.
            discount: Optional ``Money`` carried over from a cart.
            cart_id: The cart this order was checked out from, if any.
        """
        if not items:
            raise ValidationError({"items": ["An order must have at least one item"]})

        order_items = [_to_order_item(item) for item in items]
        if isinstance(shipping_address, ShippingAddress):
            address = shipping_address
        elif isinstance(shipping_address, dict):
            address = ShippingAddress(**shipping_address)
        else:
            raise ValidationError({"shipping_address": ["A shipping address is required"]})

        currency = order_items[0].unit_price.currency
        subtotal = Money.zero(currency)
        for item in order_items:
            subtotal = subtotal.add(item.subtotal)

        applied_discount = Money.zero(currency)
        if discount is not None and discount.is_positive():
            applied_discount = resolve_discount(subtotal, amount=discount)

        total = subtotal.subtract(applied_discount)
        if not total.is_positive():
            raise BusinessRuleViolation({"total": ["The order total must be greater than zero"]})

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            shipping_address=address,
            currency=currency,
            discount=Money.zero(currency),
            total=Money.zero(currency),
            payment_summary=PaymentSummary(status=PaymentStatus.PENDING.value),
            status_history="[]",
            cart_id=cart_id,
            created_at=now,
            updated_at=now,
        )
        with atomic_change(order):
            for item in order_items:
                order.add_items(item)
            order.discount = applied_discount
            order.total = total

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                customer_id=str(customer_id),
                item_count=len(order_items),
                subtotal=subtotal.amount,
                discount=applied_discount.amount,
                total=total.amount,
                currency=currency,
                cart_id=str(cart_id) if cart_id else None,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def subtotal(self) -> Money:
        subtotal = Money.zero(self.currency)
        for item in self.items:
            subtotal = subtotal.add(item.subtotal)
        return subtotal

    @property
    def history(self) -> list[StateChange]:
        records = json.loads(self.status_history) if self.status_history else []
        return [StateChange.from_record(record) for record in records]

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise StateConflictError(
                {"status": [f"Cannot transition order from {current.value} to {target_status.value}"]}
            )

    def _transition(self, target_status, reason=None, **changes):
        """Move to ``target_status``, applying ``changes`` and appending to the history."""
        self._assert_can_transition(target_status)

        now = datetime.now(UTC)
        change = StateChange(
            changed_at=now,
            from_status=self.status,
            to_status=target_status.value,
            reason=reason,
        )
        records = json.loads(self.status_history) if self.status_history else []
        records.append(change.to_record())

        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)
            self.status = target_status.value
            self.status_history = json.dumps(records)
            self.updated_at = now

        return now

    def _assert_composing(self, action):
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise StateConflictError({"status": [f"{action} is only allowed while the order is Pending"]})

    def _recalculated_total(self, subtotal, discount):
        total = subtotal.subtract(discount)
        if not total.is_positive():
            raise BusinessRuleViolation({"total": ["The order total must be greater than zero"]})
        return total

    # -------------------------------------------------------------------
    # Composition (only while PENDING)
    # -------------------------------------------------------------------
    def add_item(self, product_id, product_name, sku, quantity, unit_price):
        """Add a line item while the order is still being composed.

        Composition lasts while the order is PENDING and has recorded no
        transition, whether or not it has been saved in between. The first
        transition (confirm or cancel) closes it.
        """
        self._assert_composing("Adding items")
        if self.status_history and json.loads(self.status_history):
            raise StateConflictError({"items": ["Items cannot be added after the order has changed state"]})

        item = _to_order_item(
            {
                "product_id": product_id,
                "product_name": product_name,
                "sku": sku,
                "quantity": quantity,
                "unit_price": unit_price if isinstance(unit_price, Money) else Money.of(unit_price, self.currency),
            }
        )
        if item.unit_price.currency != self.currency:
            raise ValidationError({"unit_price": [f"Order currency is {self.currency}, got {item.unit_price.currency}"]})

        total = self._recalculated_total(self.subtotal.add(item.subtotal), self.discount)

        with atomic_change(self):
            self.add_items(item)
            self.total = total
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderItemAdded(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                sku=sku,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
                new_total=total.amount,
            )
        )
        return item

    def apply_discount(self, amount=None, percentage=None):
        """Replace the order discount (at most 30 % of the subtotal) and recompute the total."""
        self._assert_composing("Applying a discount")

        subtotal = self.subtotal
        discount = resolve_discount(subtotal, amount=amount, percentage=percentage)
        total = self._recalculated_total(subtotal, discount)

        with atomic_change(self):
            self.discount = discount
            self.total = total
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderDiscountApplied(
                order_id=str(self.id),
                amount=discount.amount,
                new_total=total.amount,
                currency=discount.currency,
            )
        )
        return discount

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def confirm(self):
        """Confirm a pending order."""
        confirmed_at = self._transition(OrderStatus.CONFIRMED)
        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                confirmed_at=confirmed_at,
            )
        )

    def process_payment(self, reference, method="card"):
        """Record a completed payment and start preparation."""
        self._assert_can_transition(OrderStatus.PREPARATION)
        if reference is None or not str(reference).strip():
            raise ValidationError({"reference": ["A payment reference is required"]})

        now = datetime.now(UTC)
        summary = PaymentSummary(
            method=method,
            reference=str(reference).strip(),
            status=PaymentStatus.COMPLETED.value,
            processed_at=now,
        )
        processed_at = self._transition(OrderStatus.PREPARATION, payment_summary=summary)

        self.raise_(
            PaymentProcessed(
                order_id=str(self.id),
                payment_reference=summary.reference,
                payment_method=method,
                amount=self.total.amount,
                currency=self.total.currency,
                processed_at=processed_at,
            )
        )

    def mark_in_process(self):
        """Start preparation without recording a payment (non-prepaid orders)."""
        started_at = self._transition(OrderStatus.PREPARATION)
        self.raise_(
            OrderInProcess(
                order_id=str(self.id),
                started_at=started_at,
            )
        )

    def mark_shipped(self, tracking_number, carrier=None, estimated_delivery=None):
        """Record the carrier handoff."""
        self._assert_can_transition(OrderStatus.SHIPPED)
        if tracking_number is None or not str(tracking_number).strip():
            raise ValidationError({"tracking_number": ["A tracking number is required"]})
        tracking_number = str(tracking_number).strip()
        if len(tracking_number) < MIN_TRACKING_NUMBER_LENGTH:
            raise ValidationError(
                {"tracking_number": [f"Tracking number must have at least {MIN_TRACKING_NUMBER_LENGTH} characters"]}
            )

        info = ShippingInfo(
            carrier=carrier,
            tracking_number=tracking_number,
            estimated_delivery=estimated_delivery,
        )
        shipped_at = self._transition(OrderStatus.SHIPPED, shipping_info=info)

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_number=tracking_number,
                carrier=carrier,
                estimated_delivery=estimated_delivery,
                shipped_at=shipped_at,
            )
        )

    def mark_delivered(self):
        """Record that the carrier has delivered the order."""
        delivered_at = self._transition(OrderStatus.DELIVERED)
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                delivered_at=delivered_at,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason):
        """Cancel the order. Not possible once it has shipped."""
        current = OrderStatus(self.status)
        if current in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise StateConflictError({"status": [f"Cannot cancel an order that is already {current.value}"]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        if reason is None or len(reason.strip()) < MIN_CANCELLATION_REASON_LENGTH:
            raise ValidationError(
                {"reason": [f"Cancellation reason must have at least {MIN_CANCELLATION_REASON_LENGTH} characters"]}
            )
        reason = reason.strip()

        cancelled_at = self._transition(OrderStatus.CANCELLED, reason=reason, cancellation_reason=reason)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                previous_status=current.value,
                cancelled_at=cancelled_at,
            )
        )


_REQUIRED_ITEM_KEYS = ("product_id", "product_name", "quantity", "unit_price")


def _to_order_item(item):
    if not isinstance(item, (OrderItem, dict)):
        raise ValidationError({"items": [f"Order items must be objects, got {type(item).__name__}"]})

    if isinstance(item, dict):
        missing = [key for key in _REQUIRED_ITEM_KEYS if item.get(key) is None]
        if missing:
            raise ValidationError({"items": [f"Order item is missing {', '.join(missing)}"]})

        unit_price = item["unit_price"]
        if not isinstance(unit_price, Money):
            unit_price = Money.of(unit_price, item.get("currency", DEFAULT_CURRENCY))

        item = OrderItem(
            product_id=item["product_id"],
            product_name=item["product_name"],
            sku=item.get("sku"),
            quantity=item["quantity"],
            unit_price=unit_price,
        )

    if not item.unit_price.is_positive():
        raise ValidationError({"unit_price": ["Unit price must be greater than zero"]})
    return item
