"""Shopping Cart aggregate: accumulates items until they are checked out into an Order.

The cart is a standard CQRS aggregate (not event sourced). Items are unique
per product and capped in number and quantity; a single discount of at most
30 % of the subtotal can be applied.

State Machine:
    ACTIVE → CHECKOUT → COMPLETED
                      → ABANDONED
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String, ValueObject

from ordering.cart.events import (
    CartAbandoned,
    CartCleared,
    CartCreated,
    CartDiscountApplied,
    CartDiscountRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CheckoutCompleted,
    CheckoutStarted,
)
from ordering.domain import ordering
from ordering.errors import BusinessRuleViolation, NotFoundError, StateConflictError
from ordering.settings import DEFAULT_CURRENCY, MIN_CHECKOUT_TOTAL
from ordering.shared.discounts import fits_within_cap, resolve_discount
from ordering.shared.money import Money
from ordering.shared.quantity import Quantity

MAX_DISTINCT_ITEMS = 20


class CartStatus(Enum):
    ACTIVE = "Active"
    CHECKOUT = "Checkout"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"


_VALID_TRANSITIONS = {
    CartStatus.ACTIVE: {CartStatus.CHECKOUT},
    CartStatus.CHECKOUT: {CartStatus.COMPLETED, CartStatus.ABANDONED},
    CartStatus.COMPLETED: set(),  # Terminal
    CartStatus.ABANDONED: set(),  # Terminal
}


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    """One product line in the cart, with the unit price captured when it was added."""

    product_id = Identifier(required=True)
    quantity = ValueObject(Quantity, required=True)
    unit_price = ValueObject(Money, required=True)
    added_at = DateTime()

    @property
    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity.value)


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    discount = ValueObject(Money)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_cannot_exceed_maximum_items(self):
        if len(self.items) > MAX_DISTINCT_ITEMS:
            raise ValidationError({"items": [f"A cart cannot hold more than {MAX_DISTINCT_ITEMS} products"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id, currency=DEFAULT_CURRENCY):
        now = datetime.now(UTC)
        cart = cls(
            customer_id=customer_id,
            status=CartStatus.ACTIVE.value,
            currency=currency,
            discount=Money.zero(currency),
            created_at=now,
            updated_at=now,
        )
        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                customer_id=str(customer_id),
                currency=currency,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> Money:
        subtotal = Money.zero(self.currency)
        for item in self.items:
            subtotal = subtotal.add(item.subtotal)
        return subtotal

    @property
    def total(self) -> Money:
        return self.subtotal.subtract(self.discount or Money.zero(self.currency))

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_active(self, message):
        if CartStatus(self.status) != CartStatus.ACTIVE:
            raise StateConflictError({"status": [f"{message} (cart is {self.status})"]})

    def _assert_can_transition(self, target_status):
        current = CartStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise StateConflictError({"status": [f"Cannot transition cart from {current.value} to {target_status.value}"]})

    def _require_item(self, product_id):
        item = self.item_for(product_id)
        if item is None:
            raise NotFoundError({"product_id": [f"Product {product_id} is not in the cart"]})
        return item

    def _as_price(self, unit_price):
        price = unit_price if isinstance(unit_price, Money) else Money.of(unit_price, self.currency)
        if price.currency != self.currency:
            raise ValidationError({"unit_price": [f"Cart currency is {self.currency}, got {price.currency}"]})
        return price

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price):
        """Add a product to the cart, or merge the quantity if it is already present."""
        self._assert_active("Items can only be added to an active cart")

        quantity = quantity if isinstance(quantity, Quantity) else Quantity(value=quantity)
        unit_price = self._as_price(unit_price)
        existing = self.item_for(product_id)
        now = datetime.now(UTC)

        if existing:
            merged = existing.quantity.add(quantity)
            existing.quantity = merged
            item = existing
        else:
            if len(self.items) >= MAX_DISTINCT_ITEMS:
                raise BusinessRuleViolation(
                    {"items": [f"Cart is full: at most {MAX_DISTINCT_ITEMS} different products allowed"]}
                )
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity.value,
                new_quantity=item.quantity.value,
                unit_price=item.unit_price.amount,
                currency=item.unit_price.currency,
            )
        )
        return item

    def modify_quantity(self, product_id, new_quantity):
        """Replace the quantity of a product. Zero or less removes the line."""
        self._assert_active("Item quantities can only be updated in an active cart")

        if new_quantity <= 0:
            self.remove_item(product_id)
            return

        quantity = Quantity(value=new_quantity)
        item = self._require_item(product_id)
        previous_quantity = item.quantity.value

        with atomic_change(self):
            item.quantity = quantity
            self.updated_at = datetime.now(UTC)
            self._drop_discount_if_over_cap()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity.value,
            )
        )

    def remove_item(self, product_id):
        """Remove a product line from the cart."""
        self._assert_active("Items can only be removed from an active cart")

        item = self._require_item(product_id)

        with atomic_change(self):
            self.remove_items(item)
            self.updated_at = datetime.now(UTC)
            self._drop_discount_if_over_cap()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        """Empty the cart and reset its discount."""
        self._assert_active("Only an active cart can be cleared")

        removed = list(self.items)
        with atomic_change(self):
            for item in removed:
                self.remove_items(item)
            self.discount = Money.zero(self.currency)
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), removed_item_count=len(removed)))

    def _drop_discount_if_over_cap(self):
        # Caller holds atomic_change; a shrinking subtotal can leave the discount over the cap
        if self.discount is None or not self.discount.is_positive():
            return
        if fits_within_cap(self.discount, self.subtotal):
            return

        previous = self.discount
        self.discount = Money.zero(self.currency)
        self.raise_(
            CartDiscountRemoved(
                cart_id=str(self.id),
                previous_amount=previous.amount,
                currency=previous.currency,
            )
        )

    # -------------------------------------------------------------------
    # Discount
    # -------------------------------------------------------------------
    def apply_discount(self, amount=None, percentage=None):
        """Apply a discount (fixed amount or percentage), replacing any previous one."""
        self._assert_active("Discounts can only be applied to an active cart")

        discount = resolve_discount(self.subtotal, amount=amount, percentage=percentage)
        self.discount = discount
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartDiscountApplied(
                cart_id=str(self.id),
                amount=discount.amount,
                currency=discount.currency,
            )
        )
        return discount

    # -------------------------------------------------------------------
    # Cart lifecycle
    # -------------------------------------------------------------------
    def _transition(self, target_status):
        with atomic_change(self):
            self.status = target_status.value
            self.updated_at = datetime.now(UTC)

    def start_checkout(self):
        """Lock the cart for checkout."""
        self._assert_can_transition(CartStatus.CHECKOUT)
        if not self.items:
            raise BusinessRuleViolation({"items": ["Cannot checkout an empty cart"]})

        minimum = Money.of(MIN_CHECKOUT_TOTAL, self.currency)
        total = self.total
        if minimum.is_greater_than(total):
            raise BusinessRuleViolation(
                {"total": [f"Cart total {total} is below the minimum purchase amount of {minimum}"]}
            )

        self._transition(CartStatus.CHECKOUT)

        self.raise_(
            CheckoutStarted(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                total=total.amount,
                currency=total.currency,
            )
        )

    def complete_checkout(self):
        """Mark the cart as converted into an order."""
        self._assert_can_transition(CartStatus.COMPLETED)
        self._transition(CartStatus.COMPLETED)

        self.raise_(
            CheckoutCompleted(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                completed_at=self.updated_at,
            )
        )

    def abandon(self):
        """Abandon a cart that is in checkout."""
        self._assert_can_transition(CartStatus.ABANDONED)
        self._transition(CartStatus.ABANDONED)

        self.raise_(
            CartAbandoned(
                cart_id=str(self.id),
                abandoned_at=self.updated_at,
            )
        )
