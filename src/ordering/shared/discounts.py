"""Discount policy shared by the cart and the order.

A discount is either a fixed amount or a percentage of the subtotal, and may
never exceed 30 % of that subtotal.
"""

from decimal import Decimal

from protean.exceptions import ValidationError

from ordering.errors import BusinessRuleViolation
from ordering.shared.money import Money, to_decimal

MAX_DISCOUNT_PERCENTAGE = Decimal("30")


def resolve_discount(subtotal: Money, amount=None, percentage=None) -> Money:
    """Turn an amount or a percentage into a discount valid for ``subtotal``.

    Exactly one of ``amount`` (a ``Money`` or a number in the subtotal's
    currency) and ``percentage`` must be given.
    """
    if (amount is None) == (percentage is None):
        raise ValidationError({"discount": ["Provide either a discount amount or a percentage"]})

    if percentage is not None:
        pct = to_decimal(percentage)
        if pct < 0 or pct > 100:
            raise ValidationError({"percentage": [f"Percentage must be between 0 and 100, got {percentage}"]})
        discount = subtotal.percentage_of(pct)
    elif isinstance(amount, Money):
        discount = amount
    else:
        discount = Money.of(amount, subtotal.currency)

    limit = subtotal.percentage_of(MAX_DISCOUNT_PERCENTAGE)
    if discount.is_greater_than(limit):
        raise BusinessRuleViolation(
            {"discount": [f"Discount of {discount} exceeds 30% of the subtotal (limit {limit})"]}
        )
    return discount


def fits_within_cap(discount: Money, subtotal: Money) -> bool:
    """Whether an already-applied discount is still within the cap for ``subtotal``."""
    return not discount.is_greater_than(subtotal.percentage_of(MAX_DISCOUNT_PERCENTAGE))
