"""Quantity value object: units of one product on a cart line."""

from protean.fields import Integer

from ordering.domain import ordering
from ordering.errors import BusinessRuleViolation

MAX_UNITS_PER_PRODUCT = 10


@ordering.value_object
class Quantity:
    """A positive unit count, at most 10 per product."""

    value: Integer(required=True, min_value=1, max_value=MAX_UNITS_PER_PRODUCT)

    def add(self, other: "Quantity") -> "Quantity":
        """Merge two quantities. The sum must stay within the per-product limit."""
        total = self.value + other.value
        if total > MAX_UNITS_PER_PRODUCT:
            raise BusinessRuleViolation(
                {"quantity": [f"Maximum {MAX_UNITS_PER_PRODUCT} units allowed per product, got {total}"]}
            )
        return Quantity(value=total)
