"""Cart discounts: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class ApplyCartDiscount:
    """Apply a fixed-amount or percentage discount to the cart.

    Exactly one of ``amount`` and ``percentage`` must be set.
    """

    cart_id = Identifier(required=True)
    amount = String(max_length=64)  # Decimal text in the cart's currency
    percentage = Float(min_value=0.0, max_value=100.0)


@ordering.command_handler(part_of=ShoppingCart)
class ApplyCartDiscountHandler:
    @handle(ApplyCartDiscount)
    def apply_cart_discount(self, command):
        if (command.amount is None) == (command.percentage is None):
            raise ValidationError({"discount": ["Provide either a discount amount or a percentage"]})

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        discount = cart.apply_discount(amount=command.amount, percentage=command.percentage)
        repo.add(cart)
        return discount.amount
