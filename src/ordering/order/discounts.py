"""Order discounts: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class ApplyOrderDiscount:
    """Replace the discount of a pending order with a fixed amount or a percentage."""

    order_id = Identifier(required=True)
    amount = String(max_length=64)
    percentage = Float(min_value=0.0, max_value=100.0)


@ordering.command_handler(part_of=Order)
class ApplyOrderDiscountHandler:
    @handle(ApplyOrderDiscount)
    def apply_order_discount(self, command):
        if (command.amount is None) == (command.percentage is None):
            raise ValidationError({"discount": ["Provide either an amount or a percentage"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        discount = order.apply_discount(amount=command.amount, percentage=command.percentage)
        repo.add(order)
        return discount.amount
