"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartCreated:
    """A new, empty shopping cart was opened for a customer."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the shopping cart, or its quantity increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price = String(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart item was replaced."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """An item was removed from the shopping cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """All items were removed from the shopping cart and its discount reset."""

    __version__ = 1

    cart_id = Identifier(required=True)
    removed_item_count = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartDiscountApplied:
    """A discount replaced any previous discount on the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    amount = String(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="ShoppingCart")
class CartDiscountRemoved:
    """The cart's discount no longer fit the reduced subtotal and was dropped."""

    __version__ = 1

    cart_id = Identifier(required=True)
    previous_amount = String(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="ShoppingCart")
class CheckoutStarted:
    """The cart was locked for checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total = String(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="ShoppingCart")
class CheckoutCompleted:
    """The cart was converted into an order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@ordering.event(part_of="ShoppingCart")
class CartAbandoned:
    """Checkout was abandoned; the cart is closed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    abandoned_at = DateTime(required=True)
