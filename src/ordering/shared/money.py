"""Money value object: an exact decimal amount tagged with a currency."""

from decimal import Decimal, InvalidOperation

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String, Text

from ordering.domain import ordering
from ordering.settings import DEFAULT_CURRENCY

VALID_CURRENCIES = frozenset(
    {
        "USD",
        "EUR",
        "GBP",
        "JPY",
        "CAD",
        "AUD",
        "CHF",
        "CNY",
        "INR",
        "MXN",
        "BRL",
        "KRW",
        "SGD",
        "HKD",
        "NOK",
        "SEK",
        "DKK",
        "NZD",
        "ZAR",
        "TWD",
    }
)


def to_decimal(value):
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({"amount": [f"Invalid monetary amount: {value!r}"]}) from None
    if not amount.is_finite():
        raise ValidationError({"amount": [f"Invalid monetary amount: {value!r}"]})
    return amount


def _canonical(amount):
    """Render a Decimal without exponent or trailing zeros, so 30 == 30.00."""
    if amount == 0:
        return "0"
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@ordering.value_object
class Money:
    """Value object representing a non-negative monetary amount with currency.

    The amount is kept as canonical decimal text to preserve exact precision
    through persistence; ``value`` returns it as a ``Decimal``. Instances are
    immutable and every arithmetic operation returns a new ``Money``.
    """

    amount: Text(required=True)
    currency: String(max_length=3, default=DEFAULT_CURRENCY)

    @invariant.post
    def amount_must_be_a_non_negative_number(self):
        if self.amount is None:
            return
        if to_decimal(self.amount) < 0:
            raise ValidationError({"amount": [f"Negative amounts are not allowed: {self.amount}"]})

    @invariant.post
    def currency_must_be_valid_iso_4217(self):
        if self.currency not in VALID_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def of(cls, amount, currency=DEFAULT_CURRENCY):
        value = to_decimal(amount)
        if value < 0:
            raise ValidationError({"amount": [f"Negative amounts are not allowed: {amount}"]})
        return cls(amount=_canonical(value), currency=currency)

    @classmethod
    def zero(cls, currency=DEFAULT_CURRENCY):
        return cls(amount="0", currency=currency)

    # -------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------
    @property
    def value(self) -> Decimal:
        return Decimal(self.amount)

    def add(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money.of(self.value + other.value, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        result = self.value - other.value
        if result < 0:
            raise ValidationError(
                {"amount": [f"Subtracting {other} from {self} would produce a negative amount"]}
            )
        return Money.of(result, self.currency)

    def multiply(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise ValidationError({"factor": [f"Money can only be multiplied by an integer, got {factor!r}"]})
        if factor < 0:
            raise ValidationError({"factor": ["Money cannot be multiplied by a negative factor"]})
        return Money.of(self.value * factor, self.currency)

    def percentage_of(self, percentage) -> "Money":
        """Return ``percentage`` percent of this amount, e.g. 30 -> 30 %."""
        return Money.of(self.value * to_decimal(percentage) / Decimal(100), self.currency)

    # -------------------------------------------------------------------
    # Comparisons
    # -------------------------------------------------------------------
    def is_positive(self) -> bool:
        return self.value > 0

    def is_greater_than(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.value > other.value

    def _assert_same_currency(self, other):
        if self.currency != other.currency:
            raise ValidationError({"currency": [f"Currency mismatch: {self.currency} vs {other.currency}"]})

    def __str__(self):
        return f"{self.amount} {self.currency}"
