"""Failure taxonomy for the Ordering domain.

Every domain operation either succeeds or raises one of:

* ``ValidationError``: malformed input (negative money, quantity out of
  range, blank required strings, currency mismatch).
* ``BusinessRuleViolation``: a well-formed request that would break a domain
  invariant (cart full, discount above the cap, checkout below the minimum).
* ``StateConflictError``: the operation is not legal in the aggregate's
  current lifecycle state.
* ``NotFoundError``: a referenced cart, order, line item or product does
  not exist.

All carry protean's ``{field: [messages]}`` payload. The two domain-specific
kinds subclass ``ValidationError``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

NotFoundError = ObjectNotFoundError


class BusinessRuleViolation(ValidationError):
    """A domain invariant would be violated by the requested change."""


class StateConflictError(ValidationError):
    """The requested operation is not allowed in the current state."""


__all__ = [
    "BusinessRuleViolation",
    "NotFoundError",
    "StateConflictError",
    "ValidationError",
]
