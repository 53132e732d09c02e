"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

``ConsistencyViolation`` is the exception to that rule: it signals a broken
stock invariant upstream and must surface as an internal error.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidQuantityError(ValidationError):
    """A quantity was zero, negative or not an integer."""


class InsufficientStockError(ValidationError):
    """Not enough unreserved stock to satisfy a request."""

    def __init__(self, message: str, product_id: str | None = None) -> None:
        super().__init__(message)
        self.product_id = product_id


class ProductUnavailableError(ValidationError):
    """The product is deactivated, discontinued or not currently sellable."""


class InvalidTransitionError(ValidationError):
    """The order status graph does not allow the requested move."""


class ReturnWindowExpiredError(ValidationError):
    """A return was requested after the return window closed."""


class RefundExceedsTotalError(ValidationError):
    """The refund would exceed what is still refundable on the order."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ConcurrentModificationError(DomainException):
    """The document changed between read and write."""


class DuplicateOrderNumberError(DomainException):
    """An order with the same order number already exists."""


class ConsistencyViolation(Exception):
    """Committed stock exceeded on-hand quantity.

    Not a DomainException: it is never shown as a user error and never
    retried automatically.
    """
