"""Product domain exceptions.

Raised by the Service Layer (and classified by the repository) when
business rules are violated.  The project exception handler translates
them into HTTP responses; services never know about status codes.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, EntityNotFound, ValidationFailed


class ProductAlreadyExists(Conflict):
    """A product with the same SKU already exists."""

    default_message = "A product with this SKU already exists."


class ProductNotFound(EntityNotFound):
    """The requested product does not exist."""

    default_message = "Product not found."


class ProductValidationError(ValidationFailed):
    """Input violates a product invariant (price, quantity, ...)."""


class InsufficientStock(ProductValidationError):
    """A stock change would leave the quantity negative."""

    default_message = "Resulting quantity cannot be negative."
