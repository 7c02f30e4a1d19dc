"""Domain error taxonomy shared by every module.

Services raise subclasses of these kinds; they carry a human-readable
``message`` and, for validation failures, a list of per-field ``errors``.
Mapping a kind to an HTTP status belongs to the API layer
(``modules.core.exception_handler``), never to the services.
"""

from __future__ import annotations

from typing import Dict, List, Optional


class DomainError(Exception):
    """Base class for classified business / storage failures."""

    default_message = "Request could not be completed."

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationFailed(DomainError):
    """Malformed or out-of-range input. Never retried."""

    default_message = "Validation failed."


class EntityNotFound(DomainError):
    """The referenced entity does not exist."""

    default_message = "Resource not found."


class Conflict(DomainError):
    """A uniqueness rule would be violated."""

    default_message = "Resource already exists."


class StorageUnavailable(DomainError):
    """The storage layer is unreachable or timed out. Callers may retry."""

    default_message = "Storage is temporarily unavailable."
