"""
Error taxonomy.

Every error a client can see is an ``OrderingError`` carrying the HTTP status
it maps to. ``ServiceOverloadedError`` is the odd one out: it only travels
between a generation provider and the retry helper.
"""

from typing import Optional


class OrderingError(Exception):
    """Base class for errors rendered as ``{"message": ...}`` responses."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(OrderingError):
    """Malformed or incomplete order submission."""
    status_code = 400
    default_message = "Invalid order data"


class NoPersistenceTargetError(OrderingError):
    """Neither the database nor the ledger is enabled in store settings."""
    status_code = 400
    default_message = (
        "Orders are not being accepted: no order storage is enabled in settings"
    )


class PersistenceError(OrderingError):
    """Database failure while writing an order; the transaction was rolled back."""
    status_code = 500
    default_message = "Server error while creating the order"


class LedgerError(OrderingError):
    """The spreadsheet ledger could not record an order."""
    status_code = 500
    default_message = "Server error while recording the order"


class GenerationError(OrderingError):
    """The generative-text collaborator failed with a non-retryable error."""
    status_code = 500
    default_message = "Failed to generate a recommendation"


class ServiceUnavailableError(OrderingError):
    """A required collaborator is not configured."""
    status_code = 503
    default_message = "Service is not available"


class ServiceOverloadedError(Exception):
    """Transient overload reported by the generative-text API (HTTP 503)."""

    def __init__(self, message: str = "Model is overloaded", status_code: int = 503):
        self.status_code = status_code
        super().__init__(message)
