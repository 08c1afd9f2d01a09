"""Domain exceptions for payment-lifecycle.

Exception hierarchy:
    DomainException (base)
    ├── Validation Errors
    │   └── ValidationError
    │       ├── InvalidAmountError
    │       ├── InvalidCustomerIdError
    │       └── InvalidPaymentIdError
    ├── Not Found Errors
    │   └── NotFoundError
    │       └── PaymentNotFoundError
    └── State Errors
        └── InvalidStateError
            └── PaymentAlreadyConfirmedError

    StorageError (infrastructure failure, NOT a DomainException)

Every leaf maps to exactly one error kind in the service facade, so callers
can tell "bad input" from "not found" from "already done" from "storage
unavailable".
"""

from __future__ import annotations


class DomainException(Exception):
    """Base exception for all domain-level errors.

    All domain exceptions inherit from this class to enable
    catching domain errors distinctly from infrastructure errors.
    """


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DomainException):
    """Raised when creation input is malformed.

    The caller must correct the input; nothing is retried and no record
    is created.
    """


class InvalidAmountError(ValidationError):
    """Raised when an amount is not a finite, strictly positive decimal.

    Floats are rejected outright: money is never represented in binary
    floating point.
    """


class InvalidCustomerIdError(ValidationError):
    """Raised when a customer ID is empty or whitespace-only after trimming."""


class InvalidPaymentIdError(ValidationError):
    """Raised when a payment ID is not a valid UUID."""


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(DomainException):
    """Raised when a requested record does not exist."""


class PaymentNotFoundError(NotFoundError):
    """Raised when a payment cannot be found by ID.

    This is a client error (HTTP 404); it is surfaced, never retried.
    """


# =============================================================================
# State Errors
# =============================================================================


class InvalidStateError(DomainException):
    """Raised when a transition is not allowed from the current status.

    The only valid transition is Pending → Confirmed, and it happens once.
    """


class PaymentAlreadyConfirmedError(InvalidStateError):
    """Raised when confirmation is attempted on a confirmed payment.

    This is also the ONLY outcome for the losers of a concurrent
    confirmation race: never a crash, never a silent overwrite.
    """


# =============================================================================
# Infrastructure Errors
# =============================================================================


class StorageError(Exception):
    """Raised when the underlying persistence fails.

    Not a DomainException. The manager does not retry;
    retry policy belongs to the calling layer or the storage itself.
    """
