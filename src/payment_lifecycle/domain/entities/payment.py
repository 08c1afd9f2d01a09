"""Payment entity with state machine behavior.

State machine:
    - pending → confirmed (confirm)
    - confirmed is terminal (no further transitions)

The initial PENDING status is assigned by create(); it is not a transition.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING

from payment_lifecycle.domain.exceptions import (
    InvalidAmountError,
    PaymentAlreadyConfirmedError,
)
from payment_lifecycle.domain.value_objects import CustomerId, PaymentId

if TYPE_CHECKING:
    from datetime import datetime


class PaymentStatus(Enum):
    """Payment lifecycle statuses. Values are the external representation."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"


@dataclass(frozen=True, slots=True)
class Payment:
    """Payment entity.

    Payment is immutable (frozen dataclass). confirm() returns a new
    instance; persisting it is the repository's job.

    Use the create() factory method to construct new payments with
    validation. The plain constructor is for rehydrating stored records.
    """

    id: PaymentId
    customer_id: CustomerId
    amount: Decimal
    status: PaymentStatus
    created_at: datetime

    @classmethod
    def create(
        cls,
        customer_id: str | CustomerId,
        amount: Decimal | int | str,
        created_at: datetime,
    ) -> Payment:
        """Factory method to create a pending Payment with validation.

        Args:
            customer_id: Customer identifier; trimmed, must be non-empty.
            amount: Positive decimal quantity. int and numeric str are
                accepted and converted; float is rejected.
            created_at: Timestamp of creation (UTC).

        Returns:
            A new Payment in PENDING status with a freshly generated id.

        Raises:
            InvalidCustomerIdError: If customer_id is blank.
            InvalidAmountError: If amount is not a finite decimal > 0.
        """
        if not isinstance(customer_id, CustomerId):
            customer_id = CustomerId(value=customer_id)

        return cls(
            id=PaymentId.generate(),
            customer_id=customer_id,
            amount=parse_amount(amount),
            status=PaymentStatus.PENDING,
            created_at=created_at,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def confirm(self) -> Payment:
        """Confirm the payment.

        Returns:
            New Payment instance in CONFIRMED status.

        Raises:
            PaymentAlreadyConfirmedError: If not in PENDING status.
        """
        if self.status != PaymentStatus.PENDING:
            raise PaymentAlreadyConfirmedError(
                f"Cannot confirm payment {self.id} in status {self.status.value}; "
                f"must be in {PaymentStatus.PENDING.value} status"
            )

        return replace(self, status=PaymentStatus.CONFIRMED)


def parse_amount(amount: Decimal | int | str) -> Decimal:
    """Normalize and validate a money amount.

    Raises:
        InvalidAmountError: For floats, bools, non-numeric strings, NaN,
            infinities, and anything <= 0.
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmountError(
            f"Amount must be a decimal, not {type(amount).__name__}: {amount!r}"
        )

    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, (int, str)):
        try:
            value = Decimal(amount.strip() if isinstance(amount, str) else amount)
        except InvalidOperation as e:
            raise InvalidAmountError(f"Amount is not a valid decimal: {amount!r}") from e
    else:
        raise InvalidAmountError(f"Unsupported amount type: {type(amount).__name__}")

    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value}")

    if value <= 0:
        raise InvalidAmountError(f"Amount must be greater than 0, got {value}")

    return value
