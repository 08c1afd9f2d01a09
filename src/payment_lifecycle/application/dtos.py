"""Data Transfer Objects for the service facade."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from payment_lifecycle.domain.entities import Payment

T = TypeVar("T")


class ErrorKind(Enum):
    """Outward failure signals. Each domain failure maps to exactly one."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    STORAGE = "storage"


@dataclass(frozen=True)
class PaymentView:
    """External representation of a payment."""

    id: str
    customer_id: str
    amount: str
    status: str
    created_at: str

    @classmethod
    def from_entity(cls, payment: Payment) -> PaymentView:
        return cls(
            id=str(payment.id),
            customer_id=str(payment.customer_id),
            amount=format(payment.amount, "f"),
            status=payment.status.value,
            created_at=payment.created_at.isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "amount": self.amount,
            "status": self.status,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either a value or an error kind with a message, never both."""

    value: T | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> ServiceResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> ServiceResult[T]:
        return cls(error=error, message=message)
