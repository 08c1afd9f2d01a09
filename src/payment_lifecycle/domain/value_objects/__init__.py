"""Value objects - Immutable objects defined by their attributes."""

from payment_lifecycle.domain.value_objects.customer_id import CustomerId
from payment_lifecycle.domain.value_objects.payment_id import PaymentId

__all__ = [
    "CustomerId",
    "PaymentId",
]
