from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from payment_lifecycle.domain.entities import Payment
    from payment_lifecycle.domain.value_objects import PaymentId


class PaymentRepository(ABC):
    """Port for payment persistence.

    Contract:
    - get() returns None if payment does not exist (no exception)
    - Returned entities are detached copies; mutating them changes nothing
    - Each method is atomic on its own; confirm_if_pending() is the
      compare-and-swap that makes confirmation race-safe
    - Any failure of the underlying storage surfaces as StorageError

    Unlike a blind save(), confirm_if_pending() checks and writes the status
    in one step, so two confirmers can never both observe success, even
    across processes when the storage enforces it.
    """

    @abstractmethod
    def add(self, payment: Payment) -> None:
        """Persist a newly created payment.

        Args:
            payment: The payment entity to insert.

        Raises:
            StorageError: If the payment cannot be stored.
        """

    @abstractmethod
    def get(self, payment_id: PaymentId) -> Payment | None:
        """Retrieve a payment by ID.

        Args:
            payment_id: The payment identifier.

        Returns:
            The Payment entity if found, None otherwise.
        """

    @abstractmethod
    def list_all(self) -> list[Payment]:
        """Return every stored payment, in no particular order."""

    @abstractmethod
    def confirm_if_pending(self, payment_id: PaymentId) -> bool:
        """Atomically move a payment from PENDING to CONFIRMED.

        Args:
            payment_id: The payment identifier.

        Returns:
            True if this call applied the update. False if the payment does
            not exist or its status was not PENDING at the time of the write.
        """
