from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from payment_lifecycle.domain.entities import Payment
from payment_lifecycle.domain.exceptions import (
    PaymentAlreadyConfirmedError,
    PaymentNotFoundError,
)

if TYPE_CHECKING:
    from decimal import Decimal

    from payment_lifecycle.application.ports import (
        LockProvider,
        PaymentRepository,
        TimeProvider,
    )
    from payment_lifecycle.domain.value_objects import PaymentId

logger = logging.getLogger(__name__)


class PaymentLifecycleManager:
    """Creates payments and drives them through Pending → Confirmed.

    Responsibilities:
    - Validate creation input and build the record (via Payment.create)
    - Stamp created_at from the injected clock
    - Produce ordered snapshots for listing
    - Confirm through the repository's compare-and-swap, inside a per-payment lock

    All storage, time, and locking concerns are injected; the manager holds
    no global state. StorageError from the repository propagates untouched.
    """

    def __init__(
        self,
        payment_repository: PaymentRepository,
        time_provider: TimeProvider,
        lock_provider: LockProvider,
    ) -> None:
        self._payment_repo = payment_repository
        self._time_provider = time_provider
        self._lock_provider = lock_provider

    def create(self, customer_id: str, amount: Decimal | int | str) -> Payment:
        """Create and persist a new pending payment.

        Raises:
            InvalidCustomerIdError: customer_id is empty after trimming.
            InvalidAmountError: amount is not a positive decimal.
            StorageError: The record could not be stored.
        """
        payment = Payment.create(
            customer_id=customer_id,
            amount=amount,
            created_at=self._time_provider.now(),
        )
        self._payment_repo.add(payment)

        logger.info("Created payment %s for customer %s", payment.id, payment.customer_id)
        return payment

    def list_all(self) -> list[Payment]:
        """Return all payments, newest first.

        Ties on created_at are broken by id ascending so the order never
        depends on storage iteration order.
        """
        payments = self._payment_repo.list_all()
        payments.sort(key=lambda p: str(p.id))
        payments.sort(key=lambda p: p.created_at, reverse=True)
        return payments

    def confirm(self, payment_id: PaymentId) -> Payment:
        """Confirm a pending payment.

        Raises:
            PaymentNotFoundError: No payment with this id.
            PaymentAlreadyConfirmedError: Already confirmed, including when
                another caller won a concurrent confirmation.
            StorageError: The storage failed during the read or the update.
        """
        with self._lock_provider.acquire(str(payment_id)):
            return self._confirm_within_lock(payment_id)

    def _confirm_within_lock(self, payment_id: PaymentId) -> Payment:
        payment = self._payment_repo.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError(f"Payment not found: {payment_id}")

        # Raises PaymentAlreadyConfirmedError for non-pending records
        confirmed = payment.confirm()

        if not self._payment_repo.confirm_if_pending(payment_id):
            logger.warning("Lost confirmation race for payment %s", payment_id)
            raise PaymentAlreadyConfirmedError(f"Payment already confirmed: {payment_id}")

        logger.info("Confirmed payment %s", payment_id)
        return confirmed
