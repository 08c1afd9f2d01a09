from __future__ import annotations

import copy
from dataclasses import replace
from threading import Lock
from typing import TYPE_CHECKING

from payment_lifecycle.application.ports import PaymentRepository
from payment_lifecycle.domain.entities import PaymentStatus

if TYPE_CHECKING:
    from payment_lifecycle.domain.entities import Payment
    from payment_lifecycle.domain.value_objects import PaymentId


class InMemoryPaymentRepository(PaymentRepository):
    """In-memory payment repository for tests and single-process use.

    Implementation notes:
    - Uses dict with PaymentId as key (requires frozen dataclass)
    - Returns deep copies from get()/list_all() to mimic database detachment
    - Stores deep copies in add() to prevent external mutation
    - A single internal lock makes every method atomic, so
      confirm_if_pending() is a true compare-and-swap

    The internal lock is held only for dictionary access, never across
    caller code.
    """

    def __init__(self) -> None:
        self._payments: dict[PaymentId, Payment] = {}
        self._lock = Lock()

    def add(self, payment: Payment) -> None:
        with self._lock:
            self._payments[payment.id] = copy.deepcopy(payment)

    def get(self, payment_id: PaymentId) -> Payment | None:
        with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None:
                return None
            return copy.deepcopy(payment)

    def list_all(self) -> list[Payment]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._payments.values()]

    def confirm_if_pending(self, payment_id: PaymentId) -> bool:
        with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None or payment.status != PaymentStatus.PENDING:
                return False
            self._payments[payment_id] = replace(payment, status=PaymentStatus.CONFIRMED)
            return True
