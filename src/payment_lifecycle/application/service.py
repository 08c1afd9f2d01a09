from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from payment_lifecycle.application.dtos import ErrorKind, PaymentView, ServiceResult
from payment_lifecycle.domain.exceptions import (
    InvalidPaymentIdError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from payment_lifecycle.domain.value_objects import PaymentId

if TYPE_CHECKING:
    from decimal import Decimal

    from payment_lifecycle.application.lifecycle_manager import PaymentLifecycleManager

logger = logging.getLogger(__name__)


class PaymentService:
    """Facade exposing create/list/confirm to the request-handling layer.

    No business logic lives here. Every call returns a ServiceResult, so
    callers branch on ErrorKind instead of catching exceptions:

        ValidationError   -> VALIDATION
        NotFoundError     -> NOT_FOUND
        InvalidStateError -> INVALID_STATE
        StorageError      -> STORAGE

    Any other exception is a bug and propagates.
    """

    def __init__(self, manager: PaymentLifecycleManager) -> None:
        self._manager = manager

    def create_payment(
        self, customer_id: str, amount: Decimal | int | str
    ) -> ServiceResult[PaymentView]:
        try:
            payment = self._manager.create(customer_id, amount)
        except ValidationError as e:
            return ServiceResult.failure(ErrorKind.VALIDATION, str(e))
        except StorageError as e:
            return self._storage_failure(e)
        return ServiceResult.success(PaymentView.from_entity(payment))

    def list_payments(self) -> ServiceResult[list[PaymentView]]:
        try:
            payments = self._manager.list_all()
        except StorageError as e:
            return self._storage_failure(e)
        return ServiceResult.success([PaymentView.from_entity(p) for p in payments])

    def confirm_payment(self, payment_id: str) -> ServiceResult[PaymentView]:
        """Confirm by raw id string.

        A malformed id is reported as NOT_FOUND: no record can carry it.
        """
        try:
            parsed_id = PaymentId.from_string(payment_id)
        except InvalidPaymentIdError:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Payment not found: {payment_id}")

        try:
            payment = self._manager.confirm(parsed_id)
        except NotFoundError as e:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, str(e))
        except InvalidStateError as e:
            return ServiceResult.failure(ErrorKind.INVALID_STATE, str(e))
        except StorageError as e:
            return self._storage_failure(e)
        return ServiceResult.success(PaymentView.from_entity(payment))

    @staticmethod
    def _storage_failure(error: StorageError) -> ServiceResult:
        logger.warning("Storage unavailable: %s", error)
        return ServiceResult.failure(ErrorKind.STORAGE, str(error))
