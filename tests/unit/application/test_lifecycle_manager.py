"""Tests for PaymentLifecycleManager.

Tests cover:
- Create: PENDING record persisted, validation failures persist nothing
- List: newest first, id tie-break, snapshot semantics
- Confirm: success, not found, already confirmed, repeated failures
- Race: N concurrent confirmers → exactly one winner, N-1 InvalidStateError,
  with per-id locking and with the compare-and-swap alone
- StorageError propagates without retry
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from payment_lifecycle.application.lifecycle_manager import PaymentLifecycleManager
from payment_lifecycle.application.ports import LockProvider, PaymentRepository
from payment_lifecycle.domain.entities import Payment, PaymentStatus
from payment_lifecycle.domain.exceptions import (
    InvalidAmountError,
    InvalidCustomerIdError,
    InvalidStateError,
    NotFoundError,
    PaymentAlreadyConfirmedError,
    PaymentNotFoundError,
    StorageError,
    ValidationError,
)
from payment_lifecycle.domain.value_objects import PaymentId
from payment_lifecycle.infrastructure.lock_provider import InMemoryLockProvider, NoOpLockProvider
from payment_lifecycle.infrastructure.payment_repository import InMemoryPaymentRepository
from payment_lifecycle.infrastructure.sql_payment_repository import (
    SqlAlchemyPaymentRepository,
    create_sql_engine,
)
from payment_lifecycle.infrastructure.time_provider import FixedTimeProvider

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def payment_repository() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest.fixture
def manager(
    payment_repository: InMemoryPaymentRepository,
    time_provider: FixedTimeProvider,
) -> PaymentLifecycleManager:
    """Use NoOpLockProvider for single-threaded tests."""
    return PaymentLifecycleManager(
        payment_repository=payment_repository,
        time_provider=time_provider,
        lock_provider=NoOpLockProvider(),
    )


class FailingPaymentRepository(PaymentRepository):
    """Repository whose storage is down. Counts calls to prove no retry."""

    def __init__(self) -> None:
        self.calls = 0

    def _fail(self) -> None:
        self.calls += 1
        raise StorageError("database unavailable")

    def add(self, payment: Payment) -> None:
        self._fail()

    def get(self, payment_id: PaymentId) -> Payment | None:
        self._fail()
        return None

    def list_all(self) -> list[Payment]:
        self._fail()
        return []

    def confirm_if_pending(self, payment_id: PaymentId) -> bool:
        self._fail()
        return False


class StaleReadPaymentRepository(InMemoryPaymentRepository):
    """Simulates a competitor confirming between our read and our write."""

    def get(self, payment_id: PaymentId) -> Payment | None:
        payment = super().get(payment_id)
        super().confirm_if_pending(payment_id)
        return payment


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    def test_create_returns_pending_payment(
        self, manager: PaymentLifecycleManager, fixed_time: datetime
    ) -> None:
        payment = manager.create("cust-1", Decimal("49.99"))

        assert payment.status == PaymentStatus.PENDING
        assert payment.customer_id.value == "cust-1"
        assert payment.amount == Decimal("49.99")
        assert payment.created_at == fixed_time

    def test_create_persists_payment(
        self, manager: PaymentLifecycleManager, payment_repository: InMemoryPaymentRepository
    ) -> None:
        payment = manager.create("cust-1", Decimal("10"))

        assert payment_repository.get(payment.id) == payment

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("-0.01")])
    def test_non_positive_amount_raises_and_persists_nothing(
        self,
        manager: PaymentLifecycleManager,
        payment_repository: InMemoryPaymentRepository,
        amount: Decimal,
    ) -> None:
        with pytest.raises(InvalidAmountError):
            manager.create("cust-1", amount)

        assert payment_repository.list_all() == []

    @pytest.mark.parametrize("customer_id", ["", "   "])
    def test_blank_customer_id_raises_and_persists_nothing(
        self,
        manager: PaymentLifecycleManager,
        payment_repository: InMemoryPaymentRepository,
        customer_id: str,
    ) -> None:
        with pytest.raises(InvalidCustomerIdError):
            manager.create(customer_id, Decimal("10"))

        assert payment_repository.list_all() == []

    def test_validation_failures_share_a_base_class(self, manager: PaymentLifecycleManager) -> None:
        with pytest.raises(ValidationError):
            manager.create("cust-1", Decimal("0"))
        with pytest.raises(ValidationError):
            manager.create(" ", Decimal("1"))


# =============================================================================
# List
# =============================================================================


class TestList:
    def test_list_empty(self, manager: PaymentLifecycleManager) -> None:
        assert manager.list_all() == []

    def test_list_newest_first(
        self, manager: PaymentLifecycleManager, time_provider: FixedTimeProvider
    ) -> None:
        a = manager.create("cust-a", Decimal("1"))
        time_provider.advance(timedelta(seconds=1))
        b = manager.create("cust-b", Decimal("2"))

        assert [p.id for p in manager.list_all()] == [b.id, a.id]

    def test_list_breaks_timestamp_ties_by_id_ascending(
        self, manager: PaymentLifecycleManager, time_provider: FixedTimeProvider
    ) -> None:
        older = manager.create("cust-0", Decimal("1"))
        time_provider.advance(timedelta(seconds=1))
        same_time = [manager.create(f"cust-{i}", Decimal("1")) for i in range(1, 6)]

        result = manager.list_all()

        expected_ties = sorted((p.id for p in same_time), key=str)
        assert [p.id for p in result] == [*expected_ties, older.id]

    def test_list_order_is_deterministic(
        self, manager: PaymentLifecycleManager
    ) -> None:
        for i in range(5):
            manager.create(f"cust-{i}", Decimal("1"))

        assert manager.list_all() == manager.list_all()

    def test_list_is_a_snapshot(self, manager: PaymentLifecycleManager) -> None:
        manager.create("cust-1", Decimal("1"))
        snapshot = manager.list_all()

        manager.create("cust-2", Decimal("1"))

        assert len(snapshot) == 1
        assert len(manager.list_all()) == 2


# =============================================================================
# Confirm
# =============================================================================


class TestConfirm:
    def test_confirm_pending_payment(self, manager: PaymentLifecycleManager) -> None:
        payment = manager.create("cust-1", Decimal("10"))

        confirmed = manager.confirm(payment.id)

        assert confirmed.status == PaymentStatus.CONFIRMED
        assert confirmed.id == payment.id
        assert confirmed.amount == payment.amount

    def test_confirm_persists_status(
        self, manager: PaymentLifecycleManager, payment_repository: InMemoryPaymentRepository
    ) -> None:
        payment = manager.create("cust-1", Decimal("10"))

        manager.confirm(payment.id)

        stored = payment_repository.get(payment.id)
        assert stored is not None
        assert stored.status == PaymentStatus.CONFIRMED

    def test_confirm_unknown_id_raises_not_found(self, manager: PaymentLifecycleManager) -> None:
        with pytest.raises(PaymentNotFoundError):
            manager.confirm(PaymentId.generate())

    def test_not_found_is_not_found_error(self, manager: PaymentLifecycleManager) -> None:
        with pytest.raises(NotFoundError):
            manager.confirm(PaymentId.generate())

    def test_unknown_ids_do_not_accumulate_locks(
        self,
        payment_repository: InMemoryPaymentRepository,
        time_provider: FixedTimeProvider,
        lock_provider: InMemoryLockProvider,
    ) -> None:
        locking_manager = PaymentLifecycleManager(
            payment_repository=payment_repository,
            time_provider=time_provider,
            lock_provider=lock_provider,
        )
        confirmed = locking_manager.create("cust-1", Decimal("10"))
        locking_manager.confirm(confirmed.id)

        for _ in range(1000):
            with pytest.raises(PaymentNotFoundError):
                locking_manager.confirm(PaymentId.generate())

        assert lock_provider._locks == {}

    def test_second_confirm_raises_invalid_state(self, manager: PaymentLifecycleManager) -> None:
        payment = manager.create("cust-1", Decimal("10"))
        manager.confirm(payment.id)

        with pytest.raises(PaymentAlreadyConfirmedError):
            manager.confirm(payment.id)

    def test_repeated_confirms_always_fail_the_same_way(
        self, manager: PaymentLifecycleManager
    ) -> None:
        payment = manager.create("cust-1", Decimal("10"))
        manager.confirm(payment.id)

        for _ in range(5):
            with pytest.raises(InvalidStateError):
                manager.confirm(payment.id)

    def test_lost_conditional_update_raises_invalid_state(
        self, time_provider: FixedTimeProvider
    ) -> None:
        repository = StaleReadPaymentRepository()
        manager = PaymentLifecycleManager(
            payment_repository=repository,
            time_provider=time_provider,
            lock_provider=NoOpLockProvider(),
        )
        payment = manager.create("cust-1", Decimal("10"))

        with pytest.raises(PaymentAlreadyConfirmedError):
            manager.confirm(payment.id)

    def test_end_to_end_scenario(self, manager: PaymentLifecycleManager) -> None:
        created = manager.create("cust-1", Decimal("49.99"))
        assert created.status == PaymentStatus.PENDING

        confirmed = manager.confirm(created.id)
        assert confirmed.id == created.id
        assert confirmed.status == PaymentStatus.CONFIRMED

        listed = manager.list_all()
        assert listed == [confirmed]


# =============================================================================
# Concurrency
# =============================================================================


def _race(manager: PaymentLifecycleManager, payment_id: PaymentId, workers: int) -> list[str]:
    barrier = threading.Barrier(workers)

    def worker(_: int) -> str:
        barrier.wait()
        try:
            manager.confirm(payment_id)
        except InvalidStateError:
            return "invalid_state"
        return "success"

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(worker, range(workers)))


class TestConfirmConcurrency:
    @pytest.mark.parametrize("lock_provider_cls", [InMemoryLockProvider, NoOpLockProvider])
    @pytest.mark.parametrize("workers", [2, 8])
    def test_exactly_one_confirmer_wins_in_memory(
        self,
        time_provider: FixedTimeProvider,
        lock_provider_cls: type[LockProvider],
        workers: int,
    ) -> None:
        repository = InMemoryPaymentRepository()
        manager = PaymentLifecycleManager(
            payment_repository=repository,
            time_provider=time_provider,
            lock_provider=lock_provider_cls(),
        )
        payment = manager.create("cust-1", Decimal("10"))

        results = _race(manager, payment.id, workers)

        assert results.count("success") == 1
        assert results.count("invalid_state") == workers - 1
        stored = repository.get(payment.id)
        assert stored is not None
        assert stored.status == PaymentStatus.CONFIRMED

    def test_exactly_one_confirmer_wins_with_sql_storage(
        self, tmp_path: Path, time_provider: FixedTimeProvider
    ) -> None:
        engine = create_sql_engine(f"sqlite:///{tmp_path / 'race.db'}")
        repository = SqlAlchemyPaymentRepository(engine)
        repository.create_schema()
        manager = PaymentLifecycleManager(
            payment_repository=repository,
            time_provider=time_provider,
            lock_provider=NoOpLockProvider(),
        )
        payment = manager.create("cust-1", Decimal("10"))

        try:
            results = _race(manager, payment.id, workers=5)
        finally:
            engine.dispose()

        assert results.count("success") == 1
        assert results.count("invalid_state") == 4

    def test_confirms_of_different_payments_all_succeed(
        self, time_provider: FixedTimeProvider
    ) -> None:
        manager = PaymentLifecycleManager(
            payment_repository=InMemoryPaymentRepository(),
            time_provider=time_provider,
            lock_provider=InMemoryLockProvider(),
        )
        payments = [manager.create(f"cust-{i}", Decimal("1")) for i in range(5)]

        with ThreadPoolExecutor(max_workers=5) as executor:
            confirmed = list(executor.map(lambda p: manager.confirm(p.id), payments))

        assert all(p.status == PaymentStatus.CONFIRMED for p in confirmed)


# =============================================================================
# Storage Failures
# =============================================================================


class TestStorageFailures:
    @pytest.fixture
    def failing_repository(self) -> FailingPaymentRepository:
        return FailingPaymentRepository()

    @pytest.fixture
    def failing_manager(
        self, failing_repository: FailingPaymentRepository, time_provider: FixedTimeProvider
    ) -> PaymentLifecycleManager:
        return PaymentLifecycleManager(
            payment_repository=failing_repository,
            time_provider=time_provider,
            lock_provider=NoOpLockProvider(),
        )

    def test_create_propagates_storage_error(
        self, failing_manager: PaymentLifecycleManager, failing_repository: FailingPaymentRepository
    ) -> None:
        with pytest.raises(StorageError):
            failing_manager.create("cust-1", Decimal("1"))

        assert failing_repository.calls == 1

    def test_list_propagates_storage_error(self, failing_manager: PaymentLifecycleManager) -> None:
        with pytest.raises(StorageError):
            failing_manager.list_all()

    def test_confirm_propagates_storage_error(
        self, failing_manager: PaymentLifecycleManager, failing_repository: FailingPaymentRepository
    ) -> None:
        with pytest.raises(StorageError):
            failing_manager.confirm(PaymentId.generate())

        assert failing_repository.calls == 1
