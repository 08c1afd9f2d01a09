"""SQLAlchemy-backed payment repository.

Schema (table ``payments``):
    id           CHAR(36)   primary key, canonical UUID string
    customer_id  VARCHAR    trimmed customer identifier
    amount       VARCHAR    exact decimal text (no binary floats)
    status       VARCHAR    "Pending" | "Confirmed"
    created_at   DATETIME   stored as naive UTC, returned as aware UTC

Confirmation is a single conditional UPDATE; the database decides the
winner, so this holds across threads and across service instances.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, String, TypeDecorator, create_engine, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from payment_lifecycle.application.ports import PaymentRepository
from payment_lifecycle.domain.entities import Payment, PaymentStatus
from payment_lifecycle.domain.exceptions import StorageError
from payment_lifecycle.domain.value_objects import CustomerId, PaymentId

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class UtcDateTime(TypeDecorator):
    """DateTime that always round-trips as tz-aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("Naive datetimes cannot be stored")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class PaymentRecord(Base):
    """Payment row model."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False, index=True)


def create_sql_engine(database_url: str) -> Engine:
    """Create an engine for the given URL.

    SQLite gets a generous busy timeout so concurrent confirmations wait
    for the write lock instead of failing.
    """
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args = {"timeout": 30, "check_same_thread": False}
    return create_engine(database_url, connect_args=connect_args)


class SqlAlchemyPaymentRepository(PaymentRepository):
    """Payment repository on any SQLAlchemy-supported database.

    Every method runs in its own short transaction. SQLAlchemyError is
    logged and re-raised as StorageError; nothing is retried here.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create the payments table if it does not exist."""
        with self._storage_errors("create schema"):
            Base.metadata.create_all(self._engine)

    def add(self, payment: Payment) -> None:
        with self._storage_errors("add payment"):
            with self._session_factory.begin() as session:
                session.add(_to_record(payment))

    def get(self, payment_id: PaymentId) -> Payment | None:
        with self._storage_errors("get payment"):
            with self._session_factory() as session:
                record = session.get(PaymentRecord, str(payment_id))
                if record is None:
                    return None
                return _to_entity(record)

    def list_all(self) -> list[Payment]:
        with self._storage_errors("list payments"):
            with self._session_factory() as session:
                records = session.scalars(select(PaymentRecord)).all()
                return [_to_entity(r) for r in records]

    def confirm_if_pending(self, payment_id: PaymentId) -> bool:
        statement = (
            update(PaymentRecord)
            .where(
                PaymentRecord.id == str(payment_id),
                PaymentRecord.status == PaymentStatus.PENDING.value,
            )
            .values(status=PaymentStatus.CONFIRMED.value)
            .execution_options(synchronize_session=False)
        )
        with self._storage_errors("confirm payment"):
            with self._session_factory.begin() as session:
                result = session.execute(statement)
                return result.rowcount == 1

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Storage failure during %s: %s", operation, e)
            raise StorageError(f"Storage failure during {operation}") from e


def _to_record(payment: Payment) -> PaymentRecord:
    return PaymentRecord(
        id=str(payment.id),
        customer_id=payment.customer_id.value,
        amount=str(payment.amount),
        status=payment.status.value,
        created_at=payment.created_at,
    )


def _to_entity(record: PaymentRecord) -> Payment:
    return Payment(
        id=PaymentId(value=UUID(record.id)),
        customer_id=CustomerId(value=record.customer_id),
        amount=Decimal(record.amount),
        status=PaymentStatus(record.status),
        created_at=record.created_at,
    )
