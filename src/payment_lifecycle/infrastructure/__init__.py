"""Infrastructure layer - Concrete implementations of ports.

This layer contains:
- Persistence: in-memory and SQLAlchemy payment repositories
- Time Provider: Clock abstraction for testability
- Locking: per-payment in-process locks

Infrastructure adapters implement the ports defined in the application layer.
"""

from payment_lifecycle.infrastructure.lock_provider import InMemoryLockProvider, NoOpLockProvider
from payment_lifecycle.infrastructure.payment_repository import InMemoryPaymentRepository
from payment_lifecycle.infrastructure.sql_payment_repository import (
    SqlAlchemyPaymentRepository,
    create_sql_engine,
)
from payment_lifecycle.infrastructure.time_provider import FixedTimeProvider, SystemTimeProvider

__all__ = [
    "FixedTimeProvider",
    "InMemoryLockProvider",
    "InMemoryPaymentRepository",
    "NoOpLockProvider",
    "SqlAlchemyPaymentRepository",
    "SystemTimeProvider",
    "create_sql_engine",
]
