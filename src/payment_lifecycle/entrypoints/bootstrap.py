"""Wiring: builds the service graph from Settings. No globals are kept."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from payment_lifecycle.application.lifecycle_manager import PaymentLifecycleManager
from payment_lifecycle.application.service import PaymentService
from payment_lifecycle.infrastructure import (
    InMemoryLockProvider,
    InMemoryPaymentRepository,
    SqlAlchemyPaymentRepository,
    SystemTimeProvider,
    create_sql_engine,
)

if TYPE_CHECKING:
    from payment_lifecycle.application.ports import PaymentRepository
    from payment_lifecycle.config import Settings

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> PaymentRepository:
    if settings.storage_backend == "sql":
        engine = create_sql_engine(settings.database_url)
        repository = SqlAlchemyPaymentRepository(engine)
        repository.create_schema()
        logger.info("Using SQL storage at %s", engine.url.render_as_string(hide_password=True))
        return repository

    logger.info("Using in-memory storage")
    return InMemoryPaymentRepository()


def build_service(settings: Settings) -> PaymentService:
    manager = PaymentLifecycleManager(
        payment_repository=build_repository(settings),
        time_provider=SystemTimeProvider(),
        lock_provider=InMemoryLockProvider(),
    )
    return PaymentService(manager)
