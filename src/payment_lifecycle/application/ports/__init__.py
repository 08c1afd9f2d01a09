"""Ports - Abstract interfaces for external dependencies.

Ports define the contracts that infrastructure adapters must implement.
This allows the application layer to remain decoupled from concrete implementations.
"""

from payment_lifecycle.application.ports.lock_provider import LockProvider
from payment_lifecycle.application.ports.payment_repository import PaymentRepository
from payment_lifecycle.application.ports.time_provider import TimeProvider

__all__ = [
    "LockProvider",
    "PaymentRepository",
    "TimeProvider",
]
