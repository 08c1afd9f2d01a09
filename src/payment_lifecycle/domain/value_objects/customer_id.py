from __future__ import annotations

from dataclasses import dataclass

from payment_lifecycle.domain.exceptions import InvalidCustomerIdError

MAX_LENGTH = 128


@dataclass(frozen=True, slots=True)
class CustomerId:
    """Domain value object for the customer a payment belongs to.

    Rules:
      - Whitespace is trimmed (normalization)
      - Non-empty after trimming, max 128 chars
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidCustomerIdError(
                f"Customer ID must be a string, got {type(self.value).__name__}"
            )

        normalized = self.value.strip()

        if normalized != self.value:
            object.__setattr__(self, "value", normalized)

        if not normalized:
            raise InvalidCustomerIdError("Customer ID cannot be empty")

        if len(normalized) > MAX_LENGTH:
            raise InvalidCustomerIdError(f"Customer ID cannot exceed {MAX_LENGTH} characters")

    def __str__(self) -> str:
        return self.value
