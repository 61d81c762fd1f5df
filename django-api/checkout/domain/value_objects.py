"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENT = Decimal("0.01")


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, half up. Only used for display and on the wire."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Quantity:
    """Non-negative integer count of a cart line."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Quantity cannot be negative")


@dataclass(frozen=True)
class Percent:
    """Percentage between 0 and 100 inclusive."""

    value: Decimal

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.value <= Decimal("100"):
            raise ValueError("Percent must be between 0 and 100")

    @property
    def fraction(self) -> Decimal:
        return self.value / Decimal("100")

    def __str__(self) -> str:
        return f"{self.value.normalize():f}%"


class PromoCode:
    """Promo codes are compared upper-cased and trimmed."""

    @staticmethod
    def normalize(raw: str | None) -> str:
        return (raw or "").strip().upper()
