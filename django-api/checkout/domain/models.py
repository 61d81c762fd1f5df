"""Domain models for checkout pricing.

These are pure domain objects with no API input rules. Payloads coming from
the backend are validated by the serializers in checkout/stores/payloads before they
are turned into these objects.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import ClassVar

from checkout.domain.value_objects import (
    EventId,
    Money,
    Percent,
    Quantity,
    round_currency,
)

DEFAULT_FEE_PERCENT = Decimal("5.9")
DEFAULT_FEE_FIXED = Decimal("0.35")


class EventType(Enum):
    """Pricing model of an event."""

    TICKETED = "ticketed"
    FUNDRAISER = "fundraiser"


@dataclass(frozen=True)
class Ticket:
    """A ticket tier. For fundraisers ``price`` is the suggested donation."""

    name: str
    price: Money
    minimum_donation: Money = Money.zero()
    description: str = ""

    is_ticket: ClassVar[bool] = True


@dataclass(frozen=True)
class AddOn:
    """An add-on sold alongside tickets. Never discounted."""

    name: str
    price: Money
    minimum_donation: Money = Money.zero()
    description: str = ""

    is_ticket: ClassVar[bool] = False


CatalogItem = Ticket | AddOn


@dataclass(frozen=True)
class Catalog:
    """Tickets and add-ons offered by one event."""

    tickets: tuple[Ticket, ...] = ()
    add_ons: tuple[AddOn, ...] = ()

    def find(self, name: str) -> CatalogItem | None:
        """Return the item called ``name``; tickets win over add-ons."""
        for ticket in self.tickets:
            if ticket.name == name:
                return ticket
        for add_on in self.add_ons:
            if add_on.name == name:
                return add_on
        return None


@dataclass(frozen=True)
class Event:
    """Domain representation of the event being checked out."""

    id: EventId
    title: str
    event_type: EventType
    catalog: Catalog = field(default_factory=Catalog)

    @property
    def is_fundraiser(self) -> bool:
        return self.event_type is EventType.FUNDRAISER


@dataclass(frozen=True)
class CartLine:
    """Quantity of one catalog item, plus the chosen amount for fundraisers."""

    quantity: Quantity
    donation_amount: Decimal | None = None


class Cart(Mapping[str, CartLine]):
    """Mutable cart owned by the caller, keyed by catalog item name."""

    def __init__(self, lines: Mapping[str, CartLine] | None = None) -> None:
        self._lines: dict[str, CartLine] = dict(lines or {})

    def __getitem__(self, name: str) -> CartLine:
        return self._lines[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def set_quantity(
        self, name: str, quantity: int, donation_amount: Decimal | None = None
    ) -> None:
        """Set a line; a quantity of zero or less removes it."""
        if quantity <= 0:
            self._lines.pop(name, None)
            return
        self._lines[name] = CartLine(
            quantity=Quantity(quantity), donation_amount=donation_amount
        )

    def total_quantity(self) -> int:
        return sum(line.quantity.value for line in self._lines.values())

    def snapshot(self) -> Mapping[str, CartLine]:
        """Read-only copy handed to the pricing engine and the purchase call."""
        return MappingProxyType(dict(self._lines))


@dataclass(frozen=True)
class PromoAttribution:
    """A validated promo or competition code held by a checkout."""

    code: str
    discount_percent: Percent = Percent(Decimal("0"))
    owner_name: str | None = None

    @property
    def attribution_label(self) -> str:
        """Name shown as "Supporting: X"."""
        return self.owner_name or self.code


@dataclass(frozen=True)
class PromoValidation:
    """Answer of the promo validation collaborator."""

    valid: bool
    code: str
    discount_percent: Decimal = Decimal("0")
    owner_name: str | None = None

    def to_attribution(self) -> PromoAttribution:
        return PromoAttribution(
            code=self.code,
            discount_percent=Percent(self.discount_percent),
            owner_name=self.owner_name or None,
        )


@dataclass(frozen=True)
class SystemSettings:
    """Platform-wide settings published by the backend."""

    platform_name: str = "Eventsta"
    support_email: str = ""
    platform_fee_percent: Decimal = DEFAULT_FEE_PERCENT
    platform_fee_fixed: Decimal = DEFAULT_FEE_FIXED
    maintenance_mode: bool = False
    disable_registration: bool = False


@dataclass(frozen=True)
class FeeConfig:
    """Platform processing fee: percentage of the net subtotal plus a fixed amount."""

    percent: Decimal = DEFAULT_FEE_PERCENT
    fixed: Decimal = DEFAULT_FEE_FIXED

    @classmethod
    def default(cls) -> "FeeConfig":
        return cls()

    @classmethod
    def from_settings(cls, settings: SystemSettings) -> "FeeConfig":
        return cls(
            percent=settings.platform_fee_percent,
            fixed=settings.platform_fee_fixed,
        )


@dataclass(frozen=True)
class PriceLine:
    """One priced cart line."""

    name: str
    quantity: int
    unit_price: Decimal
    line_subtotal: Decimal
    is_ticket: bool


@dataclass(frozen=True)
class PriceBreakdown:
    """Result of pricing a cart. Recomputed on every change, never stored."""

    items: tuple[PriceLine, ...]
    subtotal: Decimal
    discount: Decimal
    mandatory_fees: Decimal
    donation: Decimal
    final_total: Decimal

    @property
    def subtotal_after_discount(self) -> Decimal:
        return self.subtotal - self.discount

    def fees_payload(self) -> dict[str, Decimal]:
        """Fee snapshot for the purchase call, rounded to cents."""
        return {
            "mandatory": round_currency(self.mandatory_fees),
            "donation": round_currency(self.donation),
        }


@dataclass(frozen=True)
class PurchaseRequest:
    """Snapshot sent to the purchase collaborator on submit."""

    user_id: str
    event_id: EventId
    cart: Mapping[str, CartLine]
    fees: Mapping[str, Decimal]
    recipient_user_id: str | None = None
    promo_code: str | None = None


@dataclass(frozen=True)
class OrderReceipt:
    """Acknowledgement of a committed order."""

    order_id: str | None = None
    client_secret: str | None = None
