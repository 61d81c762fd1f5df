"""Checkout pricing engine.

Pure functions: no I/O, no shared state, safe to call on every cart change.

Order of operations:
    subtotal -> discount (ticket lines, ticketed events only)
    -> fees on the discounted subtotal -> platform donation on top.

Amounts keep full Decimal precision. Rounding to cents happens only in
round_currency / format_currency, at display time or on the wire.
"""

from collections.abc import Mapping
from decimal import ROUND_CEILING, Decimal

from checkout.domain.models import (
    CartLine,
    Catalog,
    CatalogItem,
    EventType,
    FeeConfig,
    PriceBreakdown,
    PriceLine,
    PromoAttribution,
)
from checkout.domain.value_objects import round_currency

ZERO = Decimal("0")
DEFAULT_DONATION_RATE = Decimal("0.10")

__all__ = [
    "default_donation",
    "format_currency",
    "price_cart",
    "resolve_unit_price",
    "round_currency",
]


def resolve_unit_price(
    item: CatalogItem | None, line: CartLine, event_type: EventType
) -> Decimal:
    """Unit price for a cart line.

    Unknown items price at zero. Fundraiser lines pay the chosen amount but
    never less than the item's minimum donation.
    """
    if item is None:
        return ZERO
    if event_type is EventType.FUNDRAISER:
        chosen = line.donation_amount or ZERO
        return max(chosen, item.minimum_donation.amount)
    return item.price.amount


def price_cart(
    cart: Mapping[str, CartLine],
    catalog: Catalog,
    event_type: EventType,
    promo: PromoAttribution | None,
    fee_config: FeeConfig,
    platform_donation: Decimal = ZERO,
) -> PriceBreakdown:
    """Price ``cart`` against ``catalog``.

    Quantities are expected to be non-negative already. Cart keys missing from
    the catalog contribute nothing instead of raising.
    """
    items = []
    for name, line in cart.items():
        item = catalog.find(name)
        unit_price = resolve_unit_price(item, line, event_type)
        items.append(
            PriceLine(
                name=name,
                quantity=line.quantity.value,
                unit_price=unit_price,
                line_subtotal=unit_price * line.quantity.value,
                is_ticket=item is not None and item.is_ticket,
            )
        )

    subtotal = sum((item.line_subtotal for item in items), ZERO)

    discount = ZERO
    if (
        event_type is EventType.TICKETED
        and promo is not None
        and promo.discount_percent.value > 0
    ):
        ticket_subtotal = sum(
            (item.line_subtotal for item in items if item.is_ticket), ZERO
        )
        discount = ticket_subtotal * promo.discount_percent.fraction

    net = subtotal - discount
    mandatory_fees = ZERO
    if net > 0:
        mandatory_fees = net * fee_config.percent / Decimal("100") + fee_config.fixed

    donation = max(platform_donation, ZERO)
    return PriceBreakdown(
        items=tuple(items),
        subtotal=subtotal,
        discount=discount,
        mandatory_fees=mandatory_fees,
        donation=donation,
        final_total=net + mandatory_fees + donation,
    )


def default_donation(subtotal: Decimal, discount: Decimal = ZERO) -> Decimal:
    """Suggested platform donation: 10% of the net subtotal, rounded up to a whole unit."""
    suggested = ((subtotal - discount) * DEFAULT_DONATION_RATE).to_integral_value(
        rounding=ROUND_CEILING
    )
    if suggested <= 0:
        return ZERO
    return suggested


def format_currency(value: Decimal) -> str:
    return f"${round_currency(value):,.2f}"
