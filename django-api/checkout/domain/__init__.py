from checkout.domain.models import (
    AddOn,
    Cart,
    CartLine,
    Catalog,
    CatalogItem,
    Event,
    EventType,
    FeeConfig,
    OrderReceipt,
    PriceBreakdown,
    PriceLine,
    PromoAttribution,
    PromoValidation,
    PurchaseRequest,
    SystemSettings,
    Ticket,
)
from checkout.domain.value_objects import EventId, Money, Percent, PromoCode, Quantity

__all__ = [
    "AddOn",
    "Cart",
    "CartLine",
    "Catalog",
    "CatalogItem",
    "Event",
    "EventType",
    "FeeConfig",
    "OrderReceipt",
    "PriceBreakdown",
    "PriceLine",
    "PromoAttribution",
    "PromoValidation",
    "PurchaseRequest",
    "SystemSettings",
    "Ticket",
    "EventId",
    "Money",
    "Percent",
    "PromoCode",
    "Quantity",
]
