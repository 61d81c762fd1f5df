"""Store interfaces (repository pattern).

The backend REST API is the system of record for events, settings, promo
codes and orders. Stores must be swappable and return domain models.
Implementations raise GatewayError for any failed call.
"""

from abc import ABC, abstractmethod

from checkout.domain import (
    Event,
    EventId,
    OrderReceipt,
    PromoValidation,
    PurchaseRequest,
    SystemSettings,
)


class CheckoutStore(ABC):
    """Interface for the backend calls a checkout depends on."""

    @abstractmethod
    def get_system_settings(self) -> SystemSettings:
        """Return platform settings, including the fee configuration."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event with its catalog, or None if not found."""
        ...

    @abstractmethod
    def validate_promo_code(self, event_id: EventId, code: str) -> PromoValidation:
        """Check a promo code against an event."""
        ...

    @abstractmethod
    def purchase_ticket(self, request: PurchaseRequest) -> OrderReceipt:
        """Commit an order using the fees computed by the client."""
        ...

    @abstractmethod
    def refresh_user(self, user_id: str) -> None:
        """Reload the purchaser so newly issued tickets become visible."""
        ...
