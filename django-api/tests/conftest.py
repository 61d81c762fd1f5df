"""Pytest configuration and shared fixtures."""

import uuid
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from checkout.domain import (
    AddOn,
    Catalog,
    Event,
    EventId,
    EventType,
    Money,
    OrderReceipt,
    PromoValidation,
    PurchaseRequest,
    SystemSettings,
    Ticket,
)
from checkout.domain.errors import GatewayError
from checkout.stores.interfaces import CheckoutStore

TICKETED_EVENT_ID = "7b1c9a4e-2f0d-4c1a-9a57-3e2b6d8f1c01"
FUNDRAISER_EVENT_ID = "c3d2e1f0-5a6b-4c7d-8e9f-0a1b2c3d4e5f"


class InMemoryCheckoutStore(CheckoutStore):
    """CheckoutStore fake: canned answers, records every purchase."""

    def __init__(
        self,
        events: list[Event] | None = None,
        promo_codes: dict[str, PromoValidation] | None = None,
        settings: SystemSettings | None = None,
    ) -> None:
        self.events = {event.id: event for event in events or []}
        self.promo_codes = promo_codes or {}
        self.settings = settings or SystemSettings()
        self.settings_error: GatewayError | None = None
        self.promo_error: GatewayError | None = None
        self.purchase_error: GatewayError | None = None
        self.refresh_error: GatewayError | None = None
        self.settings_calls = 0
        self.purchases: list[PurchaseRequest] = []
        self.refreshed_users: list[str] = []

    def get_system_settings(self) -> SystemSettings:
        self.settings_calls += 1
        if self.settings_error:
            raise self.settings_error
        return self.settings

    def get_event(self, event_id: EventId) -> Event | None:
        return self.events.get(event_id)

    def validate_promo_code(self, event_id: EventId, code: str) -> PromoValidation:
        if self.promo_error:
            raise self.promo_error
        return self.promo_codes.get(code, PromoValidation(valid=False, code=code))

    def purchase_ticket(self, request: PurchaseRequest) -> OrderReceipt:
        self.purchases.append(request)
        if self.purchase_error:
            raise self.purchase_error
        return OrderReceipt(order_id=f"order-{len(self.purchases)}", client_secret="secret")

    def refresh_user(self, user_id: str) -> None:
        if self.refresh_error:
            raise self.refresh_error
        self.refreshed_users.append(user_id)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def ticketed_event() -> Event:
    return Event(
        id=EventId.from_string(TICKETED_EVENT_ID),
        title="Warehouse Night",
        event_type=EventType.TICKETED,
        catalog=Catalog(
            tickets=(
                Ticket(name="GA", price=Money(Decimal("20.00"))),
                Ticket(name="VIP", price=Money(Decimal("55.00"))),
            ),
            add_ons=(AddOn(name="Parking", price=Money(Decimal("10.00"))),),
        ),
    )


@pytest.fixture
def fundraiser_event() -> Event:
    return Event(
        id=EventId.from_string(FUNDRAISER_EVENT_ID),
        title="Community Garden Drive",
        event_type=EventType.FUNDRAISER,
        catalog=Catalog(
            tickets=(
                Ticket(
                    name="Patron",
                    price=Money(Decimal("10.00")),
                    minimum_donation=Money(Decimal("5.00")),
                ),
            ),
            add_ons=(
                AddOn(
                    name="Seed Pack",
                    price=Money(Decimal("8.00")),
                    minimum_donation=Money(Decimal("3.00")),
                ),
            ),
        ),
    )


@pytest.fixture
def promo_codes() -> dict[str, PromoValidation]:
    return {
        "SAVE10": PromoValidation(
            valid=True, code="SAVE10", discount_percent=Decimal("10"), owner_name="DJ Nova"
        ),
        "TRACK": PromoValidation(valid=True, code="TRACK"),
    }


@pytest.fixture
def store(ticketed_event, fundraiser_event, promo_codes) -> InMemoryCheckoutStore:
    return InMemoryCheckoutStore(
        events=[ticketed_event, fundraiser_event], promo_codes=promo_codes
    )


@pytest.fixture
def new_event_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def ticketed_event_id() -> str:
    return TICKETED_EVENT_ID


@pytest.fixture
def fundraiser_event_id() -> str:
    return FUNDRAISER_EVENT_ID
