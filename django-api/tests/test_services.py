"""Unit tests for CheckoutService.

These test orchestration, fallbacks and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

from decimal import Decimal

import pytest

from checkout.domain import Cart, FeeConfig, SystemSettings
from checkout.domain.errors import (
    CheckoutInProgressError,
    EventNotFoundError,
    GatewayError,
    InvalidEventIdError,
)
from checkout.domain.session import CheckoutState
from checkout.services import CheckoutService, build_checkout_service


def ga_cart(quantity: int = 2) -> Cart:
    cart = Cart()
    cart.set_quantity("GA", quantity)
    return cart


@pytest.fixture
def service(store) -> CheckoutService:
    return CheckoutService(store)


class TestFeeConfig:
    """Tests for fee configuration loading."""

    def test_uses_backend_settings(self, service, store):
        """Fees come from the backend settings."""
        store.settings = SystemSettings(
            platform_fee_percent=Decimal("3"), platform_fee_fixed=Decimal("0.30")
        )
        assert service.load_fee_config() == FeeConfig(Decimal("3"), Decimal("0.30"))

    def test_settings_are_cached(self, service, store):
        """Settings are fetched once and then served from the cache."""
        service.load_fee_config()
        service.load_fee_config()
        assert store.settings_calls == 1

    def test_falls_back_to_defaults(self, service, store):
        """A failing settings call never blocks checkout."""
        store.settings_error = GatewayError("HTTP Error: 503 Service Unavailable")
        assert service.load_fee_config() == FeeConfig.default()

    def test_fallback_is_not_cached(self, service, store):
        """After a failure the next load asks the backend again."""
        store.settings_error = GatewayError("down")
        service.load_fee_config()
        store.settings_error = None
        service.load_fee_config()
        assert store.settings_calls == 2


class TestStartSession:
    """Tests for opening a checkout."""

    def test_invalid_id_raises_error(self, service):
        """start_session raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError):
            service.start_session("nope", user_id="u1")

    def test_event_not_found_raises_error(self, service, new_event_id):
        """start_session raises EventNotFoundError when the store returns None."""
        with pytest.raises(EventNotFoundError):
            service.start_session(new_event_id, user_id="u1")

    def test_session_uses_loaded_fees(self, service, store, ticketed_event_id):
        """The session prices with the backend's fee configuration."""
        store.settings = SystemSettings(
            platform_fee_percent=Decimal("0"), platform_fee_fixed=Decimal("2")
        )
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())
        assert session.breakdown().mandatory_fees == Decimal("2")

    def test_initial_promo_code_is_validated(self, service, ticketed_event_id):
        """A promo code passed in is validated and applied."""
        session = service.start_session(
            ticketed_event_id, user_id="u1", cart=ga_cart(), promo_code="save10"
        )
        assert session.promo.code == "SAVE10"
        assert session.breakdown().discount == Decimal("4.00")


class TestApplyPromoCode:
    """Tests for promo code application."""

    def test_invalid_code_reports_error(self, service, ticketed_event_id):
        """An unknown code leaves the cart undiscounted with an inline message."""
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())
        message = service.apply_promo_code(session, "bogus")
        assert message.text == "Invalid Code"
        assert session.promo is None

    def test_invalid_code_keeps_previous(self, service, ticketed_event_id):
        """A rejected code after a valid one keeps the valid attribution."""
        session = service.start_session(
            ticketed_event_id, user_id="u1", cart=ga_cart(), promo_code="SAVE10"
        )
        service.apply_promo_code(session, "BOGUS")
        assert session.promo.code == "SAVE10"

    def test_backend_failure_reports_validation_failed(self, service, store, ticketed_event_id):
        """A failing validation call is reported without raising."""
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())
        store.promo_error = GatewayError("timeout")
        message = service.apply_promo_code(session, "SAVE10")
        assert message.text == "Validation Failed"
        assert session.validating_promo is False

    def test_blank_code_clears(self, service, ticketed_event_id):
        """Blank input clears the promo and returns no message."""
        session = service.start_session(
            ticketed_event_id, user_id="u1", cart=ga_cart(), promo_code="SAVE10"
        )
        assert service.apply_promo_code(session, "") is None
        assert session.promo is None

    def test_fundraiser_attribution_without_discount(self, service, fundraiser_event_id):
        """Fundraisers record the attribution but never discount."""
        cart = Cart()
        cart.set_quantity("Patron", 1, Decimal("20"))
        session = service.start_session(
            fundraiser_event_id, user_id="u1", cart=cart, promo_code="SAVE10"
        )
        assert session.attribution_label == "DJ Nova"
        assert session.breakdown().discount == 0


class TestSubmit:
    """Tests for purchase submission."""

    def test_successful_purchase(self, service, store, ticketed_event_id):
        """The purchase sends the session's fees and refreshes the user."""
        session = service.start_session(
            ticketed_event_id, user_id="u1", cart=ga_cart(), promo_code="SAVE10",
            recipient_user_id="artist-7",
        )
        receipt = service.submit(session)

        assert receipt.order_id == "order-1"
        assert session.state is CheckoutState.SUCCESS
        assert session.tickets_refreshed is True
        assert store.refreshed_users == ["u1"]

        sent = store.purchases[0]
        assert sent.fees == session.last_breakdown.fees_payload()
        assert sent.fees == {"mandatory": Decimal("2.47"), "donation": Decimal("4.00")}
        assert sent.promo_code == "SAVE10"
        assert sent.recipient_user_id == "artist-7"

    def test_failed_purchase_surfaces_message(self, service, store, ticketed_event_id):
        """A rejected purchase moves the session to error with the backend message."""
        store.purchase_error = GatewayError("Tickets sold out")
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())

        assert service.submit(session) is None
        assert session.state is CheckoutState.ERROR
        assert session.error_message == "Tickets sold out"
        assert store.refreshed_users == []

    def test_retry_after_failure(self, service, store, ticketed_event_id):
        """A failed checkout can be retried without rebuilding the cart."""
        store.purchase_error = GatewayError("Card declined")
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())
        service.submit(session)

        store.purchase_error = None
        session.retry()
        receipt = service.submit(session)

        assert receipt is not None
        assert len(store.purchases) == 2
        assert store.purchases[0].fees == store.purchases[1].fees

    def test_refresh_failure_still_succeeds(self, service, store, ticketed_event_id):
        """The order stands even when the user refresh fails."""
        store.refresh_error = GatewayError("HTTP Error: 500 Internal Server Error")
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())

        assert service.submit(session) is not None
        assert session.state is CheckoutState.SUCCESS
        assert session.tickets_refreshed is False

    def test_submit_while_loading_raises(self, service, ticketed_event_id):
        """A second submit during an outstanding purchase is refused."""
        session = service.start_session(ticketed_event_id, user_id="u1", cart=ga_cart())
        session.begin_submit()
        with pytest.raises(CheckoutInProgressError):
            service.submit(session)


class TestQuote:
    """Tests for one-shot quotes."""

    def test_quote_applies_default_donation(self, service, ticketed_event_id):
        """Without an explicit donation the suggestion is charged."""
        quote = service.quote(ticketed_event_id, ga_cart(), promo_code="SAVE10")

        assert quote.default_donation == Decimal("4")
        assert quote.breakdown.donation == Decimal("4")
        assert quote.promo.code == "SAVE10"

    def test_quote_with_explicit_donation(self, service, ticketed_event_id):
        """An explicit donation replaces the suggestion."""
        quote = service.quote(ticketed_event_id, ga_cart(), platform_donation=Decimal("0"))

        assert quote.breakdown.donation == 0
        assert quote.default_donation == Decimal("4")


class TestBuildCheckoutService:
    """Tests for the process-wide service."""

    def test_store_is_shared_across_requests(self, monkeypatch, store):
        """Repeated builds reuse one store and its HTTP client."""
        created = []

        def make_store(**kwargs):
            created.append(kwargs)
            return store

        monkeypatch.setattr("checkout.services.checkout_service.HttpCheckoutStore", make_store)
        build_checkout_service.cache_clear()
        try:
            services = [build_checkout_service() for _ in range(3)]
        finally:
            build_checkout_service.cache_clear()

        assert len(created) == 1
        assert services[0] is services[1] is services[2]
