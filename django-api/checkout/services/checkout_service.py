"""Checkout service - orchestration around the pricing engine.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Pricing itself is pure and lives in checkout.domain.pricing; this module only
gathers its inputs from the backend and moves the session through its states.
"""

import functools
from dataclasses import dataclass
from decimal import Decimal

import structlog
from django.conf import settings
from django.core.cache import cache

from checkout.domain import Cart, EventId, FeeConfig, OrderReceipt, PriceBreakdown
from checkout.domain.errors import EventNotFoundError, GatewayError, InvalidEventIdError
from checkout.domain.models import PromoAttribution
from checkout.domain.pricing import default_donation
from checkout.domain.session import CheckoutSession, PromoMessage
from checkout.stores.http_store import HttpCheckoutStore
from checkout.stores.interfaces import CheckoutStore

logger = structlog.get_logger()

SETTINGS_CACHE_KEY = "checkout:system-settings"


@dataclass(frozen=True)
class Quote:
    """Priced cart returned to HTTP callers."""

    breakdown: PriceBreakdown
    default_donation: Decimal
    promo: PromoAttribution | None
    promo_message: PromoMessage | None


class CheckoutService:
    """Service for pricing and submitting checkouts."""

    def __init__(self, store: CheckoutStore) -> None:
        self._store = store

    def load_fee_config(self) -> FeeConfig:
        """Return the platform fee configuration.

        Never raises: when the backend cannot be reached the default fees
        apply so checkout is not blocked.
        """
        system_settings = cache.get(SETTINGS_CACHE_KEY)
        if system_settings is None:
            try:
                system_settings = self._store.get_system_settings()
            except GatewayError as exc:
                logger.warning("fee_config_fallback", error=exc.message)
                return FeeConfig.default()
            cache.set(
                SETTINGS_CACHE_KEY,
                system_settings,
                timeout=settings.CHECKOUT_SETTINGS_CACHE_TTL,
            )
        return FeeConfig.from_settings(system_settings)

    def start_session(
        self,
        event_id: str,
        user_id: str,
        cart: Cart | None = None,
        recipient_user_id: str | None = None,
        promo_code: str | None = None,
    ) -> CheckoutSession:
        """Open a checkout for an event.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            GatewayError: If the event cannot be loaded.
        """
        try:
            parsed_id = EventId.from_string(event_id)
        except ValueError:
            raise InvalidEventIdError() from None

        event = self._store.get_event(parsed_id)
        if event is None:
            raise EventNotFoundError(event_id)

        session = CheckoutSession(
            event=event,
            user_id=user_id,
            cart=cart,
            recipient_user_id=recipient_user_id,
        )
        session.apply_fee_config(self.load_fee_config())
        if promo_code:
            self.apply_promo_code(session, promo_code)
        return session

    def apply_promo_code(
        self, session: CheckoutSession, raw_code: str | None
    ) -> PromoMessage | None:
        """Validate a typed code and apply it to the session.

        Blank input clears the promo. A rejected code keeps whatever promo was
        applied before.
        """
        request = session.begin_promo_validation(raw_code)
        if request is None:
            return None

        log = logger.bind(event_id=str(session.event.id), code=request.code)
        try:
            result = self._store.validate_promo_code(session.event.id, request.code)
        except GatewayError as exc:
            log.warning("promo_validation_failed", error=exc.message)
            session.fail_promo_validation(request)
            return session.promo_message

        if not session.complete_promo_validation(request, result):
            log.info("promo_validation_stale")
        elif not result.valid:
            log.info("promo_code_rejected")
        return session.promo_message

    def submit(self, session: CheckoutSession) -> OrderReceipt | None:
        """Send the order with the fees the session computed.

        Returns the receipt, or None when the backend rejected the purchase
        (the session is then in the error state with the backend's message).

        Raises:
            CheckoutInProgressError: If a purchase is already outstanding.
        """
        request = session.begin_submit()
        log = logger.bind(
            event_id=str(request.event_id),
            user_id=request.user_id,
            promo_code=request.promo_code,
        )
        try:
            receipt = self._store.purchase_ticket(request)
        except GatewayError as exc:
            log.error("purchase_failed", error=exc.message)
            session.fail_submit(exc.message)
            return None

        session.complete_submit(receipt)
        log = log.bind(order_id=receipt.order_id)
        log.info("purchase_completed", fees=request.fees)

        try:
            self._store.refresh_user(session.user_id)
        except GatewayError as exc:
            log.warning("user_refresh_failed", error=exc.message)
        else:
            session.mark_user_refreshed()
        return receipt

    def quote(
        self,
        event_id: str,
        cart: Cart,
        promo_code: str | None = None,
        platform_donation: Decimal | None = None,
    ) -> Quote:
        """Price a cart in one call. Without a donation the default one applies."""
        session = self.start_session(event_id, user_id="", cart=cart, promo_code=promo_code)
        if platform_donation is not None:
            session.set_donation(platform_donation)
        breakdown = session.breakdown()
        return Quote(
            breakdown=breakdown,
            default_donation=default_donation(breakdown.subtotal, breakdown.discount),
            promo=session.promo,
            promo_message=session.promo_message,
        )


@functools.cache
def build_checkout_service() -> CheckoutService:
    """Process-wide service; its store keeps one pooled HTTP client."""
    store = HttpCheckoutStore(
        base_url=settings.CHECKOUT_API_URL,
        token=settings.CHECKOUT_API_TOKEN or None,
        timeout=settings.CHECKOUT_API_TIMEOUT,
    )
    return CheckoutService(store)
