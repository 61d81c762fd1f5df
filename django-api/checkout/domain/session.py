"""Checkout session: the explicit state of one checkout.

A session owns the cart, the applied promo, the fee configuration, the
platform donation and the view state. Prices are never cached on it; every
call to ``breakdown()`` runs the pricing engine on a fresh snapshot.

View states::

    CHECKOUT --begin_submit--> LOADING --complete_submit--> SUCCESS
                                   \\--fail_submit------> ERROR --retry--> CHECKOUT

Closing from any state schedules ``reset_view()`` after RESET_DELAY_SECONDS.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from checkout.domain.errors import CheckoutInProgressError, InvalidCheckoutStateError
from checkout.domain.models import (
    Cart,
    Event,
    FeeConfig,
    OrderReceipt,
    PriceBreakdown,
    PromoAttribution,
    PromoValidation,
    PurchaseRequest,
)
from checkout.domain.pricing import ZERO, default_donation, price_cart
from checkout.domain.value_objects import PromoCode

RESET_DELAY_SECONDS = 0.3


class CheckoutState(Enum):
    CHECKOUT = "checkout"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class PromoRequest:
    """A promo validation in flight. Only the newest one may be applied."""

    sequence: int
    code: str


@dataclass(frozen=True)
class PromoMessage:
    """Inline feedback shown under the promo input."""

    success: bool
    text: str


class CheckoutSession:
    """State of one checkout, passed explicitly to every pricing call."""

    def __init__(
        self,
        event: Event,
        user_id: str,
        cart: Cart | None = None,
        recipient_user_id: str | None = None,
        promo: PromoAttribution | None = None,
        fee_config: FeeConfig | None = None,
    ) -> None:
        self.event = event
        self.user_id = user_id
        self.cart = cart if cart is not None else Cart()
        self.recipient_user_id = recipient_user_id
        self.promo = promo
        self.fee_config = fee_config or FeeConfig.default()

        self.state = CheckoutState.CHECKOUT
        self.is_open = True
        self.error_message = ""
        self.promo_message: PromoMessage | None = None
        self.receipt: OrderReceipt | None = None
        self.tickets_refreshed = False
        self.last_breakdown: PriceBreakdown | None = None

        self.platform_donation = ZERO
        self.donation_overridden = False

        self._promo_sequence = 0
        self._pending_promo: PromoRequest | None = None

        self._refresh_default_donation()

    # Pricing

    def breakdown(self) -> PriceBreakdown:
        return price_cart(
            self.cart.snapshot(),
            self.event.catalog,
            self.event.event_type,
            self.promo,
            self.fee_config,
            self.platform_donation,
        )

    def set_quantity(
        self, name: str, quantity: int, donation_amount: Decimal | None = None
    ) -> None:
        self.cart.set_quantity(name, quantity, donation_amount)
        self._refresh_default_donation()

    def set_donation(self, amount: Decimal) -> None:
        """Manual donation edit. Sticks until the session is reopened."""
        self.platform_donation = max(amount, ZERO)
        self.donation_overridden = True

    def apply_fee_config(self, fee_config: FeeConfig) -> None:
        self.fee_config = fee_config
        self._refresh_default_donation()

    def _refresh_default_donation(self) -> None:
        if self.donation_overridden or self.state is not CheckoutState.CHECKOUT:
            return
        priced = price_cart(
            self.cart.snapshot(),
            self.event.catalog,
            self.event.event_type,
            self.promo,
            self.fee_config,
        )
        self.platform_donation = default_donation(priced.subtotal, priced.discount)

    # Promo codes

    @property
    def validating_promo(self) -> bool:
        return self._pending_promo is not None

    @property
    def attribution_label(self) -> str | None:
        if self.promo is None:
            return None
        return self.promo.attribution_label

    def begin_promo_validation(self, raw_code: str | None) -> PromoRequest | None:
        """Start validating a typed code.

        Blank input clears the applied promo and returns None. Otherwise the
        returned request supersedes any validation still in flight.
        """
        code = PromoCode.normalize(raw_code)
        self.promo_message = None
        self._promo_sequence += 1
        if not code:
            self._pending_promo = None
            self.clear_promo()
            return None
        self._pending_promo = PromoRequest(sequence=self._promo_sequence, code=code)
        return self._pending_promo

    def complete_promo_validation(
        self, request: PromoRequest, result: PromoValidation
    ) -> bool:
        """Apply a validation answer. Returns False when the answer is stale.

        An invalid answer leaves a previously applied promo in place.
        """
        if not self._is_current(request):
            return False
        self._pending_promo = None
        if not result.valid:
            self.promo_message = PromoMessage(success=False, text="Invalid Code")
            return True

        self.promo = result.to_attribution()
        text = "Code Applied!"
        if self.promo.discount_percent.value > 0:
            text += f" {self.promo.discount_percent} Off"
        self.promo_message = PromoMessage(success=True, text=text)
        self._refresh_default_donation()
        return True

    def fail_promo_validation(self, request: PromoRequest) -> bool:
        if not self._is_current(request):
            return False
        self._pending_promo = None
        self.promo_message = PromoMessage(success=False, text="Validation Failed")
        return True

    def clear_promo(self) -> None:
        self.promo = None
        self.promo_message = None
        self._refresh_default_donation()

    def _is_current(self, request: PromoRequest) -> bool:
        return (
            self._pending_promo is not None
            and request.sequence == self._pending_promo.sequence
        )

    # Submission

    def begin_submit(self) -> PurchaseRequest:
        """Freeze the current prices into a purchase request and enter LOADING."""
        if self.state is CheckoutState.LOADING:
            raise CheckoutInProgressError()
        if self.state is not CheckoutState.CHECKOUT:
            raise InvalidCheckoutStateError(self.state.value, "submit")

        breakdown = self.breakdown()
        self.last_breakdown = breakdown
        self.state = CheckoutState.LOADING
        self.error_message = ""
        return PurchaseRequest(
            user_id=self.user_id,
            event_id=self.event.id,
            cart=self.cart.snapshot(),
            fees=breakdown.fees_payload(),
            recipient_user_id=self.recipient_user_id,
            promo_code=self.promo.code if self.promo else None,
        )

    def complete_submit(self, receipt: OrderReceipt) -> None:
        """The order is acknowledged; tickets show up after the user refresh."""
        self._require(CheckoutState.LOADING, "complete a purchase")
        self.receipt = receipt
        self.tickets_refreshed = False
        self.state = CheckoutState.SUCCESS

    def fail_submit(self, message: str) -> None:
        self._require(CheckoutState.LOADING, "fail a purchase")
        self.error_message = message
        self.state = CheckoutState.ERROR

    def mark_user_refreshed(self) -> None:
        self.tickets_refreshed = True

    def retry(self) -> None:
        self._require(CheckoutState.ERROR, "retry")
        self.state = CheckoutState.CHECKOUT
        self.error_message = ""

    def _require(self, state: CheckoutState, action: str) -> None:
        if self.state is not state:
            raise InvalidCheckoutStateError(self.state.value, action)

    # Open / close

    def open(self) -> None:
        self.is_open = True
        self.reset_view()
        self.promo_message = None
        self.donation_overridden = False
        self._refresh_default_donation()

    def close(self) -> float:
        """Close the checkout. The caller runs reset_view() after the returned delay."""
        self.is_open = False
        return RESET_DELAY_SECONDS

    def reset_view(self) -> None:
        self.state = CheckoutState.CHECKOUT
        self.error_message = ""
        self.receipt = None
