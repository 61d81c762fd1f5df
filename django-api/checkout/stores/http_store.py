"""REST implementation of the CheckoutStore.

Talks to the platform backend with httpx. Every failure, whether transport,
non-2xx status or a payload that does not validate, surfaces as GatewayError
so callers deal with a single error type.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

import httpx
import structlog
from rest_framework import serializers

from checkout.domain import (
    CartLine,
    Event,
    EventId,
    OrderReceipt,
    PromoValidation,
    PurchaseRequest,
    SystemSettings,
)
from checkout.domain.errors import GatewayError
from checkout.domain.value_objects import round_currency
from checkout.stores.interfaces import CheckoutStore
from checkout.stores.payloads import (
    EventPayload,
    OrderReceiptPayload,
    PromoValidationPayload,
    SystemSettingsPayload,
)

logger = structlog.get_logger()

# Some clients send these literals instead of omitting the recipient.
_MISSING_RECIPIENTS = {"null", "undefined"}


def _amount(value: Decimal) -> float:
    return float(round_currency(value))


def cart_payload(cart: Mapping[str, CartLine]) -> dict[str, dict[str, Any]]:
    payload = {}
    for name, line in cart.items():
        entry: dict[str, Any] = {"quantity": line.quantity.value}
        if line.donation_amount is not None:
            entry["donationAmount"] = _amount(line.donation_amount)
        payload[name] = entry
    return payload


def purchase_payload(request: PurchaseRequest) -> dict[str, Any]:
    recipient = request.recipient_user_id
    if recipient in _MISSING_RECIPIENTS:
        recipient = None
    return {
        "event_id": str(request.event_id),
        "items": cart_payload(request.cart),
        "recipient_user_id": recipient,
        "promo_code": request.promo_code,
        "fees": {key: _amount(value) for key, value in request.fees.items()},
    }


def error_message(response: httpx.Response) -> str:
    """Best human-readable message from a failed response."""
    message = f"HTTP Error: {response.status_code} {response.reason_phrase}"
    text = response.text
    if not text:
        return message
    try:
        data = response.json()
    except ValueError:
        return text if len(text) < 200 else message
    if isinstance(data, dict):
        return data.get("error") or data.get("message") or message
    return message


class HttpCheckoutStore(CheckoutStore):
    """CheckoutStore backed by the platform REST API."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        log = logger.bind(method=method, path=path)
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            log.error("backend_unreachable", error=str(exc))
            raise GatewayError(str(exc) or "Network error") from exc
        log.debug("backend_response", status=response.status_code)
        return response

    def _check(self, response: httpx.Response) -> Any:
        if response.is_error:
            raise GatewayError(error_message(response), status_code=response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _load(serializer_class: type[serializers.Serializer], data: Any):
        serializer = serializer_class(data=data)
        if not serializer.is_valid():
            logger.warning(
                "backend_payload_invalid",
                serializer=serializer_class.__name__,
                errors=serializer.errors,
            )
            raise GatewayError("Unexpected response from server")
        return serializer.save()

    def get_system_settings(self) -> SystemSettings:
        data = self._check(self._request("GET", "/system/settings"))
        return self._load(SystemSettingsPayload, data)

    def get_event(self, event_id: EventId) -> Event | None:
        response = self._request("GET", f"/events/{event_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return self._load(EventPayload, self._check(response))

    def validate_promo_code(self, event_id: EventId, code: str) -> PromoValidation:
        response = self._request(
            "POST", f"/events/{event_id}/promocodes/validate", json={"code": code}
        )
        return self._load(PromoValidationPayload, self._check(response))

    def purchase_ticket(self, request: PurchaseRequest) -> OrderReceipt:
        response = self._request(
            "POST", "/orders/checkout", json=purchase_payload(request)
        )
        return self._load(OrderReceiptPayload, self._check(response))

    def refresh_user(self, user_id: str) -> None:
        self._check(self._request("GET", "/users/me"))
