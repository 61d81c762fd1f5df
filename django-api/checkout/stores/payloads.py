"""Serializers for payloads returned by the platform backend.

Each validates one response body and builds the matching domain object in
``create()``. Used only by the REST store.
"""

from decimal import Decimal

from rest_framework import serializers

from checkout.domain import (
    AddOn,
    Catalog,
    Event,
    EventId,
    EventType,
    Money,
    OrderReceipt,
    PromoValidation,
    SystemSettings,
    Ticket,
)
from checkout.domain.models import DEFAULT_FEE_FIXED, DEFAULT_FEE_PERCENT


class FeeField(serializers.DecimalField):
    """Non-negative decimal of any precision; unusable values become the default."""

    def __init__(self, **kwargs):
        super().__init__(max_digits=None, decimal_places=None, **kwargs)

    def to_internal_value(self, data):
        try:
            value = super().to_internal_value(data)
        except serializers.ValidationError:
            return self.default
        if value < 0:
            return self.default
        return value


class SystemSettingsPayload(serializers.Serializer):
    """Backend settings. Accepts camelCase or snake_case keys."""

    ALIASES = {
        "platformName": "platform_name",
        "supportEmail": "support_email",
        "platformFeePercent": "platform_fee_percent",
        "platformFeeFixed": "platform_fee_fixed",
        "maintenanceMode": "maintenance_mode",
        "disableRegistration": "disable_registration",
    }

    platform_name = serializers.CharField(required=False, allow_blank=True, default="Eventsta")
    support_email = serializers.CharField(required=False, allow_blank=True, default="")
    platform_fee_percent = FeeField(required=False, default=DEFAULT_FEE_PERCENT)
    platform_fee_fixed = FeeField(required=False, default=DEFAULT_FEE_FIXED)
    maintenance_mode = serializers.BooleanField(required=False, default=False)
    disable_registration = serializers.BooleanField(required=False, default=False)

    def to_internal_value(self, data):
        if isinstance(data, dict):
            data = {self.ALIASES.get(key, key): value for key, value in data.items()}
            data = {key: value for key, value in data.items() if value is not None}
        return super().to_internal_value(data)

    def create(self, validated_data) -> SystemSettings:
        return SystemSettings(**validated_data)


class TicketPayload(serializers.Serializer):
    """Ticket tier as published by the backend; keyed by its ``type``."""

    type = serializers.CharField(source="name")
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    minimumDonation = serializers.DecimalField(
        source="minimum_donation", max_digits=12, decimal_places=2,
        min_value=Decimal("0"), required=False, default=Decimal("0"),
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AddOnPayload(serializers.Serializer):
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    minimumDonation = serializers.DecimalField(
        source="minimum_donation", max_digits=12, decimal_places=2,
        min_value=Decimal("0"), required=False, default=Decimal("0"),
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")


def _item_kwargs(data) -> dict:
    return {
        "name": data["name"],
        "price": Money(data["price"]),
        "minimum_donation": Money(data.get("minimum_donation") or Decimal("0")),
        "description": data.get("description", ""),
    }


class EventPayload(serializers.Serializer):
    """Event with its catalog. Item names must be unique across tickets and add-ons."""

    id = serializers.UUIDField()
    title = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(
        source="event_type", choices=[event_type.value for event_type in EventType]
    )
    tickets = TicketPayload(many=True, required=False)
    addOns = AddOnPayload(source="add_ons", many=True, required=False)

    def validate(self, attrs):
        names = [item["name"] for item in attrs.get("tickets", [])]
        names += [item["name"] for item in attrs.get("add_ons", [])]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise serializers.ValidationError(
                f"Duplicate catalog item names: {', '.join(duplicates)}"
            )
        return attrs

    def create(self, validated_data) -> Event:
        catalog = Catalog(
            tickets=tuple(
                Ticket(**_item_kwargs(item)) for item in validated_data.get("tickets", [])
            ),
            add_ons=tuple(
                AddOn(**_item_kwargs(item)) for item in validated_data.get("add_ons", [])
            ),
        )
        return Event(
            id=EventId(validated_data["id"]),
            title=validated_data["title"],
            event_type=EventType(validated_data["event_type"]),
            catalog=catalog,
        )


class PromoValidationPayload(serializers.Serializer):
    valid = serializers.BooleanField()
    code = serializers.CharField(required=False, allow_blank=True, default="")
    discountPercent = serializers.DecimalField(
        source="discount_percent", max_digits=5, decimal_places=2,
        min_value=Decimal("0"), max_value=Decimal("100"),
        required=False, default=Decimal("0"),
    )
    ownerName = serializers.CharField(
        source="owner_name", required=False, allow_blank=True, allow_null=True, default=None
    )

    def create(self, validated_data) -> PromoValidation:
        return PromoValidation(**validated_data)


class OrderReceiptPayload(serializers.Serializer):
    orderId = serializers.CharField(
        source="order_id", required=False, allow_blank=True, allow_null=True, default=None
    )
    clientSecret = serializers.CharField(
        source="client_secret", required=False, allow_blank=True, allow_null=True, default=None
    )

    def create(self, validated_data) -> OrderReceipt:
        return OrderReceipt(**validated_data)
