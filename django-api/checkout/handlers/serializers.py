"""Serializers for the checkout endpoints.

Inbound serializers validate HTTP request bodies. Outbound serializers render
domain objects; money is always rendered with two decimals, rounded half up.
"""

from decimal import ROUND_HALF_UP, Decimal

from rest_framework import serializers

from checkout.domain import Cart


def money_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(
        max_digits=12, decimal_places=2, rounding=ROUND_HALF_UP, **kwargs
    )


class OrderReceiptSerializer(serializers.Serializer):
    orderId = serializers.CharField(source="order_id", allow_null=True)
    clientSecret = serializers.CharField(source="client_secret", allow_null=True)


class CartLineSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    donationAmount = serializers.DecimalField(
        source="donation_amount", max_digits=12, decimal_places=2,
        min_value=Decimal("0"), required=False, allow_null=True, default=None,
    )


class QuoteRequestSerializer(serializers.Serializer):
    """Body of POST /api/events/{event_id}/checkout/quote."""

    cart = serializers.DictField(child=CartLineSerializer())
    promoCode = serializers.CharField(
        source="promo_code", required=False, allow_blank=True, allow_null=True, default=None
    )
    platformDonation = serializers.DecimalField(
        source="platform_donation", max_digits=12, decimal_places=2,
        min_value=Decimal("0"), required=False, allow_null=True, default=None,
    )

    def build_cart(self) -> Cart:
        cart = Cart()
        for name, line in self.validated_data["cart"].items():
            cart.set_quantity(name, line["quantity"], line.get("donation_amount"))
        return cart


class CheckoutRequestSerializer(QuoteRequestSerializer):
    """Body of POST /api/events/{event_id}/checkout."""

    userId = serializers.CharField(source="user_id")
    recipientUserId = serializers.CharField(
        source="recipient_user_id", required=False, allow_blank=True, allow_null=True, default=None
    )


class PriceLineSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    unitPrice = money_field(source="unit_price")
    lineSubtotal = money_field(source="line_subtotal")
    isTicket = serializers.BooleanField(source="is_ticket")


class PriceBreakdownSerializer(serializers.Serializer):
    items = PriceLineSerializer(many=True)
    subtotal = money_field()
    discount = money_field()
    mandatoryFees = money_field(source="mandatory_fees")
    donation = money_field()
    finalTotal = money_field(source="final_total")


class PromoAttributionSerializer(serializers.Serializer):
    code = serializers.CharField()
    discountPercent = serializers.DecimalField(
        source="discount_percent.value", max_digits=5, decimal_places=2
    )
    ownerName = serializers.CharField(source="owner_name", allow_null=True)
    attributionLabel = serializers.CharField(source="attribution_label")


class PromoMessageSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    text = serializers.CharField()


class QuoteSerializer(serializers.Serializer):
    breakdown = PriceBreakdownSerializer()
    defaultDonation = money_field(source="default_donation")
    promo = PromoAttributionSerializer(allow_null=True)
    promoMessage = PromoMessageSerializer(source="promo_message", allow_null=True)
