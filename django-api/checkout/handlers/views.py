"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import structlog
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.domain.errors import DomainError, ErrorCode
from checkout.handlers.serializers import (
    CheckoutRequestSerializer,
    OrderReceiptSerializer,
    PriceBreakdownSerializer,
    QuoteRequestSerializer,
    QuoteSerializer,
)
from checkout.services import build_checkout_service

logger = structlog.get_logger()

ERROR_STATUS = {
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CHECKOUT_IN_PROGRESS: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_CHECKOUT_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def error_response(exc: DomainError) -> Response:
    message = exc.message
    if exc.code is ErrorCode.GATEWAY_ERROR:
        logger.error("backend_error", error=exc.message)
        message = "Checkout is temporarily unavailable"
    return Response(
        {"code": exc.code.value, "message": message},
        status=ERROR_STATUS[exc.code],
    )


class CheckoutQuoteView(APIView):
    """Handler for POST /api/events/{event_id}/checkout/quote"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = build_checkout_service()
        try:
            quote = service.quote(
                event_id,
                serializer.build_cart(),
                promo_code=serializer.validated_data["promo_code"],
                platform_donation=serializer.validated_data["platform_donation"],
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(QuoteSerializer(quote).data)


class CheckoutView(APIView):
    """Handler for POST /api/events/{event_id}/checkout"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = build_checkout_service()
        try:
            session = service.start_session(
                event_id,
                user_id=data["user_id"],
                cart=serializer.build_cart(),
                recipient_user_id=data["recipient_user_id"],
                promo_code=data["promo_code"],
            )
            if data["platform_donation"] is not None:
                session.set_donation(data["platform_donation"])
            receipt = service.submit(session)
        except DomainError as exc:
            return error_response(exc)

        breakdown = PriceBreakdownSerializer(session.last_breakdown).data
        if receipt is None:
            # Purchase failures are shown to the buyer as the backend phrased them.
            return Response(
                {
                    "code": ErrorCode.GATEWAY_ERROR.value,
                    "message": session.error_message,
                    "breakdown": breakdown,
                },
                status=status.HTTP_502_BAD_GATEWAY,
            )
        return Response(
            {
                "order": OrderReceiptSerializer(receipt).data,
                "breakdown": breakdown,
                "ticketsRefreshed": session.tickets_refreshed,
            },
            status=status.HTTP_201_CREATED,
        )
