from django.urls import path

from checkout.handlers.views import CheckoutQuoteView, CheckoutView

urlpatterns = [
    path(
        "events/<str:event_id>/checkout/quote",
        CheckoutQuoteView.as_view(),
        name="checkout-quote",
    ),
    path("events/<str:event_id>/checkout", CheckoutView.as_view(), name="checkout"),
]
