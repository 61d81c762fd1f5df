from checkout.services.checkout_service import CheckoutService, Quote, build_checkout_service

__all__ = ["CheckoutService", "Quote", "build_checkout_service"]
