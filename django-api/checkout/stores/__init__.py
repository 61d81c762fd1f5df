from checkout.stores.http_store import HttpCheckoutStore
from checkout.stores.interfaces import CheckoutStore

__all__ = ["CheckoutStore", "HttpCheckoutStore"]
