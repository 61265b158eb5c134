from .auth_session import AuthSession
from .cart_service import CartOutcome, CartStore
from .checkout_service import CheckoutService
from .notifications import Notification, NotificationCenter
from .product_service import ProductCatalogClient, ProductSnapshot
from .session_registry import CartSession, CartSessionRegistry

__all__ = [
    "AuthSession",
    "CartOutcome", "CartStore",
    "CheckoutService",
    "Notification", "NotificationCenter",
    "ProductCatalogClient", "ProductSnapshot",
    "CartSession", "CartSessionRegistry",
]
