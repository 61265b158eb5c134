from typing import Optional

from storefront_cart.core.exceptions import (
    CatalogUnavailableError, PaymentError, UnauthorizedError, ValidationError
)
from storefront_cart.models.cart import cart_to_dict
from storefront_cart.models.identity import Identity
from storefront_cart.services.cart_service import CartOutcome, CartStore
from storefront_cart.services.notifications import NotificationCenter
from storefront_cart.services.product_service import ProductCatalogClient
import logging

logger = logging.getLogger(__name__)

PAYMENT_SUCCESS = "Payment Completed Successfully"
PAYMENT_FAILED = "Payment failed. Please try again."
TOKEN_FAILED = "Failed to initialize payment gateway"
LOGIN_REQUIRED = "Please login to checkout"
EMPTY_CART = "Your Cart Is Empty"


class CheckoutService:
    """
    Pays for the active cart through the catalog's payment gateway

    Business Rules:
    - Only an authenticated identity with a token may pay
    - An empty cart cannot be paid
    - The cart is cleared only after the gateway accepts the payment
    """

    def __init__(
        self,
        store: CartStore,
        catalog: ProductCatalogClient,
        notifications: Optional[NotificationCenter] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.notifications = notifications or store.notifications

    def get_client_token(self) -> Optional[str]:
        """Client token for the payment form, or None when the gateway is down"""
        try:
            return self.catalog.get_client_token()
        except (PaymentError, CatalogUnavailableError) as e:
            logger.error(f"Payment gateway initialization failed: {e.internal_message}")
            self.notifications.error(TOKEN_FAILED)
            return None

    def checkout(self, nonce: str, expected_identity: Optional[Identity] = None) -> CartOutcome:
        current = self.store.view(expected_identity)
        if current.stale:
            return current
        identity, cart = current.identity, current.cart

        if not identity.is_authenticated:
            return self._reject(identity, cart, UnauthorizedError(LOGIN_REQUIRED), LOGIN_REQUIRED)
        if not cart:
            return self._reject(identity, cart, ValidationError(EMPTY_CART), EMPTY_CART)
        if not nonce:
            return self._reject(identity, cart, ValidationError("Payment nonce is required"), PAYMENT_FAILED)

        logger.info(f"Submitting payment for {len(cart)} items of {identity.display_name}")
        try:
            self.catalog.submit_payment(nonce, cart_to_dict(cart), identity.token)
        except (PaymentError, CatalogUnavailableError) as e:
            logger.error(f"Payment for {identity.display_name} failed: {e.internal_message}")
            return self._reject(identity, cart, e, PAYMENT_FAILED)

        cleared = self.store.clear(expected_identity=identity)
        if cleared.stale:
            # The device moved to another identity while paying; the paid
            # record is still emptied, the active cart is left alone
            logger.warning(f"Clearing paid cart of {identity.display_name} outside the active store")
            self.store.repository.save(identity, {})
        self.notifications.success(PAYMENT_SUCCESS)
        return CartOutcome(cart={}, message=PAYMENT_SUCCESS, identity=identity)

    def _reject(self, identity: Identity, cart, error, message: str) -> CartOutcome:
        self.notifications.error(message)
        return CartOutcome(cart=cart, message=message, error=error, identity=identity)
