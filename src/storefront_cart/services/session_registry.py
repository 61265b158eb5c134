import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from storefront_cart.repositories.cart_repository import CartRepository
from storefront_cart.repositories.storage import KeyValueStorage
from storefront_cart.services.auth_session import AuthSession
from storefront_cart.services.cart_service import CartStore
from storefront_cart.services.checkout_service import CheckoutService
from storefront_cart.services.notifications import NotificationCenter
from storefront_cart.services.product_service import ProductCatalogClient
import logging

logger = logging.getLogger(__name__)

StorageFactory = Callable[[str], KeyValueStorage]


@dataclass
class CartSession:
    """Everything one client device needs: its auth state, cart and checkout"""
    device_id: str
    auth: AuthSession
    store: CartStore
    checkout: CheckoutService
    notifications: NotificationCenter


class CartSessionRegistry:
    """
    One cart session per device, created on first use

    Sessions are kept in least-recently-used order and the oldest is
    dropped past ``limit``. Dropping loses nothing: every accepted change
    is already in the device's storage.
    """

    def __init__(self, storage_factory: StorageFactory, catalog: ProductCatalogClient, limit: int = 1000):
        self.storage_factory = storage_factory
        self.catalog = catalog
        self.limit = limit
        self._sessions: "OrderedDict[str, CartSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def session_for(self, device_id: str) -> CartSession:
        with self._lock:
            session = self._sessions.get(device_id)
            if session is not None:
                self._sessions.move_to_end(device_id)
                return session

            session = self._create(device_id)
            self._sessions[device_id] = session
            while len(self._sessions) > self.limit:
                evicted_id, evicted = self._sessions.popitem(last=False)
                evicted.store.close()
                logger.info(f"Evicted cart session for device {evicted_id}")
            return session

    def _create(self, device_id: str) -> CartSession:
        logger.info(f"Opening cart session for device {device_id}")
        notifications = NotificationCenter()
        auth = AuthSession()
        store = CartStore(
            repository=CartRepository(self.storage_factory(device_id)),
            catalog=self.catalog,
            auth=auth,
            notifications=notifications,
        )
        return CartSession(
            device_id=device_id,
            auth=auth,
            store=store,
            checkout=CheckoutService(store, self.catalog, notifications),
            notifications=notifications,
        )
