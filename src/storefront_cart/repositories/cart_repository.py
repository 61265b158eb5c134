from storefront_cart.core.exceptions import DatabaseError
from storefront_cart.models.cart import Cart
from storefront_cart.models.identity import Identity, storage_key
from storefront_cart.repositories.storage import KeyValueStorage
from storefront_cart.schemas.cart_schemas import parse_stored_cart, serialize_cart
import logging

logger = logging.getLogger(__name__)


class CartRepository:
    """Persists one cart per identity in a device's key-value storage"""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def load(self, identity: Identity) -> Cart:
        """
        Load the identity's cart.

        Absent, unreadable or corrupt records all come back as an empty
        cart; loading never raises.
        """
        key = storage_key(identity)
        try:
            raw = self.storage.get_item(key)
        except DatabaseError as e:
            logger.error(f"Could not read cart record {key}: {e.internal_message}")
            return {}

        cart = parse_stored_cart(raw)
        logger.debug(f"Loaded cart {key} with {len(cart)} items")
        return cart

    def save(self, identity: Identity, cart: Cart) -> None:
        """Overwrite the identity's record. Write failures are logged, not raised."""
        key = storage_key(identity)
        try:
            self.storage.set_item(key, serialize_cart(cart))
        except DatabaseError as e:
            logger.error(f"Could not write cart record {key}: {e.internal_message}")
