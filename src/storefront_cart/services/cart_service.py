import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Type

from storefront_cart.core.exceptions import (
    BaseAPIException, CART_MUTATION_ERRORS, OutOfStockError, PriceUnavailableError
)
from storefront_cart.models.cart import Cart, CartSummary
from storefront_cart.models.identity import Identity, storage_key
from storefront_cart.repositories.cart_repository import CartRepository
from storefront_cart.services import cart_reducer
from storefront_cart.services.auth_session import AuthSession
from storefront_cart.services.notifications import NotificationCenter
from storefront_cart.services.product_service import ProductCatalogClient, ProductSnapshot
import logging

logger = logging.getLogger(__name__)

ADD_SUCCESS = "Add to Cart Successfully"
UPDATE_SUCCESS = "Update Cart Quantity Successfully"
REMOVE_SUCCESS = "Remove from Cart Successfully"
CLEAR_SUCCESS = "Cart Cleared Successfully"

ADD_ERROR_MESSAGES: Dict[Type[BaseAPIException], str] = {
    OutOfStockError: "Error added to cart: Not enough inventory",
    PriceUnavailableError: "Error added to cart: Price of product not available",
}

UPDATE_ERROR_MESSAGES: Dict[Type[BaseAPIException], str] = {
    OutOfStockError: "Error updating quantity: Not enough inventory",
    PriceUnavailableError: "Error added to cart: Price of product not available",
}

CartListener = Callable[[Cart], None]


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


@dataclass(frozen=True)
class CartOutcome:
    """Result of a cart action as the caller sees it"""
    cart: Cart
    message: Optional[str] = None
    error: Optional[BaseAPIException] = None
    stale: bool = False
    identity: Optional[Identity] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale


class CartStore:
    """
    The active customer's cart

    Responsibilities:
    - Load the cart of the current identity, and reload it whenever the
      auth session switches identity
    - Validate add/update against the catalog before touching state
    - Persist every accepted change and notify subscribers
    - Turn catalog failures into error notifications; nothing propagates
    """

    def __init__(
        self,
        repository: CartRepository,
        catalog: ProductCatalogClient,
        auth: AuthSession,
        notifications: Optional[NotificationCenter] = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.auth = auth
        self.notifications = notifications or NotificationCenter()
        self.state = StoreState.UNINITIALIZED

        self._lock = threading.RLock()
        self._listeners: List[CartListener] = []
        # Bumped on every identity reload; lookups started under an older
        # generation are discarded when they come back
        self._generation = 0
        self._identity = auth.identity
        self._cart: Cart = {}

        with self._lock:
            self._load_locked(auth.identity)
        self._unsubscribe_auth = auth.subscribe(self._on_identity_changed)

    # ---- state access ----

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def storage_key(self) -> str:
        return storage_key(self._identity)

    def get(self) -> Cart:
        with self._lock:
            return dict(self._cart)

    def summary(self) -> CartSummary:
        with self._lock:
            return CartSummary.from_cart(self._cart, self._identity.is_authenticated)

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` with a cart snapshot after every change"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop following the auth session"""
        self._unsubscribe_auth()

    # ---- mutations ----
    #
    # Every operation takes the identity the caller believes is active. When
    # the store has since been switched to another storage key the call is
    # answered with a stale outcome and nothing is touched.

    def view(self, expected_identity: Optional[Identity] = None) -> CartOutcome:
        """Cart and identity read together, as one consistent snapshot"""
        with self._lock:
            if not self._matches_locked(expected_identity):
                return self._discard("read")
            return CartOutcome(cart=dict(self._cart), identity=self._identity)

    def add(self, slug: str, expected_identity: Optional[Identity] = None) -> CartOutcome:
        """Add one unit of ``slug`` after checking the catalog"""
        logger.info(f"Adding '{slug}' to cart {self.storage_key}")
        return self._apply_with_lookup(
            slug,
            lambda cart, snapshot: cart_reducer.add_item(cart, slug, snapshot),
            ADD_SUCCESS,
            ADD_ERROR_MESSAGES,
            expected_identity,
        )

    def update_quantity(
        self, slug: str, quantity: int, expected_identity: Optional[Identity] = None
    ) -> CartOutcome:
        """
        Set the quantity of ``slug``

        Zero or less removes the line without asking the catalog, since a
        removal can never exceed stock.
        """
        logger.info(f"Updating '{slug}' to quantity {quantity} in cart {self.storage_key}")
        if quantity <= 0:
            return self._apply_local(
                lambda cart: cart_reducer.remove_item(cart, slug),
                REMOVE_SUCCESS,
                expected_identity,
            )
        return self._apply_with_lookup(
            slug,
            lambda cart, snapshot: cart_reducer.update_item_quantity(cart, slug, quantity, snapshot),
            UPDATE_SUCCESS,
            UPDATE_ERROR_MESSAGES,
            expected_identity,
        )

    def remove(self, slug: str, expected_identity: Optional[Identity] = None) -> CartOutcome:
        logger.info(f"Removing '{slug}' from cart {self.storage_key}")
        return self._apply_local(
            lambda cart: cart_reducer.remove_item(cart, slug), REMOVE_SUCCESS, expected_identity
        )

    def clear(self, expected_identity: Optional[Identity] = None) -> CartOutcome:
        logger.info(f"Clearing cart {self.storage_key}")
        return self._apply_local(cart_reducer.clear_cart, CLEAR_SUCCESS, expected_identity)

    # ---- internals ----

    def _on_identity_changed(self, identity: Identity) -> None:
        with self._lock:
            if storage_key(identity) == storage_key(self._identity):
                # Same record (e.g. refreshed token): keep the cart as is
                self._identity = identity
                return
            snapshot = self._load_locked(identity)
        self._emit(snapshot)

    def _load_locked(self, identity: Identity) -> Cart:
        self._generation += 1
        self._identity = identity
        self._cart = self.repository.load(identity)
        self.state = StoreState.LOADED
        logger.info(f"Loaded cart {storage_key(identity)} with {len(self._cart)} items")
        return dict(self._cart)

    def _matches_locked(self, expected: Optional[Identity]) -> bool:
        return expected is None or storage_key(expected) == storage_key(self._identity)

    def _apply_local(
        self,
        transition: Callable[[Cart], Cart],
        message: str,
        expected: Optional[Identity],
    ) -> CartOutcome:
        with self._lock:
            if not self._matches_locked(expected):
                return self._discard("cart change")
            cart = transition(self._cart)
            self._commit_locked(cart)
            identity = self._identity
        return self._accept(identity, cart, message)

    def _apply_with_lookup(
        self,
        slug: str,
        transition: Callable[[Cart, ProductSnapshot], Cart],
        success_message: str,
        error_messages: Dict[Type[BaseAPIException], str],
        expected: Optional[Identity],
    ) -> CartOutcome:
        with self._lock:
            if not self._matches_locked(expected):
                return self._discard(slug)
            generation = self._generation

        try:
            snapshot = self.catalog.lookup(slug)
            with self._lock:
                if generation != self._generation:
                    return self._discard(slug)
                cart = transition(self._cart, snapshot)
                self._commit_locked(cart)
                identity = self._identity
        except CART_MUTATION_ERRORS as e:
            with self._lock:
                if generation != self._generation:
                    return self._discard(slug)
                current = dict(self._cart)
                identity = self._identity
            return self._reject(slug, identity, current, e, error_messages)

        return self._accept(identity, cart, success_message)

    def _commit_locked(self, cart: Cart) -> None:
        self._cart = cart
        self.repository.save(self._identity, cart)

    def _accept(self, identity: Identity, cart: Cart, message: str) -> CartOutcome:
        self._emit(dict(cart))
        self.notifications.success(message)
        return CartOutcome(cart=dict(cart), message=message, identity=identity)

    def _reject(
        self,
        slug: str,
        identity: Identity,
        cart: Cart,
        error: BaseAPIException,
        error_messages: Dict[Type[BaseAPIException], str],
    ) -> CartOutcome:
        message = next(
            (text for kind, text in error_messages.items() if isinstance(error, kind)),
            error.message,
        )
        logger.warning(f"Cart change for '{slug}' rejected: {error.internal_message}")
        self.notifications.error(message)
        return CartOutcome(cart=cart, message=message, error=error, identity=identity)

    def _discard(self, action: str) -> CartOutcome:
        # The active cart belongs to someone else now; none of it is returned
        logger.warning(f"Discarding '{action}': cart identity changed to {self.storage_key}")
        return CartOutcome(cart={}, stale=True)

    def _emit(self, cart: Cart) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(dict(cart))
            except Exception as e:
                # The change is already committed; a subscriber cannot undo it
                logger.error(f"Cart listener {listener!r} failed: {str(e)}")
