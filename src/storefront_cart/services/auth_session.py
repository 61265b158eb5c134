import logging
import threading
from typing import Callable, List, Optional

from storefront_cart.models.identity import Identity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity], None]


class AuthSession:
    """Holds the active identity and tells subscribers when it changes"""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity or Identity.guest()
        self._listeners: List[IdentityListener] = []
        self._lock = threading.Lock()

    @property
    def identity(self) -> Identity:
        return self._identity

    def login(self, name: str, token: Optional[str] = None) -> None:
        self.set_identity(Identity(name=name, token=token))

    def logout(self) -> None:
        self.set_identity(Identity.guest())

    def set_identity(self, identity: Identity) -> None:
        with self._lock:
            if identity == self._identity:
                return
            previous = self._identity
            self._identity = identity
            listeners = list(self._listeners)

        logger.info(f"Identity changed from {previous.display_name} to {identity.display_name}")
        for listener in listeners:
            listener(identity)

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
