from dataclasses import dataclass
from typing import Optional

GUEST_NAME = "guest"
CART_KEY_PREFIX = "cart-"
USER_ESCAPE_PREFIX = "user:"


@dataclass(frozen=True)
class Identity:
    """The principal whose cart is active: a guest or a logged-in user"""
    name: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def guest(cls) -> "Identity":
        return cls()

    @property
    def is_guest(self) -> bool:
        return not self.name

    @property
    def is_authenticated(self) -> bool:
        return not self.is_guest and bool(self.token)

    @property
    def display_name(self) -> str:
        return self.name if self.name else GUEST_NAME


def storage_key(identity: Identity) -> str:
    """
    Storage key of the cart record for an identity.

    Guests share ``cart-guest``; users get ``cart-<name>``. A user whose
    display name is literally ``guest`` (or already starts with ``user:``)
    is keyed ``cart-user:<name>`` so no user record can collide with the
    guest record or with another user.
    """
    if identity.is_guest:
        return f"{CART_KEY_PREFIX}{GUEST_NAME}"
    if identity.name == GUEST_NAME or identity.name.startswith(USER_ESCAPE_PREFIX):
        return f"{CART_KEY_PREFIX}{USER_ESCAPE_PREFIX}{identity.name}"
    return f"{CART_KEY_PREFIX}{identity.name}"
