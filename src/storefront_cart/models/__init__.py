from .cart import Cart, CartLineItem, CartSummary, cart_to_dict
from .identity import Identity, storage_key

__all__ = [
    "Cart", "CartLineItem", "CartSummary", "cart_to_dict",
    "Identity", "storage_key",
]
