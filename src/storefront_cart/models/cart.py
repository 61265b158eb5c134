from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Any

from storefront_cart.utils.formatting_utils import FormattingUtils


@dataclass(frozen=True)
class CartLineItem:
    """One cart entry: quantity plus the price snapshot taken at the last add/update"""
    quantity: int
    price: float  # Price at time of last successful add/update
    product_id: str

    @property
    def subtotal(self) -> Decimal:
        """Line total as an exact decimal"""
        return Decimal(str(self.price)) * self.quantity

    def with_quantity(self, quantity: int) -> "CartLineItem":
        return replace(self, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted/JSON shape of a line item"""
        return {
            "quantity": self.quantity,
            "price": self.price,
            "productId": self.product_id,
        }


# A cart maps product slug -> line item. Every present slug has quantity > 0.
Cart = Dict[str, CartLineItem]


def cart_to_dict(cart: Cart) -> Dict[str, Dict[str, Any]]:
    return {slug: item.to_dict() for slug, item in cart.items()}


@dataclass(frozen=True)
class CartSummary:
    """Totals shown next to the cart"""
    total_items: int
    total_quantity: int
    total_cents: int
    can_checkout: bool

    @property
    def is_empty(self) -> bool:
        return self.total_items == 0

    @property
    def total_display(self) -> str:
        return FormattingUtils.format_money(self.total_cents)

    @classmethod
    def from_cart(cls, cart: Cart, authenticated: bool = False) -> "CartSummary":
        total = sum((item.subtotal for item in cart.values()), Decimal(0))
        return cls(
            total_items=len(cart),
            total_quantity=sum(item.quantity for item in cart.values()),
            total_cents=FormattingUtils.to_cents(total),
            can_checkout=authenticated and len(cart) > 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_items": self.total_items,
            "total_quantity": self.total_quantity,
            "total_cents": self.total_cents,
            "total": self.total_display,
            "is_empty": self.is_empty,
            "can_checkout": self.can_checkout,
        }
