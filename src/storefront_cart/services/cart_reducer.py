"""
Pure cart transitions.

Every function takes a cart and returns a new one; the input is never
mutated. Catalog checks raise before anything is built, so a rejected
transition leaves nothing half-applied.
"""
from storefront_cart.core.exceptions import OutOfStockError, PriceUnavailableError
from storefront_cart.models.cart import Cart, CartLineItem
from storefront_cart.services.product_service import ProductSnapshot


def validate_availability(slug: str, snapshot: ProductSnapshot, desired_quantity: int) -> None:
    """Raise unless the catalog can price and supply ``desired_quantity`` units"""
    if snapshot.price is None:
        raise PriceUnavailableError(slug)
    if desired_quantity > snapshot.quantity_available:
        raise OutOfStockError(slug, desired_quantity, snapshot.quantity_available)


def add_item(cart: Cart, slug: str, snapshot: ProductSnapshot) -> Cart:
    """One more unit of ``slug``, with price and product id refreshed from the catalog"""
    current = cart.get(slug)
    quantity = (current.quantity if current else 0) + 1
    validate_availability(slug, snapshot, quantity)

    updated = dict(cart)
    updated[slug] = CartLineItem(
        quantity=quantity,
        price=snapshot.price,
        product_id=snapshot.product_id,
    )
    return updated


def update_item_quantity(cart: Cart, slug: str, quantity: int, snapshot: ProductSnapshot) -> Cart:
    """
    Set the quantity of ``slug``.

    A quantity of zero or less removes the line. An existing line keeps its
    price snapshot; a new line takes the catalog's values.
    """
    if quantity <= 0:
        return remove_item(cart, slug)

    validate_availability(slug, snapshot, quantity)

    updated = dict(cart)
    current = cart.get(slug)
    if current:
        updated[slug] = current.with_quantity(quantity)
    else:
        updated[slug] = CartLineItem(
            quantity=quantity,
            price=snapshot.price,
            product_id=snapshot.product_id,
        )
    return updated


def remove_item(cart: Cart, slug: str) -> Cart:
    """Drop ``slug``; absent slugs are a no-op"""
    return {key: item for key, item in cart.items() if key != slug}


def clear_cart(cart: Cart) -> Cart:
    return {}
