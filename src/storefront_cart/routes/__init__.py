from storefront_cart.routes.cart import cart_bp

__all__ = ["cart_bp"]
