"""Per-identity storefront cart backed by a product catalog."""

__version__ = "0.1.0"
