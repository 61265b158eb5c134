from .cart_repository import CartRepository
from .storage import InMemoryStorage, KeyValueStorage, SqlStorage

__all__ = ["CartRepository", "InMemoryStorage", "KeyValueStorage", "SqlStorage"]
