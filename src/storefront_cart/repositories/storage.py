import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.engine import Engine

from storefront_cart.db import STORAGE_TABLE
from storefront_cart.repositories.base import BaseRepository


class KeyValueStorage(ABC):
    """Durable string-to-string storage for one device"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, for tests and embedding"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self):
        with self._lock:
            return sorted(self._items)


class SqlStorage(BaseRepository, KeyValueStorage):
    """
    Key-value storage in the ``cart_storage`` table.

    Each namespace (one client device) sees only its own keys. Writes are
    last-writer-wins upserts; there is no merge.
    """

    def __init__(self, engine: Engine, namespace: str):
        super().__init__(engine)
        self.namespace = namespace

    @property
    def table_name(self) -> str:
        return STORAGE_TABLE

    def get_item(self, key: str) -> Optional[str]:
        row = self.execute_single_query(
            f"SELECT payload FROM {self.table_name} "
            "WHERE namespace = :namespace AND storage_key = :key",
            {"namespace": self.namespace, "key": key},
        )
        return row["payload"] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.execute_command(
            f"""
            INSERT INTO {self.table_name} (namespace, storage_key, payload, updated_at)
            VALUES (:namespace, :key, :payload, CURRENT_TIMESTAMP)
            ON CONFLICT (namespace, storage_key)
            DO UPDATE SET payload = excluded.payload,
                          updated_at = CURRENT_TIMESTAMP
            """,
            {"namespace": self.namespace, "key": key, "payload": value},
        )

    def remove_item(self, key: str) -> None:
        self.execute_command(
            f"DELETE FROM {self.table_name} "
            "WHERE namespace = :namespace AND storage_key = :key",
            {"namespace": self.namespace, "key": key},
        )
