import logging
import threading
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A user-facing message about the outcome of a cart action"""
    level: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.level == ERROR


NotificationListener = Callable[[Notification], None]


class NotificationCenter:
    """Fan-out of user-facing messages; every message is also logged"""

    def __init__(self):
        self._listeners: List[NotificationListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def success(self, message: str) -> Notification:
        return self.publish(Notification(SUCCESS, message))

    def error(self, message: str) -> Notification:
        return self.publish(Notification(ERROR, message))

    def publish(self, notification: Notification) -> Notification:
        if notification.is_error:
            logger.warning(f"Notify error: {notification.message}")
        else:
            logger.info(f"Notify success: {notification.message}")

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(notification)
        return notification
