"""
Change notifier — per-user push of ledger changes.

Each user has a logical channel. A WebSocket connection joins
its user's channel by subscribing a callback; publish() hands
the event to every callback on that channel.

Delivery is best-effort and at most once. A callback that
raises is logged and removed from the channel, and the error
never reaches the publisher. A ledger operation has already
committed by the time it publishes, so nothing here can undo
or fail it.
"""

import enum
from threading import RLock
from typing import Any, Callable

from savings_ledger.logging_config import get_logger

logger = get_logger("notifier")

Subscriber = Callable[[dict], None]


class ChangeEvent(str, enum.Enum):
    ACCOUNTS_CHANGED = "accountsChanged"
    TRANSACTION_CREATED = "transactionCreated"
    WITHDRAWAL_REQUEST_CHANGED = "withdrawalRequestChanged"


class ChangeNotifier:

    def __init__(self):
        self._channels: dict[str, list[Subscriber]] = {}
        self._lock = RLock()

    def subscribe(self, user_id, callback: Subscriber) -> Callable[[], None]:
        """Join a user's channel. Returns a function that leaves it."""
        key = str(user_id)
        with self._lock:
            self._channels.setdefault(key, []).append(callback)
        logger.debug("Subscriber joined", extra={"user_id": key})
        return lambda: self.unsubscribe(user_id, callback)

    def unsubscribe(self, user_id, callback: Subscriber) -> None:
        key = str(user_id)
        with self._lock:
            subscribers = self._channels.get(key)
            if not subscribers or callback not in subscribers:
                return
            subscribers.remove(callback)
            if not subscribers:
                del self._channels[key]

    def subscriber_count(self, user_id) -> int:
        with self._lock:
            return len(self._channels.get(str(user_id), []))

    def publish(self, user_id, event: ChangeEvent, payload: Any) -> int:
        """
        Deliver an event to every subscriber of the user's channel.

        Returns how many subscribers accepted it. A user with no
        subscribers is a no-op.
        """
        key = str(user_id)
        with self._lock:
            subscribers = list(self._channels.get(key, []))
        if not subscribers:
            return 0

        message = {"event": event.value, "data": payload}
        delivered = 0
        for callback in subscribers:
            try:
                callback(message)
                delivered += 1
            except Exception:
                logger.warning(
                    "Dropping subscriber after failed delivery",
                    exc_info=True,
                    extra={"user_id": key, "event": event.value},
                )
                self.unsubscribe(user_id, callback)
        return delivered


notifier = ChangeNotifier()


def get_notifier() -> ChangeNotifier:
    """Process-wide notifier, overridable as a FastAPI dependency."""
    return notifier
