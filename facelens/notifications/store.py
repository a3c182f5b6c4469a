import logging
import threading
from typing import List

from facelens.models import PushSubscription

logger = logging.getLogger(__name__)


class SubscriptionStore:
    """
    Process-wide list of browser push subscriptions.

    Lives only as long as the process; nothing is persisted across restarts.
    Subscriptions are keyed by their endpoint, registering one twice is a no-op.
    """

    def __init__(self):
        self._subscriptions: List[PushSubscription] = []
        self._lock = threading.Lock()

    def add(self, subscription: PushSubscription) -> bool:
        """Register a subscription, returns False when the endpoint was already known"""
        with self._lock:
            if any(s.endpoint == subscription.endpoint for s in self._subscriptions):
                return False
            self._subscriptions.append(subscription)

        logger.info(f"Registered push subscription ({len(self)} total)")
        return True

    def remove(self, endpoint: str) -> bool:
        with self._lock:
            before = len(self._subscriptions)
            self._subscriptions = [s for s in self._subscriptions if s.endpoint != endpoint]
            return len(self._subscriptions) < before

    def all(self) -> List[PushSubscription]:
        """Snapshot of the current subscriptions"""
        with self._lock:
            return list(self._subscriptions)

    def clear(self):
        with self._lock:
            self._subscriptions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)
