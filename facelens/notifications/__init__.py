from .push import PushNotifier
from .store import SubscriptionStore

__all__ = ["PushNotifier", "SubscriptionStore"]
