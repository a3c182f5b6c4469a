import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from pywebpush import webpush

from facelens.models import FaceAttributes, PushPayload, PushSubscription
from facelens.notifications.store import SubscriptionStore

logger = logging.getLogger(__name__)


class PushNotifier:
    """
    Best-effort Web Push fan-out.

    Every subscription gets one delivery attempt. A failing endpoint is logged
    and skipped, it never affects the other deliveries or the caller.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        vapid_public_key: Optional[str] = None,
        vapid_private_key: Optional[str] = None,
        vapid_subject: str = "mailto:admin@example.com",
        max_workers: int = 4,
        sender: Callable = webpush,
    ):
        """
        Initialize the notifier

        Args:
            store: Where registered subscriptions live
            vapid_public_key: Application server public key, delivery is disabled without it
            vapid_private_key: Application server private key, delivery is disabled without it
            vapid_subject: Contact URI sent in the VAPID claims
            max_workers: Upper bound on concurrent deliveries
            sender: Function performing one delivery, pywebpush.webpush by default
        """
        self.store = store
        self.vapid_public_key = vapid_public_key
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject
        self.max_workers = max_workers
        self.sender = sender

        if not self.enabled:
            logger.info("VAPID keys not configured, push notifications disabled")

    @property
    def enabled(self) -> bool:
        return bool(self.vapid_public_key and self.vapid_private_key)

    @staticmethod
    def build_top_emotion_payload(face: FaceAttributes) -> PushPayload:
        emotion = face.top_emotion
        return PushPayload(
            title="Emotion detected",
            body=f"{emotion.type.lower()} ({emotion.confidence}%)",
        )

    def notify_top_emotion(self, faces: List[FaceAttributes]) -> int:
        """Push the first face's top emotion to every subscriber"""
        if not faces or not self.enabled:
            return 0
        return self.broadcast(self.build_top_emotion_payload(faces[0]))

    def broadcast(self, payload: PushPayload) -> int:
        """
        Deliver a payload to all current subscriptions

        Returns:
            Number of successful deliveries
        """
        subscriptions = self.store.all()
        if not subscriptions:
            return 0

        data = json.dumps(payload.model_dump())
        workers = max(1, min(self.max_workers, len(subscriptions)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda sub: self._deliver(sub, data), subscriptions))

        delivered = sum(outcomes)
        logger.info(f"Push notification delivered to {delivered}/{len(subscriptions)} subscription(s)")
        return delivered

    def _deliver(self, subscription: PushSubscription, data: str) -> bool:
        try:
            self.sender(
                subscription_info=subscription.to_subscription_info(),
                data=data,
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
            )
            return True
        except Exception as e:
            logger.warning(f"Push delivery to {subscription.endpoint} failed: {e}")
            return False
