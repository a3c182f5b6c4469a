import logging
from typing import List, Tuple

from facelens.analysis import FaceAnalyzer
from facelens.models import AnalysisResponse, FaceAttributes
from facelens.notifications import PushNotifier

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Runs one analysis request end to end.

    This engine:
    1. Hands the image to the face analyzer
    2. Shapes the faces into the API response
    3. Tells the caller whether a push notification is due
    """

    def __init__(self, analyzer: FaceAnalyzer, notifier: PushNotifier):
        """
        Initialize the analysis engine

        Args:
            analyzer: Adapter for the face detection service
            notifier: Push fan-out for detected emotions
        """
        self.analyzer = analyzer
        self.notifier = notifier

        logger.info("Analysis engine initialized")

    def analyze(self, image_bytes: bytes) -> Tuple[AnalysisResponse, List[FaceAttributes]]:
        """
        Analyze an uploaded image

        Returns:
            response: Body for the HTTP caller
            faces: Detected faces, to be passed to notify() once the response is out

        Raises:
            InputError: image_bytes is empty
            AnalysisError: the detection service failed
        """
        faces = self.analyzer.analyze(image_bytes)
        if not faces:
            logger.info("No faces detected in the image")
        return AnalysisResponse.from_faces(faces), faces

    def should_notify(self, faces: List[FaceAttributes]) -> bool:
        return bool(faces) and self.notifier.enabled and len(self.notifier.store) > 0

    def notify(self, faces: List[FaceAttributes]) -> int:
        """Fire-and-forget push of the first face's top emotion, never raises"""
        try:
            return self.notifier.notify_top_emotion(faces)
        except Exception as e:
            logger.error(f"Error sending push notifications: {e}")
            return 0
