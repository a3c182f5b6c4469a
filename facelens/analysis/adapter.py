import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from facelens.errors import AnalysisError, InputError
from facelens.models import (
    AgeRange,
    BoundingBox,
    EmotionScore,
    FaceAttributes,
    FacialFeatures,
    FeatureFlag,
    GenderEstimate,
    ImageQuality,
)

logger = logging.getLogger(__name__)

# Rekognition attribute name -> field on FacialFeatures
FEATURE_FIELDS = {
    "Smile": "smile",
    "Eyeglasses": "eyeglasses",
    "Sunglasses": "sunglasses",
    "Beard": "beard",
    "Mustache": "mustache",
    "EyesOpen": "eyesOpen",
    "MouthOpen": "mouthOpen",
}


def _round(value: float) -> float:
    return round(float(value), 2)


class FaceAnalyzer:
    """
    Adapter around AWS Rekognition DetectFaces.

    Sends the raw image bytes asking for every attribute and reshapes each
    FaceDetail into a FaceAttributes record.
    """

    def __init__(
        self,
        client: Any = None,
        region: str = "us-east-1",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
    ):
        """
        Initialize the analyzer

        Args:
            client: Preconfigured rekognition client, created from the other arguments when omitted
            region: AWS region hosting Rekognition
            aws_access_key_id: Explicit credentials, falls back to the boto3 default chain
            aws_secret_access_key: Explicit credentials, falls back to the boto3 default chain
        """
        if client is None:
            client = boto3.client(
                "rekognition",
                region_name=region,
                aws_access_key_id=aws_access_key_id,
                aws_secret_access_key=aws_secret_access_key,
            )
        self.client = client

        logger.info(f"Face analyzer initialized for region {region}")

    def analyze(self, image_bytes: bytes) -> List[FaceAttributes]:
        """
        Detect faces in an image

        Args:
            image_bytes: Encoded image (JPEG or PNG)

        Returns:
            One record per detected face, empty when no face was found
        """
        if not image_bytes:
            raise InputError("No image file provided")

        try:
            result = self.client.detect_faces(Image={"Bytes": image_bytes}, Attributes=["ALL"])
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Rekognition call failed: {e}")
            raise AnalysisError(str(e)) from e

        face_details = result.get("FaceDetails") or []
        logger.info(f"Rekognition detected {len(face_details)} face(s)")

        try:
            return [self._to_attributes(index, face) for index, face in enumerate(face_details, start=1)]
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Malformed Rekognition response: {e}")
            raise AnalysisError(f"Malformed response from face detection service: {e}") from e

    def _to_attributes(self, face_id: int, face: Dict[str, Any]) -> FaceAttributes:
        """Reshape one Rekognition FaceDetail"""
        features = {}
        for source_name, field_name in FEATURE_FIELDS.items():
            flag = face.get(source_name)
            if flag:
                features[field_name] = FeatureFlag(value=flag["Value"], confidence=_round(flag["Confidence"]))

        box = face.get("BoundingBox")

        return FaceAttributes(
            faceId=face_id,
            ageRange=AgeRange(Low=face["AgeRange"]["Low"], High=face["AgeRange"]["High"]),
            gender=GenderEstimate(
                value=face["Gender"]["Value"],
                confidence=_round(face["Gender"]["Confidence"]),
            ),
            emotions=[
                EmotionScore(type=emotion["Type"], confidence=_round(emotion["Confidence"]))
                for emotion in face["Emotions"]
            ],
            attributes=FacialFeatures(**features),
            quality=ImageQuality(
                brightness=_round(face["Quality"]["Brightness"]),
                sharpness=_round(face["Quality"]["Sharpness"]),
            ),
            confidence=_round(face["Confidence"]),
            boundingBox=BoundingBox(**box) if box else None,
        )
