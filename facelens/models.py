from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


class AgeRange(BaseModel):
    """Estimated age bracket, keeps the service's Low/High casing on the wire"""

    model_config = ConfigDict(frozen=True)

    Low: int
    High: int

    @property
    def midpoint(self) -> int:
        # half-up, so 25-36 gives 31
        return int((self.Low + self.High) / 2 + 0.5)


class GenderEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    confidence: float


class EmotionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    confidence: float


class FeatureFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: bool
    confidence: float


class FacialFeatures(BaseModel):
    """Boolean facial features; None when the service did not report one"""

    model_config = ConfigDict(frozen=True)

    smile: Optional[FeatureFlag] = None
    eyeglasses: Optional[FeatureFlag] = None
    sunglasses: Optional[FeatureFlag] = None
    beard: Optional[FeatureFlag] = None
    mustache: Optional[FeatureFlag] = None
    eyesOpen: Optional[FeatureFlag] = None
    mouthOpen: Optional[FeatureFlag] = None


class ImageQuality(BaseModel):
    model_config = ConfigDict(frozen=True)

    brightness: float
    sharpness: float


class BoundingBox(BaseModel):
    """Face location as fractions of the image size"""

    model_config = ConfigDict(frozen=True)

    Width: float
    Height: float
    Left: float
    Top: float


class FaceAttributes(BaseModel):
    """Simplified attributes of one detected face"""

    model_config = ConfigDict(frozen=True)

    faceId: int
    ageRange: AgeRange
    gender: GenderEstimate
    emotions: List[EmotionScore]  # most confident first
    attributes: FacialFeatures = Field(default_factory=FacialFeatures)
    quality: ImageQuality
    confidence: float
    boundingBox: Optional[BoundingBox] = None

    @field_validator("emotions")
    @classmethod
    def sort_emotions(cls, emotions: List[EmotionScore]) -> List[EmotionScore]:
        if not emotions:
            raise ValueError("a face must carry at least one emotion")
        return sorted(emotions, key=lambda e: e.confidence, reverse=True)

    @property
    def top_emotion(self) -> EmotionScore:
        return self.emotions[0]


class AnalysisResponse(BaseModel):
    """Body returned by the analysis endpoint"""

    success: bool = True
    facesDetected: int
    results: List[FaceAttributes] = Field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def from_faces(cls, faces: List[FaceAttributes]) -> "AnalysisResponse":
        if not faces:
            return cls(facesDetected=0, message="No faces detected in the image")
        return cls(facesDetected=len(faces), results=faces)

    @model_serializer
    def serialize_model(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success, "facesDetected": self.facesDetected}
        if self.facesDetected > 0:
            body["results"] = [face.model_dump() for face in self.results]
        if self.message:
            body["message"] = self.message
        return body


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None

    @model_serializer
    def serialize_model(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class PushSubscription(BaseModel):
    """Browser push subscription as produced by PushManager.subscribe()"""

    model_config = ConfigDict(extra="allow")

    endpoint: str
    expirationTime: Optional[float] = None
    keys: Dict[str, str] = Field(default_factory=dict)

    @field_validator("endpoint")
    @classmethod
    def endpoint_not_blank(cls, endpoint: str) -> str:
        if not endpoint.strip():
            raise ValueError("endpoint must not be empty")
        return endpoint

    def to_subscription_info(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PushPayload(BaseModel):
    title: str
    body: str
    icon: str = "/network-detection.svg"
    data: Dict[str, str] = Field(default_factory=lambda: {"url": "/"})


class HistoryEntry(BaseModel):
    """Summary of one successful check-in, kept in the kiosk's recent history"""

    id: int
    timestamp: datetime
    gender: str
    age: int
    emotion: str
    confidence: float

    @classmethod
    def from_face(cls, face: FaceAttributes, when: Optional[datetime] = None) -> "HistoryEntry":
        when = when or datetime.now()
        return cls(
            id=int(when.timestamp() * 1000),
            timestamp=when,
            gender=face.gender.value,
            age=face.ageRange.midpoint,
            emotion=face.top_emotion.type.lower(),
            confidence=face.confidence,
        )


class TextToSpeechRequest(BaseModel):
    text: str
    voiceOptions: Dict[str, str] = Field(
        default_factory=lambda: {"languageCode": "en-US", "name": "en-US-Standard-C"}
    )
