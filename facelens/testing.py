"""Helpers shared by the test modules: canned Rekognition payloads and fakes."""

from typing import Any, Dict, List, Optional, Sequence, Tuple


def face_detail(
    age: Tuple[int, int] = (25, 35),
    gender: Tuple[str, float] = ("Female", 98.0),
    emotions: Sequence[Tuple[str, float]] = (("HAPPY", 87.5), ("CALM", 10.1)),
    confidence: float = 99.99871,
) -> Dict[str, Any]:
    """A FaceDetail shaped like the DetectFaces response with Attributes=ALL"""
    return {
        "BoundingBox": {"Width": 0.31, "Height": 0.42, "Left": 0.33, "Top": 0.2},
        "AgeRange": {"Low": age[0], "High": age[1]},
        "Smile": {"Value": True, "Confidence": 96.123},
        "Eyeglasses": {"Value": False, "Confidence": 99.456},
        "Sunglasses": {"Value": False, "Confidence": 99.871},
        "Gender": {"Value": gender[0], "Confidence": gender[1]},
        "Beard": {"Value": False, "Confidence": 92.004},
        "Mustache": {"Value": False, "Confidence": 97.338},
        "EyesOpen": {"Value": True, "Confidence": 98.766},
        "MouthOpen": {"Value": True, "Confidence": 81.117},
        "Emotions": [{"Type": t, "Confidence": c} for t, c in emotions],
        "Quality": {"Brightness": 81.4567, "Sharpness": 92.2222},
        "Confidence": confidence,
    }


class FakeRekognition:
    """Stands in for a boto3 rekognition client"""

    def __init__(self, faces: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.faces = faces or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def detect_faces(self, **kwargs) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"FaceDetails": self.faces}
