import unittest
from datetime import datetime

from pydantic import ValidationError

from facelens.models import (
    AgeRange,
    AnalysisResponse,
    EmotionScore,
    FaceAttributes,
    GenderEstimate,
    HistoryEntry,
    ImageQuality,
    PushSubscription,
)


def make_face(emotions, age=(25, 35)) -> FaceAttributes:
    return FaceAttributes(
        faceId=1,
        ageRange=AgeRange(Low=age[0], High=age[1]),
        gender=GenderEstimate(value="Female", confidence=98.0),
        emotions=[EmotionScore(type=t, confidence=c) for t, c in emotions],
        quality=ImageQuality(brightness=80.0, sharpness=90.0),
        confidence=99.9,
    )


class TestFaceAttributes(unittest.TestCase):
    def test_emotions_always_sorted(self):
        face = make_face([("CALM", 10.1), ("SAD", 2.0), ("HAPPY", 87.5)])
        self.assertEqual([e.type for e in face.emotions], ["HAPPY", "CALM", "SAD"])
        self.assertEqual(face.top_emotion.type, "HAPPY")

    def test_emotions_required(self):
        with self.assertRaises(ValidationError):
            make_face([])

    def test_immutable(self):
        face = make_face([("HAPPY", 87.5)])
        with self.assertRaises(ValidationError):
            face.confidence = 1.0

    def test_age_midpoint_rounds_half_up(self):
        self.assertEqual(AgeRange(Low=25, High=35).midpoint, 30)
        self.assertEqual(AgeRange(Low=25, High=36).midpoint, 31)


class TestHistoryEntry(unittest.TestCase):
    def test_from_face(self):
        when = datetime(2024, 5, 1, 9, 30)
        entry = HistoryEntry.from_face(make_face([("HAPPY", 87.5), ("CALM", 10.1)]), when=when)

        self.assertEqual(entry.age, 30)
        self.assertEqual(entry.emotion, "happy")
        self.assertEqual(entry.gender, "Female")
        self.assertEqual(entry.confidence, 99.9)
        self.assertEqual(entry.timestamp, when)


class TestAnalysisResponse(unittest.TestCase):
    def test_no_faces_body(self):
        self.assertEqual(
            AnalysisResponse.from_faces([]).model_dump(),
            {"success": True, "facesDetected": 0, "message": "No faces detected in the image"},
        )

    def test_faces_body_round_trips(self):
        body = AnalysisResponse.from_faces([make_face([("HAPPY", 87.5)])]).model_dump()
        self.assertEqual(body["facesDetected"], 1)
        self.assertNotIn("message", body)

        parsed = AnalysisResponse.model_validate(body)
        self.assertEqual(parsed.results[0].top_emotion.type, "HAPPY")


class TestPushSubscription(unittest.TestCase):
    def test_endpoint_required(self):
        with self.assertRaises(ValidationError):
            PushSubscription.model_validate({"keys": {}})
        with self.assertRaises(ValidationError):
            PushSubscription.model_validate({"endpoint": "  "})

    def test_extra_fields_preserved(self):
        sub = PushSubscription.model_validate({"endpoint": "https://push.example/a", "vendor": "x"})
        self.assertEqual(sub.to_subscription_info()["vendor"], "x")


if __name__ == "__main__":
    unittest.main()
