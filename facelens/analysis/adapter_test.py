import unittest

from botocore.exceptions import ClientError, EndpointConnectionError

from facelens.analysis import FaceAnalyzer
from facelens.errors import AnalysisError, InputError
from facelens.testing import FakeRekognition, face_detail


class TestFaceAnalyzer(unittest.TestCase):
    def test_reshapes_single_face(self):
        client = FakeRekognition(faces=[face_detail()])
        faces = FaceAnalyzer(client=client).analyze(b"jpeg-bytes")

        self.assertEqual(client.calls, [{"Image": {"Bytes": b"jpeg-bytes"}, "Attributes": ["ALL"]}])
        self.assertEqual(len(faces), 1)
        face = faces[0]
        self.assertEqual(face.faceId, 1)
        self.assertEqual((face.ageRange.Low, face.ageRange.High), (25, 35))
        self.assertEqual(face.ageRange.midpoint, 30)
        self.assertEqual(face.gender.value, "Female")
        self.assertEqual(face.gender.confidence, 98.0)
        self.assertEqual([e.type for e in face.emotions], ["HAPPY", "CALM"])
        self.assertEqual(face.top_emotion.confidence, 87.5)
        self.assertEqual(face.confidence, 100.0)
        self.assertEqual(face.quality.brightness, 81.46)
        self.assertEqual(face.quality.sharpness, 92.22)
        self.assertTrue(face.attributes.smile.value)
        self.assertEqual(face.attributes.smile.confidence, 96.12)
        self.assertEqual(face.attributes.mouthOpen.confidence, 81.12)
        self.assertEqual(face.boundingBox.Left, 0.33)

    def test_emotions_sorted_descending(self):
        detail = face_detail(emotions=[("CALM", 3.33333), ("SAD", 1.0), ("ANGRY", 50.556), ("HAPPY", 45.1)])
        face = FaceAnalyzer(client=FakeRekognition(faces=[detail])).analyze(b"x")[0]

        confidences = [e.confidence for e in face.emotions]
        self.assertEqual(confidences, sorted(confidences, reverse=True))
        self.assertEqual(face.top_emotion.type, "ANGRY")
        self.assertEqual(face.top_emotion.confidence, 50.56)

    def test_numbers_faces_in_order(self):
        client = FakeRekognition(faces=[face_detail(), face_detail(gender=("Male", 77.7))])
        faces = FaceAnalyzer(client=client).analyze(b"x")
        self.assertEqual([f.faceId for f in faces], [1, 2])
        self.assertEqual(faces[1].gender.value, "Male")

    def test_missing_optional_features_are_none(self):
        detail = face_detail()
        del detail["Beard"]
        del detail["BoundingBox"]
        face = FaceAnalyzer(client=FakeRekognition(faces=[detail])).analyze(b"x")[0]
        self.assertIsNone(face.attributes.beard)
        self.assertIsNone(face.boundingBox)

    def test_no_faces_is_not_an_error(self):
        self.assertEqual(FaceAnalyzer(client=FakeRekognition(faces=[])).analyze(b"x"), [])

    def test_empty_image_is_input_error(self):
        client = FakeRekognition()
        with self.assertRaises(InputError):
            FaceAnalyzer(client=client).analyze(b"")
        self.assertEqual(client.calls, [])

    def test_network_error_is_analysis_error(self):
        client = FakeRekognition(error=EndpointConnectionError(endpoint_url="https://rekognition"))
        with self.assertRaises(AnalysisError):
            FaceAnalyzer(client=client).analyze(b"x")

    def test_service_error_is_analysis_error(self):
        error = ClientError(
            {"Error": {"Code": "InvalidImageFormatException", "Message": "bad image"}}, "DetectFaces"
        )
        with self.assertRaises(AnalysisError) as ctx:
            FaceAnalyzer(client=FakeRekognition(error=error)).analyze(b"x")
        self.assertIn("InvalidImageFormatException", str(ctx.exception))

    def test_malformed_response_is_analysis_error(self):
        detail = face_detail()
        del detail["Gender"]
        with self.assertRaises(AnalysisError):
            FaceAnalyzer(client=FakeRekognition(faces=[detail])).analyze(b"x")

    def test_face_without_emotions_is_malformed(self):
        with self.assertRaises(AnalysisError):
            FaceAnalyzer(client=FakeRekognition(faces=[face_detail(emotions=[])])).analyze(b"x")

    def test_non_mapping_face_is_malformed(self):
        with self.assertRaises(AnalysisError) as ctx:
            FaceAnalyzer(client=FakeRekognition(faces=["garbage"])).analyze(b"x")
        self.assertIn("Malformed response", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
