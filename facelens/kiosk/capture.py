import logging
from typing import Optional

import cv2
import numpy as np

from facelens.errors import CameraError, CaptureError

logger = logging.getLogger(__name__)


class CaptureFrame:
    """A single BGR frame, lives only for the duration of one analysis"""

    def __init__(self, pixels: np.ndarray):
        self.pixels = pixels
        self.height, self.width = pixels.shape[:2]

    def to_jpeg(self, quality: int = 95) -> bytes:
        ok, buffer = cv2.imencode(".jpg", self.pixels, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise CaptureError("Could not encode frame as JPEG")
        return buffer.tobytes()


class CameraCapture:
    """
    Grabs still frames from a webcam with OpenCV.

    Use as a context manager, or call open() and release() yourself.
    """

    def __init__(self, camera_index: int = 0, width: int = 1280, height: int = 720):
        """
        Initialize the camera capture

        Args:
            camera_index: OpenCV device index
            width: Requested frame width
            height: Requested frame height
        """
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.cap: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self.cap is not None

    def open(self):
        if self.is_open:
            return

        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Could not open webcam at index {self.camera_index}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        # Verify that video capture is working
        ret, _ = cap.read()
        if not ret:
            cap.release()
            raise CameraError("Could not read from webcam")

        self.cap = cap
        logger.info(f"Webcam {self.camera_index} opened")

    def read_frame(self) -> CaptureFrame:
        if not self.is_open:
            raise CaptureError("Webcam is not open")

        ret, frame = self.cap.read()
        if not ret:
            raise CaptureError("Failed to capture frame")
        return CaptureFrame(frame)

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Webcam {self.camera_index} released")

    def __enter__(self) -> "CameraCapture":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class FileCapture:
    """Reads a frame from an image on disk, the file picker counterpart of CameraCapture"""

    def __init__(self, path: str):
        self.path = path

    def open(self):
        pass

    @property
    def is_open(self) -> bool:
        return True

    def read_frame(self) -> CaptureFrame:
        frame = cv2.imread(self.path)
        if frame is None:
            raise CaptureError(f"Could not read image file: {self.path}")
        return CaptureFrame(frame)

    def release(self):
        pass
