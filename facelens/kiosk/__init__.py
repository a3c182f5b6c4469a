from .capture import CameraCapture, CaptureFrame, FileCapture
from .client import AnalysisClient
from .history import ResultHistory
from .kiosk import CameraState, Kiosk

__all__ = [
    "AnalysisClient",
    "CameraCapture",
    "CameraState",
    "CaptureFrame",
    "FileCapture",
    "Kiosk",
    "ResultHistory",
]
