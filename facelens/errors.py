from typing import Optional


class FacelensError(Exception):
    """Base class for all errors raised by facelens"""


class InputError(FacelensError):
    """The caller did not provide a usable image"""


class AnalysisError(FacelensError):
    """The face detection service call failed or returned garbage"""


class CaptureError(FacelensError):
    """A frame could not be acquired"""


class CameraError(CaptureError):
    """The webcam could not be opened"""


class AnalysisRequestError(FacelensError):
    """The analysis endpoint answered with an error or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
