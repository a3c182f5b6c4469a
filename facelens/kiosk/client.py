import logging

import requests
from pydantic import ValidationError

from facelens.errors import AnalysisRequestError
from facelens.models import AnalysisResponse

logger = logging.getLogger(__name__)


class AnalysisClient:
    """Submits captured images to the facelens analysis endpoint"""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def analyze_url(self) -> str:
        return f"{self.base_url}/api/analyze"

    def analyze(self, image: bytes, filename: str = "capture.jpg") -> AnalysisResponse:
        """
        Upload one image as the `image` form field

        Raises:
            AnalysisRequestError: network failure or a non-2xx answer
        """
        try:
            response = self.session.post(
                self.analyze_url,
                files={"image": (filename, image, "image/jpeg")},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Could not reach analysis endpoint: {e}")
            raise AnalysisRequestError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            error = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else None
            raise AnalysisRequestError(
                error or f"Analysis failed with status {response.status_code}",
                status_code=response.status_code,
                details=details,
            )

        try:
            return AnalysisResponse.model_validate(body)
        except ValidationError as e:
            raise AnalysisRequestError(f"Unexpected analysis response: {e}") from e
