import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime configuration, read from the environment (and a .env file if present)"""

    aws_region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    vapid_public_key: Optional[str] = None
    vapid_private_key: Optional[str] = None
    vapid_subject: str = "mailto:admin@example.com"

    google_application_credentials: Optional[str] = None
    cors_origins: List[str] = ["*"]

    # Kiosk side
    api_url: str = "http://localhost:8000"
    camera_index: int = 0
    capture_interval: float = 5.0
    history_capacity: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            aws_region=os.getenv("AWS_REGION") or "us-east-1",
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            vapid_public_key=os.getenv("VAPID_PUBLIC_KEY"),
            vapid_private_key=os.getenv("VAPID_PRIVATE_KEY"),
            vapid_subject=os.getenv("VAPID_SUBJECT") or "mailto:admin@example.com",
            google_application_credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            api_url=os.getenv("FACELENS_API_URL", "http://localhost:8000"),
            camera_index=int(os.getenv("CAMERA_INDEX", "0")),
            capture_interval=float(os.getenv("CAPTURE_INTERVAL", "5")),
            history_capacity=int(os.getenv("HISTORY_CAPACITY", "10")),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
