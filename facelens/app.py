import logging
from typing import Optional

import google.auth
import google.auth.transport.requests
import requests
from fastapi import BackgroundTasks, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.oauth2 import service_account
from pydantic import ValidationError

from facelens.analysis import FaceAnalyzer
from facelens.config import Settings, get_settings
from facelens.engine import AnalysisEngine
from facelens.errors import AnalysisError, InputError
from facelens.models import ErrorResponse, PushSubscription, TextToSpeechRequest
from facelens.notifications import PushNotifier, SubscriptionStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TTS_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(),
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AnalysisEngine] = None,
    store: Optional[SubscriptionStore] = None,
) -> FastAPI:
    """Build the API, collaborators default to ones configured from the environment"""
    settings = settings or get_settings()
    store = store if store is not None else SubscriptionStore()
    if engine is None:
        analyzer = FaceAnalyzer(
            region=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        notifier = PushNotifier(
            store,
            vapid_public_key=settings.vapid_public_key,
            vapid_private_key=settings.vapid_private_key,
            vapid_subject=settings.vapid_subject,
        )
        engine = AnalysisEngine(analyzer, notifier)

    app = FastAPI(title="Facelens Face Analysis")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.engine = engine
    app.state.subscriptions = store

    @app.get("/")
    async def root():
        return {"status": "running", "service": "facelens"}

    @app.post("/api/analyze")
    async def analyze(background_tasks: BackgroundTasks, image: Optional[UploadFile] = File(None)):
        """Detect faces in the uploaded image and describe their attributes"""
        content = await image.read() if image is not None else b""
        if not content:
            return error_response(400, "No image file provided")

        try:
            # Rekognition is a blocking call, keep it off the event loop
            response, faces = await run_in_threadpool(engine.analyze, content)
        except InputError as e:
            return error_response(400, str(e))
        except AnalysisError as e:
            logger.error(f"Error analyzing image: {e}")
            return error_response(500, "Failed to analyze image", str(e))

        # Push goes out after the response, a slow endpoint never holds the caller
        if engine.should_notify(faces):
            background_tasks.add_task(engine.notify, faces)

        return JSONResponse(content=response.model_dump())

    @app.post("/api/subscribe")
    async def subscribe(request: Request):
        """Register a browser push subscription"""
        try:
            subscription = PushSubscription.model_validate(await request.json())
        except (ValueError, ValidationError):
            return error_response(400, "Invalid subscription")

        store.add(subscription)
        return {"success": True}

    @app.get("/api/subscriptions")
    async def get_subscriptions():
        return {"count": len(store)}

    @app.post("/api/synthesize-speech")
    async def synthesize_speech(request: TextToSpeechRequest):
        """Proxy requests to Google Text-to-Speech API"""
        try:
            # Service account key file first, Application Default Credentials otherwise
            if settings.google_application_credentials:
                credentials = service_account.Credentials.from_service_account_file(
                    settings.google_application_credentials, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            else:
                credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])

            credentials.refresh(google.auth.transport.requests.Request())

            voice_options = request.voiceOptions
            tts_request = {
                "input": {"text": request.text},
                "voice": {
                    "languageCode": voice_options.get("languageCode", "en-US"),
                    "name": voice_options.get("name", "en-US-Standard-C"),
                },
                "audioConfig": {"audioEncoding": "MP3"},
            }
            headers = {
                "Authorization": f"Bearer {credentials.token}",
                "Content-Type": "application/json",
            }

            response = requests.post(TTS_URL, headers=headers, json=tts_request, timeout=10)
            if not response.ok:
                logger.error(f"TTS API error {response.status_code}: {response.text}")
                return error_response(502, "Text-to-speech failed", response.text)

            return response.json()

        except Exception as e:
            logger.error(f"Error in text-to-speech: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("facelens.app:app", host="0.0.0.0", port=8000, reload=True)
