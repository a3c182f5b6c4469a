import logging
import threading
from enum import Enum
from typing import Callable, Optional

from facelens.errors import CaptureError, FacelensError
from facelens.kiosk.client import AnalysisClient
from facelens.kiosk.feedback import ERROR, SUCCESS, LogSpeaker, Speaker, TonePlayer, WaveTonePlayer
from facelens.kiosk.history import ResultHistory
from facelens.models import FaceAttributes, HistoryEntry

logger = logging.getLogger(__name__)


class CameraState(Enum):
    IDLE = "idle"
    CAMERA_ACTIVE = "camera-active"


class Kiosk:
    """
    Attendance kiosk: captures a frame, has it analyzed and reports back.

    Lifecycle is idle -> camera-active -> idle. While the camera is active at
    most one analysis runs at a time; a capture requested meanwhile is
    ignored, not queued. Auto-capture ticks follow the same rule and the
    timer never outlives the camera.
    """

    def __init__(
        self,
        capture,
        client: AnalysisClient,
        speaker: Optional[Speaker] = None,
        tones: Optional[TonePlayer] = None,
        history: Optional[ResultHistory] = None,
        on_status: Optional[Callable[[str], None]] = None,
        interval: float = 5.0,
    ):
        """
        Initialize the kiosk

        Args:
            capture: Frame source with open(), read_frame() and release()
            client: Submits frames to the analysis endpoint
            speaker: Spoken feedback, logged only when omitted
            tones: Success/error beeps
            history: Recent check-ins, 10 entries when omitted
            on_status: Receives every status line shown to the user
            interval: Seconds between auto-capture ticks
        """
        self.capture = capture
        self.client = client
        self.speaker = speaker or LogSpeaker()
        self.tones = tones or WaveTonePlayer()
        self.history = history if history is not None else ResultHistory()
        self.on_status = on_status
        self.interval = interval

        self.state = CameraState.IDLE
        self.status_message = ""
        self.last_result: Optional[FaceAttributes] = None
        self.skipped_ticks = 0

        self._analyzing = False
        self._generation = 0
        self._in_flight = threading.Lock()
        self._auto_stop: Optional[threading.Event] = None
        self._auto_thread: Optional[threading.Thread] = None

    @property
    def analyzing(self) -> bool:
        return self._analyzing

    @property
    def auto_capture(self) -> bool:
        return self._auto_thread is not None and self._auto_thread.is_alive()

    def _set_status(self, message: str):
        self.status_message = message
        if self.on_status:
            self.on_status(message)

    def start_camera(self) -> bool:
        """Open the camera, returns False (and stays idle) when it cannot be opened"""
        if self.state == CameraState.CAMERA_ACTIVE:
            return True

        try:
            self.capture.open()
        except CaptureError as e:
            logger.error(f"Error accessing webcam: {e}")
            self._set_status(f"Error accessing webcam: {e}")
            self.speaker.say("Error accessing webcam")
            return False

        self.state = CameraState.CAMERA_ACTIVE
        self.speaker.say("Webcam started. Ready for attendance.")
        return True

    def stop_camera(self):
        if self.state != CameraState.CAMERA_ACTIVE:
            return

        # An analysis still in flight belongs to this session and is discarded
        self._generation += 1
        try:
            self.set_auto_capture(False)
        finally:
            self.capture.release()
            self.state = CameraState.IDLE
        self.speaker.say("Webcam stopped")

    def capture_and_analyze(self) -> Optional[HistoryEntry]:
        """
        Capture one frame and analyze it

        Returns:
            The new history entry, None when nothing was recorded (idle, busy,
            no face, error or camera stopped meanwhile)
        """
        generation = self._generation
        if self.state != CameraState.CAMERA_ACTIVE:
            return None
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Analysis already in flight, capture ignored")
            return None

        self._analyzing = True
        self._set_status("Analyzing...")
        try:
            frame = self.capture.read_frame()
            response = self.client.analyze(frame.to_jpeg())
            if self._is_stale(generation):
                return None

            if response.facesDetected > 0 and response.results:
                return self._on_face(response.results[0])

            self.tones.play(ERROR)
            self.speaker.say("No face detected. Please position yourself in front of the camera.")
            self._set_status("⚠ No face detected. Please try again.")
            return None
        except FacelensError as e:
            details = getattr(e, "details", None)
            message = f"{e}: {details}" if details else str(e)
            logger.error(f"Error processing image: {message}")
            self._on_error(generation, message)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error processing image: {e}")
            self._on_error(generation, str(e))
            return None
        finally:
            self._analyzing = False
            self._in_flight.release()

    def _is_stale(self, generation: int) -> bool:
        if generation == self._generation:
            return False
        logger.info("Camera stopped during analysis, result discarded")
        return True

    def _on_error(self, generation: int, message: str):
        if self._is_stale(generation):
            return
        self.tones.play(ERROR)
        self.speaker.say("Error processing image")
        self._set_status(f"Error: {message}")

    def _on_face(self, face: FaceAttributes) -> HistoryEntry:
        entry = HistoryEntry.from_face(face)
        self.last_result = face
        self.history.add(entry)

        self.tones.play(SUCCESS)
        self.speaker.say(f"Attendance marked. You seem {entry.emotion}. Have a great day!")
        self._set_status("✓ Attendance marked successfully!")
        return entry

    def tick(self) -> bool:
        """One auto-capture tick, dropped when an analysis is still running"""
        if self._analyzing:
            self.skipped_ticks += 1
            logger.debug("Previous analysis still running, tick skipped")
            return False
        self.capture_and_analyze()
        return True

    def set_auto_capture(self, enabled: bool, interval: Optional[float] = None) -> bool:
        """
        Turn repeating capture on or off

        Returns:
            Whether auto-capture is running afterwards
        """
        if interval is not None:
            self.interval = interval

        self._cancel_auto_capture()
        if not enabled or self.state != CameraState.CAMERA_ACTIVE:
            return False

        stop = threading.Event()
        thread = threading.Thread(target=self._auto_capture_loop, args=(stop,), daemon=True)
        self._auto_stop = stop
        self._auto_thread = thread
        thread.start()
        logger.info(f"Auto-capture every {self.interval}s")
        return True

    def _auto_capture_loop(self, stop: threading.Event):
        while not stop.wait(self.interval):
            try:
                self.tick()
            except Exception as e:
                logger.exception(f"Auto-capture tick failed: {e}")

    def _cancel_auto_capture(self):
        if self._auto_stop is not None:
            self._auto_stop.set()
        thread = self._auto_thread
        # A tick blocked on the network finishes on its own, its result is discarded
        if (
            thread is not None
            and thread is not threading.current_thread()
            and thread.is_alive()
            and not self._analyzing
        ):
            thread.join(timeout=2.0)
        self._auto_stop = None
        self._auto_thread = None

    def __enter__(self) -> "Kiosk":
        self.start_camera()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop_camera()
