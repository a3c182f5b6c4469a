import argparse
import logging
import sys
import time
from typing import List, Optional

from facelens.config import get_settings
from facelens.kiosk import AnalysisClient, CameraCapture, FileCapture, Kiosk, ResultHistory
from facelens.kiosk.feedback import RemoteSpeaker, WaveTonePlayer, play_audio

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m facelens.kiosk",
        description="Attendance kiosk: capture faces and have them analyzed by the facelens service",
    )
    parser.add_argument(
        "--image",
        help="Analyze this image file once instead of running the webcam",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between automatic captures (default: CAPTURE_INTERVAL or 5)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Log speech instead of synthesizing it",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    kiosk = Kiosk(
        capture=FileCapture(args.image) if args.image else CameraCapture(settings.camera_index),
        client=AnalysisClient(settings.api_url),
        speaker=None if args.quiet else RemoteSpeaker(settings.api_url, play_audio),
        tones=WaveTonePlayer(),
        history=ResultHistory(settings.history_capacity),
        on_status=lambda message: logger.info(f"Status: {message}"),
        interval=args.interval or settings.capture_interval,
    )

    if not kiosk.start_camera():
        return 1

    try:
        if args.image:
            return 0 if kiosk.capture_and_analyze() is not None else 2

        kiosk.set_auto_capture(True)
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down kiosk")
    finally:
        kiosk.stop_camera()
        for entry in kiosk.history.entries():
            logger.info(f"{entry.timestamp:%H:%M:%S} {entry.gender} {entry.age} {entry.emotion}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
