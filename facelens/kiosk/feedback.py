import base64
import io
import logging
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import requests
import soundfile as sf

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"

# kind -> (frequency in Hz, duration in seconds)
TONES: Dict[str, Tuple[float, float]] = {
    SUCCESS: (800.0, 0.3),
    ERROR: (200.0, 0.5),
}


class Speaker:
    """Speaks short prompts to the person in front of the kiosk"""

    def say(self, text: str):
        raise NotImplementedError("Speech output not implemented")


class TonePlayer:
    """Plays the short success/error beeps"""

    def play(self, kind: str):
        raise NotImplementedError("Tone output not implemented")


class LogSpeaker(Speaker):
    """Speaker for headless kiosks, utterances only go to the log"""

    def say(self, text: str):
        logger.info(f"Speaking: {text}")


class RemoteSpeaker(Speaker):
    """
    Synthesizes speech through the service's Text-to-Speech proxy.

    The MP3 audio is handed to `sink`; failures are logged and otherwise
    ignored so that missing audio never blocks a check-in.
    """

    def __init__(
        self,
        base_url: str,
        sink: Callable[[bytes], None],
        voice_options: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
    ):
        self.url = f"{base_url.rstrip('/')}/api/synthesize-speech"
        self.sink = sink
        self.voice_options = voice_options or {"languageCode": "en-US", "name": "en-US-Standard-C"}
        self.timeout = timeout

    def say(self, text: str):
        try:
            response = requests.post(
                self.url,
                json={"text": text, "voiceOptions": self.voice_options},
                timeout=self.timeout,
            )
            response.raise_for_status()
            audio = response.json().get("audioContent")
            if not audio:
                logger.warning(f"No audio returned for: {text}")
                return
            self.sink(base64.b64decode(audio))
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Speech synthesis failed: {e}")


def synthesize_tone(
    frequency: float,
    duration: float,
    sample_rate: int = 44100,
    start_gain: float = 0.3,
    end_gain: float = 0.01,
) -> np.ndarray:
    """Sine tone with an exponential gain ramp, as float samples in [-1, 1]"""
    t = np.arange(int(round(sample_rate * duration))) / sample_rate
    envelope = start_gain * (end_gain / start_gain) ** (t / duration)
    return envelope * np.sin(2 * np.pi * frequency * t)


def to_wav(samples: np.ndarray, sample_rate: int = 44100) -> bytes:
    buffer = io.BytesIO()
    sf.write(buffer, np.clip(samples, -1.0, 1.0), sample_rate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


def play_samples(samples: np.ndarray, sample_rate: int):
    """Play float samples on the default output device without blocking"""
    # PortAudio is only needed on machines that actually produce sound
    try:
        import sounddevice as sd
    except OSError as e:
        logger.warning(f"No audio output available: {e}")
        return

    try:
        sd.play(samples, sample_rate)
    except sd.PortAudioError as e:
        logger.warning(f"Could not play audio: {e}")


def play_audio(audio: bytes):
    """Decode an encoded clip (MP3 from the speech proxy, WAV) and play it"""
    try:
        samples, sample_rate = sf.read(io.BytesIO(audio), dtype="float32")
    except RuntimeError as e:
        logger.warning(f"Could not decode audio clip: {e}")
        return
    play_samples(samples, sample_rate)


class WaveTonePlayer(TonePlayer):
    """
    Plays the tones on the default sound device.

    With a `sink`, the tone is rendered to WAV bytes and handed over instead.
    """

    def __init__(self, sink: Optional[Callable[[bytes], None]] = None, sample_rate: int = 44100):
        self.sink = sink
        self.sample_rate = sample_rate

    def samples(self, kind: str) -> np.ndarray:
        if kind not in TONES:
            raise ValueError(f"Unknown tone: {kind}")
        frequency, duration = TONES[kind]
        return synthesize_tone(frequency, duration, self.sample_rate)

    def render(self, kind: str) -> bytes:
        return to_wav(self.samples(kind), self.sample_rate)

    def play(self, kind: str):
        if self.sink is not None:
            self.sink(self.render(kind))
            return
        play_samples(self.samples(kind), self.sample_rate)
