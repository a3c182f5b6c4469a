import base64
import io
import sys
import unittest
from unittest import mock

import numpy as np
import requests
import soundfile as sf

from facelens.kiosk.feedback import (
    ERROR,
    SUCCESS,
    RemoteSpeaker,
    WaveTonePlayer,
    play_audio,
    synthesize_tone,
    to_wav,
)


class TestTones(unittest.TestCase):
    def test_tone_decays(self):
        samples = synthesize_tone(800.0, 0.3, sample_rate=8000)
        self.assertEqual(len(samples), 2400)
        self.assertLessEqual(np.abs(samples).max(), 0.3)
        self.assertLess(np.abs(samples[-100:]).max(), np.abs(samples[:100]).max())

    def test_rendered_wav_lengths(self):
        sink = mock.Mock()
        player = WaveTonePlayer(sink=sink, sample_rate=8000)

        for kind, frames in ((SUCCESS, 2400), (ERROR, 4000)):
            player.play(kind)
            info = sf.info(io.BytesIO(sink.call_args.args[0]))
            self.assertEqual(info.frames, frames)
            self.assertEqual(info.samplerate, 8000)
            self.assertEqual(info.subtype, "PCM_16")

    def test_unknown_tone(self):
        with self.assertRaises(ValueError):
            WaveTonePlayer().render("fanfare")

    def test_plays_on_sound_device_by_default(self):
        device = mock.Mock()
        with mock.patch.dict(sys.modules, {"sounddevice": device}):
            WaveTonePlayer(sample_rate=8000).play(ERROR)

        samples, rate = device.play.call_args.args
        self.assertEqual(rate, 8000)
        self.assertEqual(len(samples), 4000)

    def test_play_audio_decodes_clip(self):
        clip = to_wav(synthesize_tone(800.0, 0.3, sample_rate=8000), sample_rate=8000)
        device = mock.Mock()
        with mock.patch.dict(sys.modules, {"sounddevice": device}):
            play_audio(clip)

        samples, rate = device.play.call_args.args
        self.assertEqual((len(samples), rate), (2400, 8000))

    def test_play_audio_ignores_garbage(self):
        device = mock.Mock()
        with mock.patch.dict(sys.modules, {"sounddevice": device}):
            play_audio(b"not audio")
        device.play.assert_not_called()


class TestRemoteSpeaker(unittest.TestCase):
    @mock.patch("facelens.kiosk.feedback.requests.post")
    def test_hands_decoded_audio_to_sink(self, post):
        post.return_value.json.return_value = {"audioContent": base64.b64encode(b"mp3").decode()}
        sink = mock.Mock()

        RemoteSpeaker("http://localhost:8000", sink).say("Webcam stopped")

        sink.assert_called_once_with(b"mp3")
        self.assertEqual(post.call_args.args[0], "http://localhost:8000/api/synthesize-speech")
        self.assertEqual(post.call_args.kwargs["json"]["text"], "Webcam stopped")

    @mock.patch("facelens.kiosk.feedback.requests.post")
    def test_failure_is_quiet(self, post):
        post.side_effect = requests.ConnectionError("down")
        sink = mock.Mock()
        RemoteSpeaker("http://localhost:8000", sink).say("hello")
        sink.assert_not_called()


if __name__ == "__main__":
    unittest.main()
