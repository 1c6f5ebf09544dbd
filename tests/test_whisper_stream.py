import threading
import unittest

import numpy as np

from recitation_core.config import SAMPLE_RATE
from recitation_core.passage import Verse
from recitation_core.recognition import RecitationController
from recitation_core.whisper_stream import (
    ERROR_AUDIO_CAPTURE,
    WhisperStreamRecognizer,
    to_mono_float,
)

HALF_SECOND = SAMPLE_RATE // 2


def _loud():
    return np.full(HALF_SECOND, 0.1, dtype=np.float32)


def _silent():
    return np.zeros(HALF_SECOND, dtype=np.float32)


class RecordingListener:
    def __init__(self):
        self.segments = []
        self.errors = []
        self.ends = 0

    def on_segment(self, segment):
        self.segments.append(segment)

    def on_error(self, code):
        self.errors.append(code)

    def on_end(self):
        self.ends += 1


class ScriptedTranscriber:
    def __init__(self, texts):
        self.texts = list(texts)
        self.audio_lengths = []

    def __call__(self, audio):
        self.audio_lengths.append(len(audio))
        return self.texts.pop(0) if self.texts else ""


class WhisperStreamRecognizerTests(unittest.TestCase):
    def _recognizer(self, texts, **kwargs):
        self.transcriber = ScriptedTranscriber(texts)
        kwargs.setdefault("silence_seconds", 0.8)
        kwargs.setdefault("interim_interval", 1.0)
        recognizer = WhisperStreamRecognizer(transcribe_fn=self.transcriber, **kwargs)
        self.listener = RecordingListener()
        recognizer.start(self.listener)
        return recognizer

    def test_available_with_injected_transcriber(self) -> None:
        self.assertTrue(WhisperStreamRecognizer(transcribe_fn=lambda audio: "").available)

    def test_leading_silence_is_ignored(self) -> None:
        recognizer = self._recognizer(["قل"])

        for _ in range(4):
            recognizer.feed_audio(SAMPLE_RATE, _silent())

        self.assertEqual(self.listener.segments, [])
        self.assertEqual(self.transcriber.audio_lengths, [])

    def test_interim_then_final_share_result_index(self) -> None:
        recognizer = self._recognizer(["قل", "قل هو", "الله"])

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _silent())
        recognizer.feed_audio(SAMPLE_RATE, _silent())

        self.assertEqual(
            [(s.result_index, s.transcript_text, s.is_final) for s in self.listener.segments],
            [(0, "قل", False), (0, "قل هو", True)],
        )
        self.assertEqual(self.transcriber.audio_lengths, [2 * HALF_SECOND, 4 * HALF_SECOND])

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _loud())

        self.assertEqual(self.listener.segments[-1].result_index, 1)
        self.assertFalse(self.listener.segments[-1].is_final)

    def test_long_utterance_is_closed_at_window_limit(self) -> None:
        recognizer = self._recognizer(["قل هو"], interim_interval=10.0, max_utterance_seconds=1.0)

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _loud())

        self.assertEqual(len(self.listener.segments), 1)
        self.assertTrue(self.listener.segments[0].is_final)

    def test_stop_flushes_open_utterance(self) -> None:
        recognizer = self._recognizer(["قل"])

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.stop()

        self.assertEqual(len(self.listener.segments), 1)
        self.assertTrue(self.listener.segments[0].is_final)
        self.assertEqual(self.listener.ends, 1)
        self.assertFalse(recognizer.is_running)

        # Chunks after stop are dropped
        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.stop()
        self.assertEqual(len(self.listener.segments), 1)
        self.assertEqual(self.listener.ends, 1)

    def test_stop_without_speech_only_ends(self) -> None:
        recognizer = self._recognizer([])

        recognizer.stop()

        self.assertEqual(self.listener.segments, [])
        self.assertEqual(self.listener.ends, 1)

    def test_transcription_failure_reports_error_and_end(self) -> None:
        def broken(audio):
            raise RuntimeError("model crashed")

        recognizer = WhisperStreamRecognizer(transcribe_fn=broken, silence_seconds=0.4)
        listener = RecordingListener()
        recognizer.start(listener)

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _silent())

        self.assertEqual(listener.errors, [ERROR_AUDIO_CAPTURE])
        self.assertEqual(listener.ends, 1)
        self.assertFalse(recognizer.is_running)

    def test_failed_flush_on_stop_ends_run_once(self) -> None:
        def broken(audio):
            raise RuntimeError("model crashed")

        recognizer = WhisperStreamRecognizer(transcribe_fn=broken)
        listener = RecordingListener()
        recognizer.start(listener)

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.stop()

        self.assertEqual(listener.errors, [ERROR_AUDIO_CAPTURE])
        self.assertEqual(listener.ends, 1)

    def test_restart_numbers_results_from_zero(self) -> None:
        recognizer = self._recognizer(["قل", "هو"], silence_seconds=0.4)

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _silent())
        recognizer.stop()
        recognizer.start(self.listener)
        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _silent())

        self.assertEqual([s.result_index for s in self.listener.segments], [0, 0])


class OrderedListener:
    def __init__(self):
        self.events = []

    def on_segment(self, segment):
        self.events.append(("segment", segment.transcript_text, segment.is_final))

    def on_error(self, code):
        self.events.append(("error", code))

    def on_end(self):
        self.events.append(("end",))


class ConcurrentStopTests(unittest.TestCase):
    def test_stop_waits_for_transcription_in_progress(self) -> None:
        entered = threading.Event()
        release = threading.Event()
        texts = ["قل", "قل هو"]

        def slow_transcribe(audio):
            if not entered.is_set():
                entered.set()
                release.wait(timeout=5)
            return texts.pop(0)

        recognizer = WhisperStreamRecognizer(transcribe_fn=slow_transcribe, interim_interval=0.5)
        listener = OrderedListener()
        recognizer.start(listener)

        feeder = threading.Thread(target=recognizer.feed_audio, args=(SAMPLE_RATE, _loud()))
        feeder.start()
        self.assertTrue(entered.wait(timeout=5))

        stopper = threading.Thread(target=recognizer.stop)
        stopper.start()
        stopper.join(timeout=0.2)
        self.assertTrue(stopper.is_alive())

        release.set()
        feeder.join(timeout=5)
        stopper.join(timeout=5)

        self.assertEqual(listener.events, [
            ("segment", "قل", False),
            ("segment", "قل هو", True),
            ("end",),
        ])
        self.assertFalse(recognizer.is_running)


class ToMonoFloatTests(unittest.TestCase):
    def test_scales_integer_samples(self) -> None:
        audio = to_mono_float(np.array([32767, 0], dtype=np.int16))

        self.assertEqual(audio.dtype, np.float32)
        self.assertAlmostEqual(float(audio[0]), 1.0, places=4)

    def test_averages_channels(self) -> None:
        audio = to_mono_float(np.array([[0.2, 0.4], [0.0, 0.0]], dtype=np.float32))

        self.assertEqual(audio.shape, (2,))
        self.assertAlmostEqual(float(audio[0]), 0.3, places=5)


class ControllerWithWhisperStreamTests(unittest.TestCase):
    def test_reciting_whole_passage_stops_recognizer(self) -> None:
        recognizer = WhisperStreamRecognizer(
            transcribe_fn=lambda audio: "قل هو الله احد",
            silence_seconds=0.4,
        )
        controller = RecitationController(recognizer)
        controller.load_passage([Verse(number=1, text="قُلْ هُوَ اللَّهُ أَحَدٌ")])
        controller.start_listening()

        recognizer.feed_audio(SAMPLE_RATE, _loud())
        recognizer.feed_audio(SAMPLE_RATE, _silent())

        self.assertTrue(controller.session.is_complete)
        self.assertFalse(controller.is_listening)
        self.assertFalse(recognizer.is_running)
        self.assertEqual(controller.restart_count, 0)


if __name__ == "__main__":
    unittest.main()
