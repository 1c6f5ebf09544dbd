"""
Streaming speech recognition capability backed by a Quran-tuned Whisper model.

Turns microphone chunks into the revisable hypothesis stream the aligner
consumes. An energy gate splits the audio into utterances; while an
utterance is open its growing buffer is re-transcribed every few seconds
and delivered as an interim revision under the same result_index. Silence,
the Whisper window limit or stop() closes it with a final revision.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import librosa
import numpy as np

from .config import (
    WHISPER_MODEL,
    SAMPLE_RATE,
    SPEECH_RMS_THRESHOLD,
    UTTERANCE_SILENCE_SECONDS,
    INTERIM_INTERVAL_SECONDS,
    MAX_UTTERANCE_SECONDS,
    MAX_NEW_TOKENS,
)
from .transcript_aligner import HypothesisSegment

logger = logging.getLogger(__name__)

# Error code reported when transcription of captured audio fails
ERROR_AUDIO_CAPTURE = "audio-capture"

try:
    import torch
    from transformers import WhisperForConditionalGeneration, WhisperProcessor
    WHISPER_AVAILABLE = True
except ImportError as e:
    WHISPER_AVAILABLE = False
    logger.warning(f"torch/transformers not available - live recognition disabled: {e}")


# =============================================================================
# Model cache
# =============================================================================

_whisper_cache = {"model": None, "processor": None, "loaded": False, "model_name": None, "load_time": 0.0}


def _get_device_and_dtype():
    """Get the best available device and dtype."""
    if torch.cuda.is_available():
        return torch.device("cuda"), torch.float16
    return torch.device("cpu"), torch.float32


def load_whisper(model_name: Optional[str] = None):
    """Load the Whisper ASR model. Returns (model, processor)."""
    actual_model = model_name or WHISPER_MODEL

    if _whisper_cache["loaded"] and _whisper_cache["model_name"] == actual_model:
        return _whisper_cache["model"], _whisper_cache["processor"]

    start_time = time.time()
    logger.info(f"Loading Whisper: {actual_model}")
    device, dtype = _get_device_and_dtype()

    model = WhisperForConditionalGeneration.from_pretrained(
        actual_model,
        torch_dtype=dtype,
        low_cpu_mem_usage=True,
    ).to(device)
    model.eval()
    processor = WhisperProcessor.from_pretrained(actual_model)

    load_time = time.time() - start_time
    _whisper_cache.update(
        model=model, processor=processor, loaded=True,
        model_name=actual_model, load_time=load_time,
    )
    logger.info(f"Whisper loaded on {device} in {load_time:.2f}s")
    return model, processor


def transcribe_audio(audio: np.ndarray, model_name: Optional[str] = None) -> str:
    """Transcribe 16 kHz mono float audio."""
    model, processor = load_whisper(model_name)
    device = next(model.parameters()).device

    feats = processor(audio=audio, sampling_rate=SAMPLE_RATE, return_tensors="pt")["input_features"]
    feats = feats.to(device=device, dtype=model.dtype)

    with torch.no_grad():
        out_ids = model.generate(
            feats,
            max_new_tokens=MAX_NEW_TOKENS,
            do_sample=False,
            num_beams=1,
        )

    return processor.batch_decode(out_ids, skip_special_tokens=True)[0].strip()


def to_mono_float(samples: np.ndarray) -> np.ndarray:
    """Convert integer or multi-channel microphone samples to mono float32 in [-1, 1]."""
    audio = np.asarray(samples)
    if np.issubdtype(audio.dtype, np.integer):
        audio = audio.astype(np.float32) / np.iinfo(audio.dtype).max
    else:
        audio = audio.astype(np.float32)
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    return audio


# =============================================================================
class WhisperStreamRecognizer:
    """
    Continuous recognizer fed by microphone chunks.

    ``transcribe_fn`` replaces the Whisper call (16 kHz float audio -> text);
    the recognizer is available whenever it can transcribe.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        transcribe_fn: Optional[Callable[[np.ndarray], str]] = None,
        speech_threshold: float = SPEECH_RMS_THRESHOLD,
        silence_seconds: float = UTTERANCE_SILENCE_SECONDS,
        interim_interval: float = INTERIM_INTERVAL_SECONDS,
        max_utterance_seconds: float = MAX_UTTERANCE_SECONDS,
    ):
        self.model_name = model_name
        self._transcribe = transcribe_fn or (lambda audio: transcribe_audio(audio, self.model_name))
        self.available = WHISPER_AVAILABLE or transcribe_fn is not None
        self.speech_threshold = speech_threshold
        self.silence_seconds = silence_seconds
        self.interim_interval = interim_interval
        self.max_utterance_seconds = max_utterance_seconds

        self._listener = None
        # feed_audio and start/stop arrive from different UI worker threads
        self._lock = threading.RLock()
        self._running = False
        self._emitting = False
        self._result_index = 0
        self._reset_utterance()

    @property
    def is_running(self) -> bool:
        return self._running

    def _reset_utterance(self):
        self._buffer: list[np.ndarray] = []
        self._buffered_seconds = 0.0
        self._heard_speech = False
        self._silence = 0.0
        self._since_interim = 0.0

    # -------------------------------------------------------------------------
    def start(self, listener) -> None:
        with self._lock:
            self._listener = listener
            self._running = True
            self._result_index = 0
            self._reset_utterance()

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._heard_speech and not self._emitting:
                if not self._emit(final=True):
                    # _fail already ended the run
                    return
            self._listener.on_end()

    def feed_audio(self, sample_rate: int, samples: np.ndarray) -> None:
        """Push one microphone chunk; may deliver a hypothesis segment."""
        if not self._running or samples is None or len(samples) == 0:
            return

        audio = to_mono_float(samples)
        if sample_rate != SAMPLE_RATE:
            audio = librosa.resample(audio, orig_sr=sample_rate, target_sr=SAMPLE_RATE)

        chunk_seconds = len(audio) / SAMPLE_RATE
        rms = float(np.sqrt(np.mean(np.square(audio)))) if len(audio) else 0.0

        with self._lock:
            # stop() may have run while this chunk was being resampled
            if not self._running:
                return

            if rms >= self.speech_threshold:
                self._heard_speech = True
                self._silence = 0.0
            else:
                self._silence += chunk_seconds

            # Leading silence never opens an utterance
            if not self._heard_speech:
                return

            self._buffer.append(audio)
            self._buffered_seconds += chunk_seconds
            self._since_interim += chunk_seconds

            if self._silence >= self.silence_seconds or self._buffered_seconds >= self.max_utterance_seconds:
                self._emit(final=True)
            elif self._since_interim >= self.interim_interval:
                self._emit(final=False)

    # -------------------------------------------------------------------------
    def _emit(self, final: bool) -> bool:
        """Transcribe the open utterance and deliver it; False if transcription failed."""
        audio = np.concatenate(self._buffer) if self._buffer else np.zeros(0, dtype=np.float32)
        self._emitting = True
        try:
            text = self._transcribe(audio)
        except Exception:
            logger.exception("Transcription failed")
            self._emitting = False
            self._fail(ERROR_AUDIO_CAPTURE)
            return False

        segment = HypothesisSegment(result_index=self._result_index, transcript_text=text, is_final=final)
        if final:
            self._result_index += 1
            self._reset_utterance()
        else:
            self._since_interim = 0.0

        try:
            self._listener.on_segment(segment)
        finally:
            self._emitting = False
        return True

    def _fail(self, code: str) -> None:
        self._running = False
        self._reset_utterance()
        self._listener.on_error(code)
        self._listener.on_end()
