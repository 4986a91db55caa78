"""
ingestion/audio_engine.py — High-level orchestrator for upload processing.

AudioProcessingEngine wires the pipeline stages together:

    upload bytes
        │
        ├─ decode_audio()     [ingestion/audio_loader.py — codec boundary]
        │       ↓
        ├─ render()           [core/audio/render.py — resample to 48 kHz]
        │       ↓
        └─ encode_wav()       [core/audio/wav.py — 24-bit PCM container]

    upload bytes → decode_audio() → HeuristicClassifier   [core/audio/fingerprint.py]

Operations:
    normalize_full_track  decode → render whole track → encode, named <title>.wav
    extract_clip          decode → render (start, duration) window → encode,
                          named <title>-trim.wav
    analyze               decode → features → classify; never raises for bad audio
    probe_duration        decode → duration in seconds

Every call works on its own bytes and returns its own output. The engine
holds only immutable configuration, so one instance is safe to share across
worker threads. All operations are CPU-bound and blocking; callers with a
latency-sensitive thread should offload them.

Usage:
    engine = AudioProcessingEngine()
    wav = engine.normalize_full_track(data, title="Summer Rain")
    clip = engine.extract_clip(data, start_time=30.0, title="Summer Rain")
    result = engine.analyze(data)
"""

from __future__ import annotations

import logging
import time
from typing import Any

from core.audio.catalog import ReferenceCatalog
from core.audio.errors import DecodeError
from core.audio.fingerprint import HeuristicClassifier, fallback_features
from core.audio.naming import clip_filename, full_track_filename
from core.audio.render import render
from core.audio.types import AnalysisResult, EncodedAudio, SampleBuffer
from core.audio.wav import encode_wav
from core.config import DEFAULT_CONFIG, AudioPipelineConfig
from infrastructure.metrics import record_decode_fallback
from ingestion.audio_loader import decode_audio, probe_duration

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure compositions
# ---------------------------------------------------------------------------


def normalize_buffer(buffer: SampleBuffer, target_rate: int) -> EncodedAudio:
    """Render the whole buffer at `target_rate` and encode it as 24-bit WAV."""
    return encode_wav(render(buffer, target_rate))


def clip_buffer(
    buffer: SampleBuffer,
    target_rate: int,
    start_time: float,
    duration: float,
) -> EncodedAudio:
    """Render a (start_time, duration) window at `target_rate` and encode it.

    A window running past the end of the source is shortened to the
    remainder; a start outside [0, source duration) raises RenderError.
    """
    return encode_wav(render(buffer, target_rate, offset_sec=start_time, duration_sec=duration))


# ---------------------------------------------------------------------------
# AudioProcessingEngine
# ---------------------------------------------------------------------------


class AudioProcessingEngine:
    """Orchestrates decoding, normalization, clipping and analysis.

    This class is the single integration point between:
      - the codec layer (librosa, imported lazily or injected for testing)
      - the pure DSP layer (render, encode)
      - the heuristic classifier

    Example:
        engine = AudioProcessingEngine()
        encoded = engine.extract_clip(data, start_time=12.5, title="Hujan")
        print(encoded.filename, len(encoded))
    """

    def __init__(
        self,
        config: AudioPipelineConfig | None = None,
        *,
        catalog: ReferenceCatalog | None = None,
        librosa: Any = None,
        sleep: Any = time.sleep,
    ) -> None:
        """Initialise the engine.

        Args:
            config:  Pipeline configuration. None = DEFAULT_CONFIG.
            catalog: Reference catalog for copyright simulation. None = bundled.
            librosa: Injected librosa module. Pass a MagicMock in tests to avoid
                     loading the audio stack. None = import lazily on first use.
            sleep:   Sleep function used for the analysis latency floor.
        """
        self._config = config if config is not None else DEFAULT_CONFIG
        self._librosa = librosa
        self._sleep = sleep
        self._classifier = HeuristicClassifier(
            catalog,
            segment_seconds=self._config.segment_seconds,
            window_sec=self._config.analysis_window_sec,
        )

    @property
    def config(self) -> AudioPipelineConfig:
        return self._config

    @property
    def classifier(self) -> HeuristicClassifier:
        return self._classifier

    def _decode(self, data: bytes) -> SampleBuffer:
        return decode_audio(data, librosa=self._librosa)

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def normalize_full_track(
        self,
        data: bytes,
        *,
        title: str | None = None,
        track_number: str | int | None = None,
    ) -> EncodedAudio:
        """Convert an upload into the canonical 48 kHz / 24-bit WAV master.

        Args:
            data:         Raw uploaded bytes (any decodable format).
            title:        Track title used for the output filename.
            track_number: Fallback name component when the title is blank.

        Returns:
            EncodedAudio named ``<sanitized-title>.wav``.

        Raises:
            DecodeError: The upload could not be decoded.
        """
        buffer = self._decode(data)
        encoded = normalize_buffer(buffer, self._config.target_sample_rate)
        named = encoded.with_filename(full_track_filename(title, track_number))
        logger.info(
            "Normalized %s: %.2fs %d ch %d Hz -> %d Hz (%d bytes)",
            named.filename,
            buffer.duration_sec,
            buffer.channel_count,
            buffer.sample_rate,
            self._config.target_sample_rate,
            len(named),
        )
        return named

    # ------------------------------------------------------------------
    # Clip extraction
    # ------------------------------------------------------------------

    def extract_clip(
        self,
        data: bytes,
        *,
        start_time: float,
        duration: float | None = None,
        title: str | None = None,
        track_number: str | int | None = None,
    ) -> EncodedAudio:
        """Cut a preview clip starting at `start_time` and encode it.

        Args:
            data:         Raw uploaded bytes.
            start_time:   Clip start in seconds, within [0, source duration).
            duration:     Clip length in seconds. None = config clip duration (60 s).
            title:        Track title used for the output filename.
            track_number: Fallback name component when the title is blank.

        Returns:
            EncodedAudio named ``<sanitized-title>-trim.wav``. Shorter than
            `duration` when the source ends first.

        Raises:
            DecodeError: The upload could not be decoded.
            RenderError: start_time outside the source, or duration <= 0.
        """
        clip_duration = self._config.clip_duration_sec if duration is None else duration
        buffer = self._decode(data)
        encoded = clip_buffer(buffer, self._config.target_sample_rate, start_time, clip_duration)
        named = encoded.with_filename(clip_filename(title, track_number))
        logger.info(
            "Extracted clip %s: start=%.2fs duration=%.2fs from %.2fs source",
            named.filename,
            start_time,
            clip_duration,
            buffer.duration_sec,
        )
        return named

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, data: bytes) -> AnalysisResult:
        """Run the heuristic AI/copyright classifier over an upload.

        Never raises for undecodable audio: the documented fallback features
        (180 s, rms 0.1, hash = byte length) are used instead.

        When ``config.min_analysis_latency_sec`` is positive the call takes at
        least that long.
        """
        started = time.monotonic()
        try:
            buffer = self._decode(data)
        except DecodeError as exc:
            logger.warning("Analysis decoding failed, using fallback features: %s", exc)
            record_decode_fallback()
            features = fallback_features(len(data))
        else:
            features = self._classifier.features(buffer, len(data))

        result = self._classifier.classify(features)

        remaining = self._config.min_analysis_latency_sec - (time.monotonic() - started)
        if remaining > 0:
            self._sleep(remaining)

        logger.info(
            "Analyzed %d bytes: ai=%d%% matches=%d segments=%d",
            len(data),
            result.ai_probability,
            len(result.copyright_matches),
            len(result.segments),
        )
        return result

    def probe_duration(self, data: bytes) -> float:
        """Return the upload's duration in seconds.

        Raises:
            DecodeError: The upload could not be decoded.
        """
        return probe_duration(data, librosa=self._librosa)
