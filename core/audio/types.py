"""
core/audio/types.py — Data types for the audio normalization and analysis pipeline.

SampleBuffer is the currency between pipeline stages: decoded by
ingestion/audio_loader.py, re-rendered by core/audio/render.py, serialized by
core/audio/wav.py and inspected by core/audio/fingerprint.py.

All other types are frozen dataclasses — immutable value objects that can be
safely passed between layers and compared for equality.

Design principles:
    - No I/O, no state, no side effects.
    - SampleBuffer owns a read-only float32 array of shape (channels, frames).
      Its invariants ARE enforced at construction time, because every later
      stage (render, encode, classify) relies on them.
    - Sample values are never clamped here — clamping is the encoder's job,
      and analysis must see the raw decoded values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

WAV_MIME_TYPE = "audio/wav"


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Channel-separated float32 samples at a fixed sample rate.

    Invariants:
        samples.ndim == 2, shape == (channel_count, frame_count)
        channel_count >= 1
        sample_rate > 0
        samples is read-only (writeable flag cleared on construction)

    A 1-D array is accepted and treated as a single (mono) channel.
    """

    samples: np.ndarray
    """float32 array of shape (channels, frames). Row i is channel i."""

    sample_rate: int
    """Samples per second per channel, in Hz."""

    def __post_init__(self) -> None:
        """Normalise the array layout and validate buffer invariants."""
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")

        arr = np.array(self.samples, dtype=np.float32)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2:
            raise ValueError(f"samples must be 1-D or 2-D (channels, frames), got ndim={arr.ndim}")
        if arr.shape[0] < 1:
            raise ValueError("samples must contain at least one channel")

        arr.setflags(write=False)
        object.__setattr__(self, "samples", arr)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def from_channels(cls, channels: list[Any], sample_rate: int) -> SampleBuffer:
        """Build a buffer from a list of per-channel sample sequences.

        Raises:
            ValueError: If the channels have different lengths.
        """
        lengths = {len(ch) for ch in channels}
        if len(lengths) > 1:
            raise ValueError(f"all channels must have identical length, got {sorted(lengths)}")
        return cls(np.asarray(channels, dtype=np.float32), sample_rate)

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_sec(self) -> float:
        """Total duration in seconds (frame_count / sample_rate)."""
        return self.frame_count / self.sample_rate

    def channel(self, index: int) -> np.ndarray:
        """Return the read-only sample row for channel `index`."""
        return self.samples[index]


@dataclass(frozen=True)
class EncodedAudio:
    """A serialized audio artifact returned to the caller.

    The filename is assigned by the caller (see core/audio/naming.py);
    the encoder itself leaves it empty.
    """

    data: bytes
    filename: str = ""
    mime_type: str = WAV_MIME_TYPE

    def with_filename(self, filename: str) -> EncodedAudio:
        """Return a copy carrying `filename`."""
        return EncodedAudio(data=self.data, filename=filename, mime_type=self.mime_type)

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AnalysisFeatures:
    """Scalar features the heuristic classifier works from.

    Invariants:
        duration_sec >= 0
        rms >= 0
        content_hash >= 0
    """

    duration_sec: float
    """Total buffer duration in seconds."""

    rms: float
    """Root-mean-square level over the analysis window of channel 0."""

    content_hash: int
    """floor(sum(|x * 10000|) over every 1000th frame + input byte length)."""

    is_fallback: bool = False
    """True when decoding failed and the documented fallback values were used."""


class SegmentStatus(str, Enum):
    """Classification of one timeline segment."""

    CLEAN = "CLEAN"
    AI_DETECTED = "AI_DETECTED"
    COPYRIGHT_MATCH = "COPYRIGHT_MATCH"


class Platform(str, Enum):
    """Streaming platform a simulated copyright match is attributed to."""

    SPOTIFY = "Spotify"
    YOUTUBE_MUSIC = "YouTube Music"


@dataclass(frozen=True)
class AnalysisSegment:
    """One fixed-size window of the classification timeline.

    Invariants:
        0 <= start < end
        0 <= confidence <= 100 for COPYRIGHT_MATCH, 0 for CLEAN
    """

    start: float
    end: float
    status: SegmentStatus
    description: str
    confidence: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "status": self.status.value,
            "description": self.description,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class CopyrightMatch:
    """A simulated catalog hit, recorded at most once per title."""

    title: str
    artist: str
    platform: Platform
    match_percentage: int
    segment_start: float
    segment_end: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "artist": self.artist,
            "platform": self.platform.value,
            "matchPercentage": self.match_percentage,
            "segmentStart": self.segment_start,
            "segmentEnd": self.segment_end,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of one classifier invocation.

    Invariants:
        5 <= ai_probability <= 99
        segments are contiguous, ordered, and cover [0, duration)
        copyright_matches has at most one entry per title
    """

    ai_probability: int
    copyright_matches: tuple[CopyrightMatch, ...] = field(default_factory=tuple)
    segments: tuple[AnalysisSegment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the wire keys used by the release wizard."""
        return {
            "isAnalyzing": False,
            "isComplete": True,
            "aiProbability": self.ai_probability,
            "copyrightMatches": [m.to_dict() for m in self.copyright_matches],
            "segments": [s.to_dict() for s in self.segments],
        }
