"""
core/audio/errors.py — Typed failures of the audio processing pipeline.

Two failure modes exist, and both are surfaced unchanged to the caller:

    DecodeError  — the input bytes are not a decodable audio container
                   (corrupt, truncated, unsupported codec, empty upload).
    RenderError  — the requested render window is out of range.

Encoding a valid SampleBuffer cannot fail, so there is no encoder error.
The classifier never raises for bad audio; it substitutes fallback features.
"""

from __future__ import annotations


class AudioProcessingError(Exception):
    """Base class for every error raised by the audio pipeline."""


class DecodeError(AudioProcessingError):
    """Raised when input bytes cannot be decoded into a SampleBuffer.

    Args:
        message: Human-readable reason, suitable for an API error detail.
        byte_length: Size of the rejected input, for logging context.
    """

    def __init__(self, message: str, *, byte_length: int = 0) -> None:
        """Initialize with a reason and the size of the rejected payload."""
        self.byte_length = byte_length
        super().__init__(message)


class RenderError(AudioProcessingError):
    """Raised when render window parameters are outside the source bounds.

    Args:
        message: Human-readable reason.
        offset_sec: Requested window offset in seconds (None = whole track).
        duration_sec: Requested window duration in seconds.
        source_duration_sec: Duration of the source buffer in seconds.
    """

    def __init__(
        self,
        message: str,
        *,
        offset_sec: float | None = None,
        duration_sec: float | None = None,
        source_duration_sec: float | None = None,
    ) -> None:
        """Initialize with the offending window and the source duration."""
        self.offset_sec = offset_sec
        self.duration_sec = duration_sec
        self.source_duration_sec = source_duration_sec
        super().__init__(message)
