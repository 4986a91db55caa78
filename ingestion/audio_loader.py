"""
ingestion/audio_loader.py — Decoder boundary for uploaded audio.

This is the ONLY module in the audio pipeline that touches a codec library.
Everything downstream (core/audio/render.py, core/audio/wav.py,
core/audio/fingerprint.py) takes a pre-decoded SampleBuffer, never bytes.

Decoding is delegated to librosa (soundfile/libsndfile underneath), which
handles wav, flac, aiff, ogg and (with libsndfile >= 1.1) mp3. The input
is wrapped in an in-memory file object; nothing is written to disk.

Usage:
    from ingestion.audio_loader import decode_audio
    buffer = decode_audio(upload_bytes)
    print(buffer.sample_rate, buffer.channel_count, buffer.duration_sec)
"""

from __future__ import annotations

import io
import logging
from typing import Any

import numpy as np

from core.audio.errors import DecodeError
from core.audio.types import SampleBuffer

logger = logging.getLogger(__name__)


def _import_librosa() -> Any:
    import librosa  # deferred to allow testing without audio backend

    return librosa


def decode_audio(data: bytes, *, librosa: Any = None) -> SampleBuffer:
    """Decode raw audio bytes into a SampleBuffer at the native rate and layout.

    No resampling and no downmixing happen here: a stereo 44.1 kHz upload
    becomes a 2-channel 44100 Hz buffer.

    Args:
        data:    Complete contents of an uploaded audio file.
        librosa: Injected librosa module. None = import lazily.

    Returns:
        SampleBuffer of float32 samples, shape (channels, frames).

    Raises:
        DecodeError: Empty input, or librosa could not decode the bytes
                     (corrupted, truncated, unsupported codec, DRM-protected).
    """
    if not data:
        raise DecodeError("Cannot decode empty audio input", byte_length=0)

    lib = librosa if librosa is not None else _import_librosa()

    try:
        y, sr = lib.load(io.BytesIO(data), sr=None, mono=False, dtype=np.float32)
    except Exception as exc:
        raise DecodeError(
            f"Failed to decode audio ({len(data)} bytes): {exc}",
            byte_length=len(data),
        ) from exc

    try:
        buffer = SampleBuffer(np.asarray(y, dtype=np.float32), int(sr))
    except ValueError as exc:
        raise DecodeError(
            f"Decoder returned an invalid buffer: {exc}", byte_length=len(data)
        ) from exc

    logger.debug(
        "Decoded %d bytes: %d ch, %d Hz, %d frames",
        len(data),
        buffer.channel_count,
        buffer.sample_rate,
        buffer.frame_count,
    )
    return buffer


def probe_duration(data: bytes, *, librosa: Any = None) -> float:
    """Return the duration in seconds of an encoded audio payload.

    Raises:
        DecodeError: The bytes could not be decoded.
    """
    return decode_audio(data, librosa=librosa).duration_sec
