"""
core/audio/wav.py — Canonical 24-bit linear PCM WAV encoder.

Layout (all integers little-endian):

    offset  size  field
    0       4     "RIFF"
    4       4     36 + data_length
    8       4     "WAVE"
    12      4     "fmt "
    16      4     16            (fmt chunk length)
    20      2     1             (PCM)
    22      2     channel count
    24      4     sample rate
    28      4     byte rate     (sample_rate * channels * 3)
    32      2     block align   (channels * 3)
    34      2     24            (bits per sample)
    36      4     "data"
    40      4     data_length   (frame_count * channels * 3)
    44      ...   interleaved 24-bit signed samples, frame-major

No metadata chunks. Output is byte-for-byte reproducible from the same buffer.
"""

from __future__ import annotations

import struct

import numpy as np

from core.audio.types import WAV_MIME_TYPE, EncodedAudio, SampleBuffer

BITS_PER_SAMPLE = 24
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
HEADER_SIZE = 44
PCM_FORMAT = 1

_NEGATIVE_SCALE = 0x800000
_POSITIVE_SCALE = 0x7FFFFF

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def wav_header(*, channels: int, sample_rate: int, frame_count: int) -> bytes:
    """Build the 44-byte RIFF/WAVE header for 24-bit PCM."""
    block_align = channels * BYTES_PER_SAMPLE
    data_length = frame_count * block_align
    return _HEADER.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_length,
    )


def quantize_24bit(samples: np.ndarray) -> np.ndarray:
    """Clamp float samples to [-1, 1] and scale to signed 24-bit integers.

    Negative values scale by 0x800000, non-negative by 0x7FFFFF, so both
    -1.0 and 1.0 map onto the full range. Ties round half up.

    Args:
        samples: Float array of any shape.

    Returns:
        int32 array of the same shape with values in [-8388608, 8388607].
    """
    clipped = np.clip(samples.astype(np.float64), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * _NEGATIVE_SCALE, clipped * _POSITIVE_SCALE)
    return np.floor(scaled + 0.5).astype(np.int32)


def encode_wav(buffer: SampleBuffer) -> EncodedAudio:
    """Serialize a SampleBuffer into a 24-bit PCM WAV container.

    Args:
        buffer: Decoded or rendered audio. Values outside [-1, 1] are clamped.

    Returns:
        EncodedAudio with an empty filename; the caller assigns the name.
    """
    header = wav_header(
        channels=buffer.channel_count,
        sample_rate=buffer.sample_rate,
        frame_count=buffer.frame_count,
    )

    # (channels, frames) -> (frames, channels) so the flat order is interleaved
    interleaved = quantize_24bit(buffer.samples).T.reshape(-1)

    # Low three bytes of each little-endian int32 are the two's-complement int24
    raw = interleaved.astype("<i4").view(np.uint8).reshape(-1, 4)[:, :BYTES_PER_SAMPLE]

    return EncodedAudio(data=header + raw.tobytes(), mime_type=WAV_MIME_TYPE)


def encoded_length(*, channels: int, frame_count: int) -> int:
    """Total byte length of an encoded file: header plus sample data."""
    return HEADER_SIZE + frame_count * channels * BYTES_PER_SAMPLE
