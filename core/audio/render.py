"""
core/audio/render.py — Offline resampling renderer.

Renders a SampleBuffer at a fixed target rate (48 kHz in production), either
whole or through an (offset, duration) window.

Frame counts are derived from the source DURATION, not from resampled sample
counts, using exact rational arithmetic. Offsets and durations are taken at
their decimal value, so 1.3 s is exactly 13/10 s:

    whole track:  ceil(frame_count / sample_rate * target_rate)
    windowed:     floor(min(duration, source_duration - offset) * target_rate)

The whole-track count rounds UP so trailing audio is never truncated.
A window that runs past the end of the source is silently shortened to the
available remainder rather than raising.

Design:
    - Pure: SampleBuffer in, new SampleBuffer out. The source is never mutated.
    - Uses scipy.signal.resample_poly (polyphase FIR, O(N)) per channel axis.
    - Channel count is preserved; no mixing.
    - Resampler output is zero-padded or trimmed to the exact frame count.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction

import numpy as np
from scipy.signal import resample_poly

from core.audio.errors import RenderError
from core.audio.types import SampleBuffer

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 48_000


def _seconds(value: float) -> Fraction:
    """Exact value of the shortest decimal that round-trips `value`.

    1.3 becomes 13/10 rather than the binary float 1.3000000000000000444.
    Numpy scalars are accepted.
    """
    return Fraction(repr(float(value)))


def whole_track_frames(buffer: SampleBuffer, target_rate: int) -> int:
    """Output frame count for rendering the entire buffer at `target_rate`."""
    duration = Fraction(buffer.frame_count, buffer.sample_rate)
    return math.ceil(duration * target_rate)


def window_frames(
    buffer: SampleBuffer,
    target_rate: int,
    offset_sec: float,
    duration_sec: float,
) -> int:
    """Output frame count for a validated (offset, duration) window."""
    source_duration = Fraction(buffer.frame_count, buffer.sample_rate)
    available = source_duration - _seconds(offset_sec)
    return math.floor(min(_seconds(duration_sec), available) * target_rate)


def validate_window(buffer: SampleBuffer, offset_sec: float, duration_sec: float) -> None:
    """Check an (offset, duration) window against the source bounds.

    Raises:
        RenderError: offset < 0, offset >= source duration, or duration <= 0.
    """
    source_duration = buffer.duration_sec
    context = {
        "offset_sec": offset_sec,
        "duration_sec": duration_sec,
        "source_duration_sec": source_duration,
    }
    if not math.isfinite(offset_sec) or not math.isfinite(duration_sec):
        raise RenderError("Render window must be finite", **context)
    if duration_sec <= 0:
        raise RenderError(f"duration must be positive, got {duration_sec}", **context)
    if offset_sec < 0:
        raise RenderError(f"offset must be non-negative, got {offset_sec}", **context)
    if _seconds(offset_sec) >= Fraction(buffer.frame_count, buffer.sample_rate):
        raise RenderError(
            f"offset {offset_sec:.3f}s is beyond the end of the source ({source_duration:.3f}s)",
            **context,
        )


def _resample(samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    """Polyphase-resample a (channels, frames) array along the frame axis."""
    if source_rate == target_rate or samples.shape[1] == 0:
        return samples
    g = math.gcd(source_rate, target_rate)
    return resample_poly(samples, up=target_rate // g, down=source_rate // g, axis=1)


def _fit_length(samples: np.ndarray, frames: int) -> np.ndarray:
    """Trim or zero-pad the frame axis to exactly `frames`."""
    current = samples.shape[1]
    if current >= frames:
        return samples[:, :frames]
    pad = np.zeros((samples.shape[0], frames - current), dtype=samples.dtype)
    return np.concatenate([samples, pad], axis=1)


def render(
    buffer: SampleBuffer,
    target_rate: int = TARGET_SAMPLE_RATE,
    *,
    offset_sec: float | None = None,
    duration_sec: float | None = None,
) -> SampleBuffer:
    """Render `buffer` at `target_rate`, optionally through a time window.

    Args:
        buffer:       Source audio at its native rate.
        target_rate:  Output sample rate in Hz (must be positive).
        offset_sec:   Window start in seconds. None renders the whole track.
        duration_sec: Window length in seconds. Required when offset_sec is set.

    Returns:
        New SampleBuffer at `target_rate` with the same channel count.

    Raises:
        RenderError: Window parameters out of range, or only one of
                     offset_sec / duration_sec supplied.
        ValueError:  target_rate is not positive.
    """
    if target_rate <= 0:
        raise ValueError(f"target_rate must be positive, got {target_rate}")

    if offset_sec is None and duration_sec is None:
        frames = whole_track_frames(buffer, target_rate)
        source = buffer.samples
    elif offset_sec is None or duration_sec is None:
        raise RenderError(
            "offset_sec and duration_sec must be given together",
            offset_sec=offset_sec,
            duration_sec=duration_sec,
            source_duration_sec=buffer.duration_sec,
        )
    else:
        validate_window(buffer, offset_sec, duration_sec)
        frames = window_frames(buffer, target_rate, offset_sec, duration_sec)
        start = math.floor(_seconds(offset_sec) * buffer.sample_rate)
        span = math.ceil(Fraction(frames, target_rate) * buffer.sample_rate)
        # One extra source frame keeps the resampler's tail from zero-padding early
        source = buffer.samples[:, start : start + span + 1]

    rendered = _fit_length(_resample(source, buffer.sample_rate, target_rate), frames)

    logger.debug(
        "Rendered %d ch %d Hz -> %d Hz: %d frames (offset=%s duration=%s)",
        buffer.channel_count,
        buffer.sample_rate,
        target_rate,
        frames,
        offset_sec,
        duration_sec,
    )
    return SampleBuffer(rendered.astype(np.float32), target_rate)
