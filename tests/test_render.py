"""
Tests for core/audio/render.py — offline resampling renderer.

Validates:
    - Whole-track frame count rounds UP from source duration
    - Window frame count floors and truncates silently past the source end
    - Window validation raises RenderError
    - Channel count preserved, content preserved through resampling
"""

import numpy as np
import pytest

from core.audio.errors import RenderError
from core.audio.render import render, whole_track_frames, window_frames
from core.audio.types import SampleBuffer

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sine_buffer(seconds: float, sr: int, freq: float = 440.0, channels: int = 1) -> SampleBuffer:
    t = np.arange(int(round(seconds * sr))) / sr
    rows = [0.5 * np.sin(2 * np.pi * freq * t) for _ in range(channels)]
    return SampleBuffer(np.asarray(rows), sr)


# ---------------------------------------------------------------------------
# Frame counts
# ---------------------------------------------------------------------------


class TestWholeTrackFrames:
    def test_exact_second(self):
        buf = SampleBuffer(np.zeros(44100), 44100)
        assert whole_track_frames(buf, 48000) == 48000

    def test_rounds_up_partial_frame(self):
        """44101 frames @ 44.1 kHz = 48001.09 target frames → 48002."""
        buf = SampleBuffer(np.zeros(44101), 44100)
        assert whole_track_frames(buf, 48000) == 48002

    def test_same_rate_is_identity(self):
        buf = SampleBuffer(np.zeros(12345), 48000)
        assert whole_track_frames(buf, 48000) == 12345


class TestWindowFrames:
    def test_full_window(self):
        buf = SampleBuffer(np.zeros(90 * 100), 100)
        assert window_frames(buf, 48000, 10.0, 60.0) == 60 * 48000

    def test_truncated_to_remainder(self):
        buf = SampleBuffer(np.zeros(90 * 100), 100)
        assert window_frames(buf, 48000, 70.0, 60.0) == 20 * 48000

    def test_decimal_offset_counts_whole_remainder(self):
        """1.3 s into a 3 s source leaves exactly 1.7 s."""
        buf = SampleBuffer(np.zeros(3 * 44100), 44100)
        assert window_frames(buf, 48000, 1.3, 60.0) == 81600

    def test_decimal_duration_not_short(self):
        buf = SampleBuffer(np.zeros(3 * 44100), 44100)
        assert window_frames(buf, 48000, 0.0, 0.3) == 14400

    @pytest.mark.parametrize("hundredths", range(1, 300))
    def test_every_centisecond_offset(self, hundredths):
        buf = SampleBuffer(np.zeros(3 * 44100), 44100)
        expected = 3 * 48000 - hundredths * 480
        assert window_frames(buf, 48000, hundredths / 100, 60.0) == expected


# ---------------------------------------------------------------------------
# render()
# ---------------------------------------------------------------------------


class TestRenderWholeTrack:
    def test_output_rate_and_length(self):
        buf = _sine_buffer(2.0, 44100)
        out = render(buf, 48000)
        assert out.sample_rate == 48000
        assert out.frame_count == 96000

    def test_preserves_channels(self):
        buf = _sine_buffer(1.0, 22050, channels=2)
        out = render(buf, 48000)
        assert out.channel_count == 2

    def test_same_rate_returns_identical_samples(self):
        buf = _sine_buffer(0.5, 48000)
        out = render(buf, 48000)
        np.testing.assert_array_equal(out.samples, buf.samples)

    def test_source_not_mutated(self):
        buf = _sine_buffer(0.5, 44100)
        before = buf.samples.copy()
        render(buf, 48000)
        np.testing.assert_array_equal(buf.samples, before)

    def test_resampled_sine_matches_analytic(self):
        """A 440 Hz tone is still a 440 Hz tone after 44.1 → 48 kHz."""
        out = render(_sine_buffer(1.0, 44100), 48000)
        t = np.arange(out.frame_count) / 48000
        expected = 0.5 * np.sin(2 * np.pi * 440.0 * t)
        middle = slice(4800, out.frame_count - 4800)
        np.testing.assert_allclose(out.samples[0, middle], expected[middle], atol=1e-2)

    def test_deterministic(self):
        buf = _sine_buffer(1.0, 44100, channels=2)
        np.testing.assert_array_equal(render(buf, 48000).samples, render(buf, 48000).samples)

    def test_invalid_target_rate(self):
        with pytest.raises(ValueError, match="target_rate"):
            render(_sine_buffer(0.1, 8000), 0)


class TestRenderWindow:
    def test_window_length(self):
        buf = _sine_buffer(90.0, 1000)
        out = render(buf, 48000, offset_sec=10.0, duration_sec=60.0)
        assert out.frame_count == 60 * 48000

    def test_window_past_end_is_truncated(self):
        buf = _sine_buffer(90.0, 1000)
        out = render(buf, 48000, offset_sec=70.0, duration_sec=60.0)
        assert out.frame_count == 20 * 48000

    def test_decimal_offset(self):
        buf = SampleBuffer(np.zeros(3 * 44100, dtype=np.float32), 44100)
        out = render(buf, 48000, offset_sec=1.3, duration_sec=60.0)
        assert out.frame_count == 81600

    def test_numpy_scalar_window(self):
        buf = _sine_buffer(5.0, 1000)
        out = render(buf, 48000, offset_sec=np.float32(1.0), duration_sec=np.float64(2.5))
        assert out.frame_count == 120000

    def test_numpy_scalar_offset_out_of_range_raises_render_error(self):
        buf = _sine_buffer(5.0, 1000)
        with pytest.raises(RenderError, match="beyond the end"):
            render(buf, 48000, offset_sec=np.float32(6.0), duration_sec=1.0)

    def test_window_content_starts_at_offset(self):
        """A step at 1.0 s appears at frame 0 when the window starts there."""
        samples = np.concatenate([np.zeros(48000), np.full(48000, 0.5)])
        buf = SampleBuffer(samples, 48000)
        out = render(buf, 48000, offset_sec=1.0, duration_sec=0.5)
        assert out.frame_count == 24000
        assert np.all(out.samples == np.float32(0.5))

    def test_window_preserves_channels(self):
        buf = _sine_buffer(5.0, 44100, channels=2)
        out = render(buf, 48000, offset_sec=1.0, duration_sec=2.0)
        assert out.channel_count == 2
        assert out.frame_count == 96000

    def test_negative_offset_raises(self):
        with pytest.raises(RenderError, match="non-negative"):
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=-1.0, duration_sec=1.0)

    def test_offset_at_end_raises(self):
        with pytest.raises(RenderError, match="beyond the end"):
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=5.0, duration_sec=1.0)

    def test_offset_past_end_raises(self):
        with pytest.raises(RenderError):
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=12.0, duration_sec=1.0)

    def test_zero_duration_raises(self):
        with pytest.raises(RenderError, match="duration must be positive"):
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=0.0, duration_sec=0.0)

    def test_offset_without_duration_raises(self):
        with pytest.raises(RenderError, match="together"):
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=1.0)

    def test_render_error_carries_context(self):
        with pytest.raises(RenderError) as exc_info:
            render(_sine_buffer(5.0, 8000), 48000, offset_sec=9.0, duration_sec=1.0)
        assert exc_info.value.offset_sec == 9.0
        assert exc_info.value.source_duration_sec == pytest.approx(5.0)
