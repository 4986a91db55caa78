"""
Tests for core/audio/types.py — SampleBuffer invariants and value objects.

Validates:
    - SampleBuffer layout normalisation (1-D → mono), read-only ownership
    - Invariant enforcement (sample rate, dimensionality, equal channel lengths)
    - Frozen result types and their wire serialization
"""

import numpy as np
import pytest

from core.audio.types import (
    AnalysisResult,
    AnalysisSegment,
    CopyrightMatch,
    EncodedAudio,
    Platform,
    SampleBuffer,
    SegmentStatus,
)

# ---------------------------------------------------------------------------
# SampleBuffer
# ---------------------------------------------------------------------------


class TestSampleBuffer:
    def test_mono_1d_becomes_single_channel(self):
        buf = SampleBuffer(np.zeros(100), 8000)
        assert buf.channel_count == 1
        assert buf.frame_count == 100

    def test_stereo_shape(self):
        buf = SampleBuffer(np.zeros((2, 480)), 48000)
        assert buf.channel_count == 2
        assert buf.frame_count == 480
        assert buf.duration_sec == pytest.approx(0.01)

    def test_samples_are_float32(self):
        buf = SampleBuffer(np.zeros((1, 10), dtype=np.float64), 100)
        assert buf.samples.dtype == np.float32

    def test_samples_are_read_only(self):
        """Buffers are immutable once constructed."""
        buf = SampleBuffer(np.zeros((1, 10)), 100)
        with pytest.raises(ValueError):
            buf.samples[0, 0] = 1.0

    def test_buffer_copies_caller_array(self):
        """Mutating the source array afterwards does not leak into the buffer."""
        source = np.zeros((1, 4), dtype=np.float32)
        buf = SampleBuffer(source, 100)
        source[0, 0] = 0.9
        assert buf.samples[0, 0] == 0.0

    def test_values_outside_unit_range_are_kept(self):
        """Clamping belongs to the encoder, not to the buffer."""
        buf = SampleBuffer(np.array([1.5, -2.0]), 100)
        assert buf.samples[0, 0] == pytest.approx(1.5)
        assert buf.samples[0, 1] == pytest.approx(-2.0)

    def test_zero_sample_rate_raises(self):
        with pytest.raises(ValueError, match="sample_rate must be positive"):
            SampleBuffer(np.zeros(10), 0)

    def test_3d_array_raises(self):
        with pytest.raises(ValueError, match="1-D or 2-D"):
            SampleBuffer(np.zeros((1, 2, 3)), 100)

    def test_from_channels_rejects_ragged_channels(self):
        with pytest.raises(ValueError, match="identical length"):
            SampleBuffer.from_channels([[0.0, 0.1], [0.0]], 100)

    def test_from_channels(self):
        buf = SampleBuffer.from_channels([[0.0, 0.1, 0.2], [0.3, 0.4, 0.5]], 3)
        assert buf.channel_count == 2
        assert buf.duration_sec == pytest.approx(1.0)
        assert buf.channel(1)[0] == pytest.approx(0.3)

    def test_is_frozen(self):
        buf = SampleBuffer(np.zeros(10), 100)
        with pytest.raises((TypeError, AttributeError)):
            buf.sample_rate = 200  # type: ignore[misc]


# ---------------------------------------------------------------------------
# EncodedAudio
# ---------------------------------------------------------------------------


class TestEncodedAudio:
    def test_defaults_to_wav_mime(self):
        assert EncodedAudio(b"abc").mime_type == "audio/wav"

    def test_with_filename_returns_copy(self):
        original = EncodedAudio(b"abc")
        named = original.with_filename("song.wav")
        assert named.filename == "song.wav"
        assert original.filename == ""
        assert named.data == original.data

    def test_len_is_byte_length(self):
        assert len(EncodedAudio(b"12345")) == 5


# ---------------------------------------------------------------------------
# Result serialization
# ---------------------------------------------------------------------------


class TestAnalysisResultToDict:
    def _result(self) -> AnalysisResult:
        return AnalysisResult(
            ai_probability=55,
            copyright_matches=(
                CopyrightMatch(
                    title="Flowers",
                    artist="Miley Cyrus",
                    platform=Platform.SPOTIFY,
                    match_percentage=85,
                    segment_start=50.0,
                    segment_end=60.0,
                ),
            ),
            segments=(
                AnalysisSegment(0.0, 10.0, SegmentStatus.CLEAN, "Clean audio", 0),
            ),
        )

    def test_camel_case_keys(self):
        data = self._result().to_dict()
        assert data["aiProbability"] == 55
        assert data["isAnalyzing"] is False
        assert data["isComplete"] is True

    def test_match_serialization(self):
        match = self._result().to_dict()["copyrightMatches"][0]
        assert match == {
            "title": "Flowers",
            "artist": "Miley Cyrus",
            "platform": "Spotify",
            "matchPercentage": 85,
            "segmentStart": 50.0,
            "segmentEnd": 60.0,
        }

    def test_segment_status_is_plain_string(self):
        segment = self._result().to_dict()["segments"][0]
        assert segment["status"] == "CLEAN"

    def test_results_with_same_fields_are_equal(self):
        assert self._result() == self._result()
