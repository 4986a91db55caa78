"""
core/audio/fingerprint.py — Deterministic heuristic AI/copyright classifier.

This is a SIMULATION with a fixed formula, not a perceptual detector. The
arithmetic below is the contract: identical input bytes must always yield an
identical AnalysisResult.

Features (channel 0, first min(frame_count, sample_rate * window) frames):
    rms          = sqrt(sum(x^2) / n)
    content_hash = floor(sum(|x * 10000|) over every 1000th frame + byte_length)
    duration     = frame_count / sample_rate

AI probability (integer, clamped to [5, 99]):
    10 base
    +40 if duration mod 60 < 1.0 or > 59.0   exact block length
    +25 if rms > 0.22                         over-limited master
    +20 if content_hash mod 100 < 30          synthetic fingerprint

Copyright simulation:
    db_match_index = content_hash mod 25; a match exists iff the catalog has
    that slot.

Timeline: ceil(duration / segment_seconds) windows. For segment i with
r = (content_hash + 17 i) mod 100 the copyright check runs BEFORE the AI
check, so a segment is never both.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from core.audio.catalog import MATCH_MODULUS, ReferenceCatalog, default_catalog
from core.audio.types import (
    AnalysisFeatures,
    AnalysisResult,
    AnalysisSegment,
    CopyrightMatch,
    Platform,
    SampleBuffer,
    SegmentStatus,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HASH_STRIDE = 1000
HASH_SCALE = 10000.0
ANALYSIS_WINDOW_SEC = 30.0
SEGMENT_SECONDS = 10.0

FALLBACK_DURATION_SEC = 180.0
FALLBACK_RMS = 0.1

BASE_SCORE = 10
EXACT_BLOCK_BONUS = 40
LOUDNESS_BONUS = 25
SYNTHETIC_BONUS = 20
LOUDNESS_THRESHOLD = 0.22
SYNTHETIC_HASH_CUTOFF = 30
MIN_SCORE = 5
MAX_SCORE = 99

AI_SEGMENT_THRESHOLD = 60
COPYRIGHT_SEGMENT_THRESHOLD = 70
COPYRIGHT_REGISTER_THRESHOLD = 85
SEGMENT_HASH_STEP = 17

DESCRIPTIONS: dict[SegmentStatus, str] = {
    SegmentStatus.CLEAN: "Clean audio",
    SegmentStatus.COPYRIGHT_MATCH: "Audio fingerprint match",
    SegmentStatus.AI_DETECTED: "Synthetic spectral pattern",
}


# ---------------------------------------------------------------------------
# Feature extraction
# ---------------------------------------------------------------------------


def extract_features(
    buffer: SampleBuffer,
    byte_length: int,
    *,
    window_sec: float = ANALYSIS_WINDOW_SEC,
) -> AnalysisFeatures:
    """Derive the classifier's scalar features from decoded samples.

    Args:
        buffer:      Decoded audio at its native rate. Values are NOT clamped.
        byte_length: Size of the original input bytes (folded into the hash).
        window_sec:  Leading seconds of channel 0 to inspect.

    Returns:
        AnalysisFeatures. A zero-frame buffer yields rms=0.0.
    """
    window = min(buffer.frame_count, int(buffer.sample_rate * window_sec))
    x = buffer.channel(0)[:window].astype(np.float64)

    rms = math.sqrt(float(np.sum(x * x)) / window) if window else 0.0
    hash_sum = float(np.sum(np.abs(x[::HASH_STRIDE] * HASH_SCALE)))
    content_hash = math.floor(hash_sum + byte_length)

    return AnalysisFeatures(
        duration_sec=buffer.duration_sec,
        rms=rms,
        content_hash=int(content_hash),
    )


def fallback_features(byte_length: int) -> AnalysisFeatures:
    """Feature values used when the input cannot be decoded at all."""
    return AnalysisFeatures(
        duration_sec=FALLBACK_DURATION_SEC,
        rms=FALLBACK_RMS,
        content_hash=int(byte_length),
        is_fallback=True,
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def is_exact_block(duration_sec: float) -> bool:
    """True when the duration sits within 1 s of a whole minute."""
    remainder = duration_sec % 60
    return remainder < 1.0 or remainder > 59.0


def score_ai_probability(features: AnalysisFeatures) -> int:
    """Compute the global AI-generation probability (integer, 5–99)."""
    score = BASE_SCORE
    if is_exact_block(features.duration_sec):
        score += EXACT_BLOCK_BONUS
    if features.rms > LOUDNESS_THRESHOLD:
        score += LOUDNESS_BONUS
    if features.content_hash % 100 < SYNTHETIC_HASH_CUTOFF:
        score += SYNTHETIC_BONUS
    return min(MAX_SCORE, max(MIN_SCORE, round(score)))


def segment_bounds(
    duration_sec: float, segment_seconds: float = SEGMENT_SECONDS
) -> list[tuple[float, float]]:
    """Split [0, duration) into consecutive windows; the last may be shorter."""
    count = math.ceil(duration_sec / segment_seconds) if duration_sec > 0 else 0
    return [
        (i * segment_seconds, min((i + 1) * segment_seconds, duration_sec))
        for i in range(count)
    ]


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class HeuristicClassifier:
    """Simulated AI-generation detector and copyright matcher.

    Stateless apart from its injected configuration, so one instance can be
    shared across threads.

    Example:
        classifier = HeuristicClassifier()
        features = extract_features(buffer, byte_length=len(data))
        result = classifier.classify(features)
        print(result.ai_probability, len(result.segments))
    """

    def __init__(
        self,
        catalog: ReferenceCatalog | None = None,
        *,
        segment_seconds: float = SEGMENT_SECONDS,
        window_sec: float = ANALYSIS_WINDOW_SEC,
    ) -> None:
        """Initialise the classifier.

        Args:
            catalog:         Reference catalog. None = bundled default.
            segment_seconds: Timeline window width in seconds.
            window_sec:      Feature-extraction window in seconds.
        """
        if segment_seconds <= 0:
            raise ValueError(f"segment_seconds must be positive, got {segment_seconds}")
        self._catalog = catalog if catalog is not None else default_catalog()
        self._segment_seconds = segment_seconds
        self._window_sec = window_sec

    @property
    def catalog(self) -> ReferenceCatalog:
        return self._catalog

    def features(self, buffer: SampleBuffer, byte_length: int) -> AnalysisFeatures:
        return extract_features(buffer, byte_length, window_sec=self._window_sec)

    def analyze(self, buffer: SampleBuffer, byte_length: int) -> AnalysisResult:
        """Extract features from `buffer` and classify them."""
        return self.classify(self.features(buffer, byte_length))

    def classify(self, features: AnalysisFeatures) -> AnalysisResult:
        """Produce the AI score, copyright matches and segment timeline."""
        ai_probability = score_ai_probability(features)

        db_match_index = features.content_hash % MATCH_MODULUS
        matched = self._catalog.lookup(db_match_index)

        segments: list[AnalysisSegment] = []
        matches: list[CopyrightMatch] = []
        seen_titles: set[str] = set()

        bounds = segment_bounds(features.duration_sec, self._segment_seconds)
        for i, (start, end) in enumerate(bounds):
            r = (features.content_hash + i * SEGMENT_HASH_STEP) % 100

            if matched is not None and r > COPYRIGHT_SEGMENT_THRESHOLD:
                status = SegmentStatus.COPYRIGHT_MATCH
                confidence = 85 + (r % 15)
                if r > COPYRIGHT_REGISTER_THRESHOLD and matched.title not in seen_titles:
                    seen_titles.add(matched.title)
                    matches.append(
                        CopyrightMatch(
                            title=matched.title,
                            artist=matched.artist,
                            platform=Platform.SPOTIFY if r % 2 == 0 else Platform.YOUTUBE_MUSIC,
                            match_percentage=confidence,
                            segment_start=start,
                            segment_end=end,
                        )
                    )
            elif ai_probability > AI_SEGMENT_THRESHOLD and r < ai_probability:
                status = SegmentStatus.AI_DETECTED
                confidence = ai_probability - 10 + (r % 15)
            else:
                status = SegmentStatus.CLEAN
                confidence = 0

            segments.append(
                AnalysisSegment(
                    start=start,
                    end=end,
                    status=status,
                    description=DESCRIPTIONS[status],
                    confidence=confidence,
                )
            )

        logger.debug(
            "Classified %.2fs (hash=%d rms=%.4f fallback=%s): ai=%d matches=%d segments=%d",
            features.duration_sec,
            features.content_hash,
            features.rms,
            features.is_fallback,
            ai_probability,
            len(matches),
            len(segments),
        )
        return AnalysisResult(
            ai_probability=ai_probability,
            copyright_matches=tuple(matches),
            segments=tuple(segments),
        )
