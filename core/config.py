"""
Configuration dataclasses for the audio processing pipeline.

These immutable config objects decouple parameter passing from function signatures,
so the API layer, the engine and the tests share one validated set of constants.
"""

import os
from dataclasses import dataclass, fields

_ENV_PREFIX = "AUDIO_"


@dataclass(frozen=True)
class AudioPipelineConfig:
    """
    Configuration for normalization, clipping and analysis.

    Attributes:
        target_sample_rate: Output rate of every rendered file in Hz. Defaults
            to 48000, the distributor's delivery format.
        clip_duration_sec: Length of a trimmed preview clip. Defaults to 60 s.
        segment_seconds: Width of each classification timeline segment.
        analysis_window_sec: Leading seconds of channel 0 used for the RMS and
            content-hash features.
        min_analysis_latency_sec: Minimum wall-clock time an analysis call takes.
            0 disables the floor; 3.0 reproduces the release wizard's pacing.
        max_upload_bytes: Largest accepted upload. Defaults to 100 MiB.

    Example:
        >>> config = AudioPipelineConfig(clip_duration_sec=30.0)
        >>> engine = AudioProcessingEngine(config=config)
    """

    target_sample_rate: int = 48_000
    clip_duration_sec: float = 60.0
    segment_seconds: float = 10.0
    analysis_window_sec: float = 30.0
    min_analysis_latency_sec: float = 0.0
    max_upload_bytes: int = 100 * 1024 * 1024

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.target_sample_rate <= 0:
            raise ValueError(
                f"target_sample_rate must be positive, got {self.target_sample_rate}"
            )
        if self.clip_duration_sec <= 0:
            raise ValueError(f"clip_duration_sec must be positive, got {self.clip_duration_sec}")
        if self.segment_seconds <= 0:
            raise ValueError(f"segment_seconds must be positive, got {self.segment_seconds}")
        if self.analysis_window_sec <= 0:
            raise ValueError(
                f"analysis_window_sec must be positive, got {self.analysis_window_sec}"
            )
        if self.min_analysis_latency_sec < 0:
            raise ValueError(
                "min_analysis_latency_sec must be non-negative, "
                f"got {self.min_analysis_latency_sec}"
            )
        if self.max_upload_bytes <= 0:
            raise ValueError(f"max_upload_bytes must be positive, got {self.max_upload_bytes}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AudioPipelineConfig":
        """
        Build a config from ``AUDIO_*`` environment variables.

        Each field maps to ``AUDIO_<FIELD_NAME>`` upper-cased, e.g.
        ``AUDIO_TARGET_SAMPLE_RATE``. Unset variables keep the default.

        Raises:
            ValueError: A variable is set but not a valid number, or the
                resulting config fails validation.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, int | float] = {}
        for f in fields(cls):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            cast = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = cast(raw)
            except ValueError as exc:
                raise ValueError(
                    f"{_ENV_PREFIX}{f.name.upper()} must be {cast.__name__}, got {raw!r}"
                ) from exc
        return cls(**overrides)


# Pre-defined configurations

DEFAULT_CONFIG = AudioPipelineConfig()
"""Default configuration: 48 kHz output, 60 s clips, 10 s segments, no latency floor."""

PACED_CONFIG = AudioPipelineConfig(min_analysis_latency_sec=3.0)
"""Analysis paced to at least 3 s, matching the release wizard's progress animation."""
