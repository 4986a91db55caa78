"""
FastAPI dependency providers.

Provides a singleton AudioProcessingEngine so configuration is read from the
environment once and the engine is reused across requests. Tests override
``get_audio_engine`` through ``app.dependency_overrides``.
"""

from dotenv import load_dotenv

from core.config import AudioPipelineConfig
from ingestion.audio_engine import AudioProcessingEngine

_audio_engine: AudioProcessingEngine | None = None


def get_audio_engine() -> AudioProcessingEngine:
    """
    Return a cached ``AudioProcessingEngine`` singleton.

    Reads ``AUDIO_*`` settings from the environment (and ``.env`` if present)
    on first call; librosa is imported lazily on the first request that
    decodes audio.
    """
    global _audio_engine  # noqa: PLW0603
    if _audio_engine is None:
        load_dotenv()
        _audio_engine = AudioProcessingEngine(config=AudioPipelineConfig.from_env())
    return _audio_engine
