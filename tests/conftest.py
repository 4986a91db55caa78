"""
Shared fixtures for the test suite.

Centralizes reusable test infrastructure so individual test files
don't need to repeat mock-librosa and engine-override boilerplate.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient

from api.deps import get_audio_engine
from api.main import app
from core.config import AudioPipelineConfig
from ingestion.audio_engine import AudioProcessingEngine

# ---------------------------------------------------------------------------
# Signal helpers
# ---------------------------------------------------------------------------


def make_sine(
    *,
    seconds: float,
    sr: int,
    freq: float = 440.0,
    amplitude: float = 0.5,
    channels: int = 1,
) -> np.ndarray:
    """Return a (channels, frames) float32 sine; channel k is phase-shifted."""
    t = np.arange(int(round(seconds * sr))) / sr
    rows = [amplitude * np.sin(2 * np.pi * freq * t + k * np.pi / 4) for k in range(channels)]
    return np.asarray(rows, dtype=np.float32)


def make_mock_librosa(samples: np.ndarray | None = None, sr: int = 44100) -> MagicMock:
    """Return a mock librosa whose load() yields (samples, sr).

    Mono input is returned 1-D, mirroring librosa.load(mono=False) on a
    single-channel file.
    """
    if samples is None:
        samples = make_sine(seconds=5.0, sr=sr)
    y = samples[0] if samples.ndim == 2 and samples.shape[0] == 1 else samples
    mock = MagicMock()
    mock.load.return_value = (y, sr)
    return mock


# ---------------------------------------------------------------------------
# FastAPI test client fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_librosa() -> MagicMock:
    """Mock librosa decoding 10 s of a 440 Hz stereo sine at 44.1 kHz."""
    return make_mock_librosa(make_sine(seconds=10.0, sr=44100, channels=2), sr=44100)


@pytest.fixture()
def audio_engine(mock_librosa: MagicMock) -> AudioProcessingEngine:
    """Engine wired to the mock decoder, with a small upload limit."""
    config = AudioPipelineConfig(max_upload_bytes=1024 * 1024)
    return AudioProcessingEngine(config=config, librosa=mock_librosa)


@pytest.fixture()
def api_client(audio_engine: AudioProcessingEngine):
    """FastAPI ``TestClient`` with the audio engine overridden.

    The engine is accessible as ``client._engine``.
    """
    app.dependency_overrides[get_audio_engine] = lambda: audio_engine

    with TestClient(app) as c:
        c._engine = audio_engine  # type: ignore[attr-defined]
        yield c

    app.dependency_overrides.clear()
