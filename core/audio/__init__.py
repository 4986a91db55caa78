"""
core/audio — Pure audio normalization and analysis module.

Provides the DSP and classification stages of the upload pipeline. All
functions are pure: they take a SampleBuffer (or scalar features) and return
new values. No codec or file I/O — decoding lives in ingestion/audio_loader.py.

Public API:
    Types:      SampleBuffer, EncodedAudio, AnalysisFeatures, AnalysisSegment,
                CopyrightMatch, AnalysisResult, SegmentStatus, Platform
    Errors:     AudioProcessingError, DecodeError, RenderError
    Render:     render
    Encode:     encode_wav
    Classify:   HeuristicClassifier, extract_features
    Catalog:    ReferenceCatalog, CatalogEntry, load_catalog
"""

from core.audio.catalog import CatalogEntry, ReferenceCatalog, load_catalog
from core.audio.errors import AudioProcessingError, DecodeError, RenderError
from core.audio.fingerprint import HeuristicClassifier, extract_features
from core.audio.render import render
from core.audio.types import (
    AnalysisFeatures,
    AnalysisResult,
    AnalysisSegment,
    CopyrightMatch,
    EncodedAudio,
    Platform,
    SampleBuffer,
    SegmentStatus,
)
from core.audio.wav import encode_wav

__all__ = [
    "SampleBuffer",
    "EncodedAudio",
    "AnalysisFeatures",
    "AnalysisSegment",
    "CopyrightMatch",
    "AnalysisResult",
    "SegmentStatus",
    "Platform",
    "AudioProcessingError",
    "DecodeError",
    "RenderError",
    "render",
    "encode_wav",
    "HeuristicClassifier",
    "extract_features",
    "ReferenceCatalog",
    "CatalogEntry",
    "load_catalog",
]
