"""Prometheus metrics for the audio processing service.

Exposes per-operation counters so dashboards show how uploads fare through
normalization, clipping and analysis, beyond generic HTTP stats.

Metrics:
    audio_operations_total            Counter by operation and status (success/error)
    audio_operation_latency_seconds   Histogram of operation latency by operation
    audio_decode_fallbacks_total      Analyses that fell back to default features
    audio_rejected_uploads_total      Uploads rejected at the boundary, by reason

Usage::

    from infrastructure.metrics import LatencyTimer, record_operation

    with LatencyTimer() as t:
        result = engine.analyze(data)
    record_operation(operation="analyze", status="success", latency_seconds=t.elapsed)
"""

from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)

# prometheus_client is optional. If not installed, all calls
# are no-ops and the /metrics endpoint returns an empty body.
_registry_available = False
try:
    from prometheus_client import (
        CONTENT_TYPE_LATEST,
        CollectorRegistry,
        Counter,
        Histogram,
        generate_latest,
    )

    _REGISTRY = CollectorRegistry()

    audio_operations_total = Counter(
        "dsa_audio_operations_total",
        "Audio operations by operation and status",
        ["operation", "status"],
        registry=_REGISTRY,
    )

    audio_operation_latency_seconds = Histogram(
        "dsa_audio_operation_latency_seconds",
        "Audio operation latency in seconds",
        ["operation"],
        buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        registry=_REGISTRY,
    )

    audio_decode_fallbacks_total = Counter(
        "dsa_audio_decode_fallbacks_total",
        "Analyses that could not decode the input and used fallback features",
        registry=_REGISTRY,
    )

    audio_rejected_uploads_total = Counter(
        "dsa_audio_rejected_uploads_total",
        "Uploads rejected before processing",
        ["reason"],
        registry=_REGISTRY,
    )

    _registry_available = True
    logger.info("Prometheus metrics registry initialized")

except ImportError:
    logger.info("prometheus_client not installed — metrics disabled")
    _REGISTRY = None  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Public helpers, all no-ops when prometheus_client is not installed
# ---------------------------------------------------------------------------


def record_operation(
    *,
    operation: str,
    status: str,
    latency_seconds: float,
) -> None:
    """Record a completed audio operation.

    Args:
        operation: One of "normalize", "clip", "analyze", "duration".
        status: "success" or "error".
        latency_seconds: Wall-clock time in seconds.
    """
    if not _registry_available:
        return
    audio_operations_total.labels(operation=operation, status=status).inc()
    audio_operation_latency_seconds.labels(operation=operation).observe(latency_seconds)


def record_decode_fallback() -> None:
    """Increment the analysis decode-fallback counter."""
    if _registry_available:
        audio_decode_fallbacks_total.inc()


def record_rejected_upload(reason: str) -> None:
    """Increment the rejected-upload counter.

    Args:
        reason: Short label, e.g. "empty" or "too_large".
    """
    if _registry_available:
        audio_rejected_uploads_total.labels(reason=reason).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
        Returns empty bytes if prometheus_client is not available.
    """
    if not _registry_available:
        return b"", "text/plain"
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            encoded = engine.normalize_full_track(data, title="Song")
        record_operation(operation="normalize", status="success", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
