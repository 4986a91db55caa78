"""Infrastructure layer — operational concerns for the audio service.

Modules:
    metrics     Prometheus metrics registry and latency timer.
"""
