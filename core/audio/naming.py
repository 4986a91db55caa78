"""
core/audio/naming.py — Output filename convention for processed tracks.

    full track:   <sanitized-title>.wav
    trimmed clip: <sanitized-title>-trim.wav

Sanitization replaces every character outside [A-Za-z0-9] with '_' and then
lowercases. A blank title falls back to ``Track-<track_number>``.
"""

from __future__ import annotations

import re

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def sanitize_title(title: str) -> str:
    """Replace anything outside [A-Za-z0-9] with '_', then lowercase.

    Substitution runs first, so a non-ASCII letter becomes one '_' even when
    its lowercase form is ASCII (the Kelvin sign, dotted capital I).
    """
    return _UNSAFE.sub("_", title).lower()


def track_base_name(title: str | None, track_number: str | int | None = None) -> str:
    """Return the unsanitized base name, falling back to ``Track-<n>``."""
    if title is not None and title.strip():
        return title
    return f"Track-{track_number if track_number is not None else ''}"


def full_track_filename(title: str | None, track_number: str | int | None = None) -> str:
    return f"{sanitize_title(track_base_name(title, track_number))}.wav"


def clip_filename(title: str | None, track_number: str | int | None = None) -> str:
    return f"{sanitize_title(track_base_name(title, track_number))}-trim.wav"
