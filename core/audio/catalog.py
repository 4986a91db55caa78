"""
core/audio/catalog.py — Reference catalog for simulated copyright matching.

The catalog is an immutable, index-addressed tuple of (title, artist) pairs.
It is injected into the classifier rather than read from a global, so tests
can supply arbitrary catalogs.

The bundled default lives in core/audio/reference_catalog.yaml and is read
through importlib.resources once per process.
"""

from __future__ import annotations

import importlib.resources
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

MATCH_MODULUS = 25
"""Simulated database size: content_hash mod 25 selects the catalog slot."""

_BUNDLED_FILE = "reference_catalog.yaml"
_CACHE: dict[str, ReferenceCatalog] = {}


@dataclass(frozen=True)
class CatalogEntry:
    """A single reference recording."""

    title: str
    artist: str


@dataclass(frozen=True)
class ReferenceCatalog:
    """Ordered, immutable list of reference recordings.

    Invariants:
        len(entries) < MATCH_MODULUS  (otherwise every track would match)
    """

    entries: tuple[CatalogEntry, ...]

    def __post_init__(self) -> None:
        """Reject catalogs that cannot be addressed by the match modulus."""
        if len(self.entries) >= MATCH_MODULUS:
            raise ValueError(
                f"catalog must have fewer than {MATCH_MODULUS} entries, got {len(self.entries)}"
            )

    def __len__(self) -> int:
        return len(self.entries)

    def lookup(self, index: int) -> CatalogEntry | None:
        """Return the entry at `index`, or None when the slot is empty."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> ReferenceCatalog:
        return cls(tuple(CatalogEntry(title=t, artist=a) for t, a in pairs))


def _parse(data: dict[str, Any], source: str) -> ReferenceCatalog:
    raw = data.get("entries") if isinstance(data, dict) else None
    if not isinstance(raw, list):
        raise ValueError(f"Reference catalog {source!r} must define an 'entries' list")
    entries = []
    for position, item in enumerate(raw):
        if not isinstance(item, dict) or "title" not in item or "artist" not in item:
            raise ValueError(
                f"Reference catalog {source!r} entry {position} needs 'title' and 'artist'"
            )
        entries.append(CatalogEntry(title=str(item["title"]), artist=str(item["artist"])))
    return ReferenceCatalog(tuple(entries))


def load_catalog(path: str | Path | None = None) -> ReferenceCatalog:
    """Load a reference catalog from YAML.

    Args:
        path: YAML file with an ``entries`` list of ``{title, artist}``
              mappings. None loads the bundled default catalog.

    Returns:
        Parsed ReferenceCatalog. Results are cached per source.

    Raises:
        FileNotFoundError: `path` does not exist.
        ValueError: The YAML does not describe a valid catalog.
    """
    key = str(path) if path is not None else _BUNDLED_FILE
    if key in _CACHE:
        return _CACHE[key]

    if path is None:
        text = (importlib.resources.files("core.audio") / _BUNDLED_FILE).read_text(
            encoding="utf-8"
        )
    else:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Reference catalog not found: {file_path}")
        text = file_path.read_text(encoding="utf-8")

    catalog = _parse(yaml.safe_load(text), key)
    _CACHE[key] = catalog
    return catalog


def default_catalog() -> ReferenceCatalog:
    """Return the bundled eight-entry reference catalog."""
    return load_catalog(None)
