"""Qualification engine, cache and pre-filter."""

from .cache import CacheEntry, QualificationCache
from .engine import (
    DEFAULT_MARKERS,
    DEFAULT_MAX_SUPERTYPE_DEPTH,
    DEFAULT_ROOT_TYPES,
    NOT_QUALIFIED,
    Evidence,
    QualificationEngine,
    QualificationResult,
    simple_name,
)
from .prefilter import PreFilter

__all__ = [
    "CacheEntry",
    "DEFAULT_MARKERS",
    "DEFAULT_MAX_SUPERTYPE_DEPTH",
    "DEFAULT_ROOT_TYPES",
    "Evidence",
    "NOT_QUALIFIED",
    "PreFilter",
    "QualificationCache",
    "QualificationEngine",
    "QualificationResult",
    "simple_name",
]
