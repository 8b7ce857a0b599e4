"""Data models for the layered try-on pipeline."""

from .garment import Garment, Layer, TryOnCategory, AccessoryKind
from .job import JobStatus, TryOnJob
from .outfit import (
    LayerResult,
    SequentialResult,
    OutfitCombination,
    QuickApplyResult,
    SingleTryOnResult,
    CacheStats,
)

__all__ = [
    "Garment",
    "Layer",
    "TryOnCategory",
    "AccessoryKind",
    "JobStatus",
    "TryOnJob",
    "LayerResult",
    "SequentialResult",
    "OutfitCombination",
    "QuickApplyResult",
    "SingleTryOnResult",
    "CacheStats",
]
