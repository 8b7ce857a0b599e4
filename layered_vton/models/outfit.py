"""Layering results and cached outfit records."""

from datetime import datetime
from pydantic import BaseModel, Field, computed_field


class LayerResult(BaseModel):
    """Outcome of applying one garment during a pipeline run."""

    garment_id: str
    garment_name: str
    image_url: str  # produced image, or the unchanged accumulator on failure
    layer: int
    success: bool
    error: str | None = None
    job_id: str | None = None
    from_cache: bool = False


class SequentialResult(BaseModel):
    """Result of folding every garment of an outfit onto the avatar."""

    success: bool
    final_image_url: str
    layer_results: list[LayerResult] = Field(default_factory=list)

    @computed_field
    @property
    def failed_garments(self) -> list[str]:
        """Ids of garments that did not apply."""
        return [r.garment_id for r in self.layer_results if not r.success]


class OutfitCombination(BaseModel):
    """Cached record of a resolved layered outfit."""

    id: str
    avatar_url: str
    garment_ids: list[str]
    final_image_url: str
    layer_results: list[LayerResult] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)


class QuickApplyResult(BaseModel):
    success: bool
    final_image_url: str | None = None
    from_cache: bool
    processing_time: float
    layer_results: list[LayerResult] = Field(default_factory=list)


class SingleTryOnResult(BaseModel):
    success: bool
    garment_id: str
    garment_name: str
    image_url: str | None = None
    from_cache: bool = False
    job_id: str | None = None
    error: str | None = None
    processing_time: float = 0.0


class CacheStats(BaseModel):
    outfit_count: int
    result_count: int
    size_bytes: int

    @computed_field
    @property
    def cache_size(self) -> str:
        return f"{self.size_bytes / 1024:.1f} KB"
