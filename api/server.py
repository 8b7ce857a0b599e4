"""FastAPI server for layered virtual try-on.

Receives requests with:
- avatar_url: reference body image of the user
- garments: wardrobe items (id, image_url, clothing_type) to layer on the avatar
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from layered_vton.config import PipelineConfig, setup_logging
from layered_vton.models import CacheStats, Garment, LayerResult
from layered_vton.pipeline import SequentialCompositor


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Layered VTON API",
    description="Sequential garment layering on a remote try-on API",
    version="0.1.0",
)

# Enable CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class OutfitRequest(BaseModel):
    """Request body for a layered outfit."""
    avatar_url: str
    garments: list[Garment] = Field(min_length=1)


class SingleTryOnRequest(BaseModel):
    """Request body for trying on a single garment."""
    avatar_url: str
    garment: Garment


class OutfitResponse(BaseModel):
    success: bool
    final_image_url: str | None = None
    from_cache: bool = False
    processing_time: float | None = None
    layer_results: list[LayerResult] = Field(default_factory=list)
    error: str | None = None


class SingleTryOnResponse(BaseModel):
    success: bool
    image_url: str | None = None
    from_cache: bool = False
    job_id: str | None = None
    error: str | None = None


# Initialize compositor (will be done on first request)
_compositor: SequentialCompositor | None = None


def get_compositor() -> SequentialCompositor:
    """Get or create the compositor instance."""
    global _compositor
    if _compositor is None:
        config = PipelineConfig()  # Loads from .env automatically via pydantic-settings
        setup_logging(config.log_level)
        _compositor = SequentialCompositor(config)
    return _compositor


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Layered VTON API", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    compositor = get_compositor()
    upstream_ok = await compositor.fashn.check_connection()

    return {
        "status": "ok" if upstream_ok else "degraded",
        "upstream": "connected" if upstream_ok else "disconnected",
    }


@app.post("/api/outfit", response_model=OutfitResponse)
async def apply_outfit(request: OutfitRequest):
    """Layer an outfit onto the avatar, served from cache when possible."""
    try:
        result = await get_compositor().quick_apply(request.avatar_url, request.garments)
        return OutfitResponse(
            success=result.success,
            final_image_url=result.final_image_url,
            from_cache=result.from_cache,
            processing_time=result.processing_time,
            layer_results=result.layer_results,
            error=None if result.success else "No garment could be applied",
        )
    except Exception as e:
        logger.exception("Outfit request failed")
        return OutfitResponse(success=False, error=str(e))


@app.post("/api/outfit/sequential", response_model=OutfitResponse)
async def apply_outfit_sequentially(request: OutfitRequest):
    """Layer an outfit without consulting or updating the outfit cache."""
    try:
        result = await get_compositor().apply_sequentially(request.avatar_url, request.garments)
        return OutfitResponse(
            success=result.success,
            final_image_url=result.final_image_url,
            layer_results=result.layer_results,
            error=None if result.success else "No garment could be applied",
        )
    except Exception as e:
        logger.exception("Sequential outfit request failed")
        return OutfitResponse(success=False, error=str(e))


@app.post("/api/tryon", response_model=SingleTryOnResponse)
async def try_on_single(request: SingleTryOnRequest):
    """Try a single garment on the avatar."""
    try:
        result = await get_compositor().try_on_single(request.avatar_url, request.garment)
        return SingleTryOnResponse(
            success=result.success,
            image_url=result.image_url,
            from_cache=result.from_cache,
            job_id=result.job_id,
            error=result.error,
        )
    except Exception as e:
        logger.exception("Try-on request failed")
        return SingleTryOnResponse(success=False, error=str(e))


@app.get("/api/cache/stats", response_model=CacheStats)
async def cache_stats():
    return await get_compositor().cache.stats()


@app.delete("/api/cache")
async def clear_cache():
    await get_compositor().cache.clear()
    return {"status": "cleared"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
