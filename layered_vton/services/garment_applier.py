"""Apply one garment to one avatar image, with single-result caching."""

import logging

from ..errors import TryOnError
from ..models import Garment, Layer, LayerResult, TryOnCategory
from .fashn_client import FashnClient, ProgressCallback
from .result_cache import ResultCache

logger = logging.getLogger(__name__)


class GarmentApplier:
    """Generic garment submission path shared by clothing and accessories.

    Never raises ``TryOnError``: failures come back as an unsuccessful
    ``LayerResult`` carrying the unchanged avatar image.
    """

    def __init__(self, client: FashnClient, cache: ResultCache):
        self.client = client
        self.cache = cache

    async def apply(
        self,
        avatar_url: str,
        garment: Garment,
        category: TryOnCategory,
        layer: Layer | int = Layer.MAIN,
        on_progress: ProgressCallback | None = None,
    ) -> LayerResult:
        cached = await self.cache.get_single(avatar_url, garment.image_url)
        if cached:
            logger.info("Using cached result for %s", garment.display_name)
            return LayerResult(
                garment_id=garment.id,
                garment_name=garment.display_name,
                image_url=cached,
                layer=int(layer),
                success=True,
                from_cache=True,
            )

        try:
            job_id, image_url = await self.client.run(
                avatar_url, garment.image_url, category, on_progress=on_progress,
            )
        except TryOnError as e:
            logger.warning("Try-on failed for %s: %s", garment.display_name, e)
            return LayerResult(
                garment_id=garment.id,
                garment_name=garment.display_name,
                image_url=avatar_url,
                layer=int(layer),
                success=False,
                error=str(e),
            )

        await self.cache.put_single(avatar_url, garment.image_url, image_url)
        logger.info("Applied %s (job %s)", garment.display_name, job_id)
        return LayerResult(
            garment_id=garment.id,
            garment_name=garment.display_name,
            image_url=image_url,
            layer=int(layer),
            success=True,
            job_id=job_id,
        )
