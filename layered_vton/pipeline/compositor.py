"""Sequential layering pipeline with outfit caching."""

import asyncio
import logging
import time
from typing import Iterable

from ..config import PipelineConfig
from ..models import (
    Garment,
    Layer,
    LayerResult,
    OutfitCombination,
    QuickApplyResult,
    SequentialResult,
    SingleTryOnResult,
)
from ..services import (
    AccessoryRouter,
    FashnClient,
    GarmentApplier,
    JsonFileStore,
    ResultCache,
    outfit_signature,
)
from ..services.fashn_client import ProgressCallback
from ..utils.classifier import classify_category, classify_layer, order_layers

logger = logging.getLogger(__name__)


class _Flight:
    """One in-flight outfit computation and the number of callers awaiting it."""

    def __init__(self, task: asyncio.Task):
        self.task = task
        self.waiters = 0


class SequentialCompositor:
    """Layer garments onto an avatar one remote job at a time.

    Flow:
    1. Order garments base -> main -> outer -> accessory
    2. Apply each garment on top of the previous layer's output
    3. Keep going when a layer fails, reporting it in the layer results
    4. Cache whole outfits (``quick_apply``) and single results
    """

    def __init__(
        self,
        config: PipelineConfig,
        client: FashnClient | None = None,
        cache: ResultCache | None = None,
    ):
        self.config = config

        # Initialize services
        self.fashn = client or FashnClient(config.fashn, config.polling)
        self.cache = cache or ResultCache(JsonFileStore(config.cache.path))
        self.applier = GarmentApplier(self.fashn, self.cache)
        self.accessories = AccessoryRouter(self.applier)

        self._inflight: dict[str, _Flight] = {}

    async def _apply_layer(
        self,
        avatar_url: str,
        garment: Garment,
        layer: Layer,
        on_progress: ProgressCallback | None = None,
    ) -> LayerResult:
        if layer == Layer.ACCESSORY:
            return await self.accessories.apply_accessory(
                avatar_url, garment, layer=layer, on_progress=on_progress,
            )
        return await self.applier.apply(
            avatar_url,
            garment,
            classify_category(garment.clothing_type),
            layer=layer,
            on_progress=on_progress,
        )

    async def apply_sequentially(
        self,
        avatar_url: str,
        garments: Iterable[Garment],
        on_progress: ProgressCallback | None = None,
    ) -> SequentialResult:
        """Apply every garment in layer order, each on the previous layer's result.

        A failed layer leaves the image unchanged and the fold moves on; the
        failure is recorded in ``layer_results``. ``success`` is True when at
        least one layer applied.
        """
        ordered = order_layers(garments)
        logger.info(
            "Starting sequential outfit application: %s",
            ", ".join(f"{g.display_name} (layer {int(layer)})" for g, layer in ordered),
        )

        current_image = avatar_url
        layer_results: list[LayerResult] = []

        for garment, layer in ordered:
            previous = layer_results[-1] if layer_results else None
            if previous is not None and not previous.from_cache and self.config.layering.layer_delay > 0:
                await asyncio.sleep(self.config.layering.layer_delay)

            result = await self._apply_layer(current_image, garment, layer, on_progress)
            layer_results.append(result)

            if result.success:
                current_image = result.image_url
                logger.info("Layer %d applied: %s", int(layer), garment.display_name)
            else:
                logger.warning(
                    "Layer %d failed for %s, continuing with previous result: %s",
                    int(layer), garment.display_name, result.error,
                )

        success = any(r.success for r in layer_results)
        return SequentialResult(
            success=success,
            final_image_url=current_image,
            layer_results=layer_results,
        )

    async def _compose_and_store(
        self,
        signature: str,
        avatar_url: str,
        garments: list[Garment],
        on_progress: ProgressCallback | None,
    ) -> SequentialResult:
        result = await self.apply_sequentially(avatar_url, garments, on_progress)
        if result.success:
            await self.cache.put(
                signature,
                OutfitCombination(
                    id=signature,
                    avatar_url=avatar_url,
                    garment_ids=sorted(g.id for g in garments),
                    final_image_url=result.final_image_url,
                    layer_results=result.layer_results,
                ),
            )
        return result

    async def _join_flight(self, signature: str, flight: _Flight) -> SequentialResult:
        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            # Last caller gone: stop polling instead of running to exhaustion
            if flight.waiters == 1 and not flight.task.done():
                logger.info("Cancelling abandoned outfit run %s", signature)
                flight.task.cancel()
            raise
        finally:
            flight.waiters -= 1

    async def quick_apply(
        self,
        avatar_url: str,
        garments: Iterable[Garment],
        on_progress: ProgressCallback | None = None,
    ) -> QuickApplyResult:
        """Return a cached outfit, or build it and cache it.

        Concurrent calls for the same outfit share a single pipeline run.
        """
        start = time.monotonic()
        garments = list(garments)
        signature = outfit_signature(avatar_url, garments)

        cached = await self.cache.get(signature)
        if cached is not None:
            logger.info("Using cached outfit combination %s", signature)
            return QuickApplyResult(
                success=True,
                final_image_url=cached.final_image_url,
                from_cache=True,
                processing_time=time.monotonic() - start,
                layer_results=cached.layer_results,
            )

        flight = self._inflight.get(signature)
        if flight is None:
            logger.info("Generating new outfit combination %s", signature)
            task = asyncio.create_task(
                self._compose_and_store(signature, avatar_url, garments, on_progress)
            )
            flight = _Flight(task)
            self._inflight[signature] = flight
            task.add_done_callback(lambda _: self._inflight.pop(signature, None))
        else:
            logger.info("Joining in-flight outfit run %s", signature)

        result = await self._join_flight(signature, flight)
        return QuickApplyResult(
            success=result.success,
            final_image_url=result.final_image_url,
            from_cache=False,
            processing_time=time.monotonic() - start,
            layer_results=result.layer_results,
        )

    async def try_on_single(
        self,
        avatar_url: str,
        garment: Garment,
        on_progress: ProgressCallback | None = None,
    ) -> SingleTryOnResult:
        """Try one garment on the avatar outside of a full outfit run."""
        start = time.monotonic()
        layer = classify_layer(garment.clothing_type)
        result = await self._apply_layer(avatar_url, garment, layer, on_progress)
        return SingleTryOnResult(
            success=result.success,
            garment_id=garment.id,
            garment_name=garment.display_name,
            image_url=result.image_url if result.success else None,
            from_cache=result.from_cache,
            job_id=result.job_id,
            error=result.error,
            processing_time=time.monotonic() - start,
        )

    async def close(self):
        await self.fashn.close()
