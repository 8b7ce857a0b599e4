"""Two-tier memo store for try-on results.

* Single results: ``(avatar_url, garment_url) -> image_url`` for one garment
  applied to one avatar image.
* Outfits: ``signature -> OutfitCombination`` for a whole layered outfit.

Both tiers live in memory and are written through to a ``KeyValueStore`` so
they survive restarts. Each write re-reads its tier from the store first, so
processes sharing one store keep each other's entries; a write racing another
process between that read and the replace can still be lost.
"""

import asyncio
import hashlib
import logging
from typing import Iterable

from pydantic import ValidationError

from ..models import CacheStats, Garment, OutfitCombination
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

OUTFITS_KEY = "outfits"
RESULTS_KEY = "results"


def outfit_signature(avatar_url: str, garments: Iterable[Garment]) -> str:
    """Cache key for an outfit, independent of garment order."""
    garment_ids = ",".join(sorted(g.id for g in garments))
    return hashlib.sha256(f"{avatar_url}:{garment_ids}".encode("utf-8")).hexdigest()


def single_key(avatar_url: str, garment_url: str) -> str:
    return f"{avatar_url}+{garment_url}"


class ResultCache:
    """Outfit and single-result cache shared by concurrent pipeline runs."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._lock = asyncio.Lock()
        self._outfits: dict[str, OutfitCombination] = {}
        self._results: dict[str, str] = {}
        self._loaded = False

    def _read_outfits(self) -> dict[str, OutfitCombination]:
        outfits = {}
        for record in self.store.get(OUTFITS_KEY) or []:
            try:
                outfit = OutfitCombination.model_validate(record)
            except ValidationError as e:
                logger.warning("Skipping corrupt cached outfit: %s", e)
                continue
            outfits[outfit.id] = outfit
        return outfits

    def _read_results(self) -> dict[str, str]:
        results = self.store.get(RESULTS_KEY) or {}
        if not isinstance(results, dict):
            return {}
        return {k: v for k, v in results.items() if isinstance(v, str)}

    def _load(self) -> None:
        """Populate the in-memory tiers from the store. Caller holds the lock."""
        if self._loaded:
            return

        self._outfits = self._read_outfits()
        self._results = self._read_results()
        self._loaded = True
        logger.info(
            "Loaded %d cached outfits and %d cached results",
            len(self._outfits), len(self._results),
        )

    def _persist_outfits(self) -> None:
        self.store.set(
            OUTFITS_KEY,
            [o.model_dump(mode="json") for o in self._outfits.values()],
        )

    def _persist_results(self) -> None:
        self.store.set(RESULTS_KEY, dict(self._results))

    async def get(self, signature: str) -> OutfitCombination | None:
        async with self._lock:
            self._load()
            outfit = self._outfits.get(signature)
        if outfit is not None:
            logger.debug("Outfit cache hit: %s", signature)
        return outfit

    async def put(self, signature: str, combination: OutfitCombination) -> None:
        async with self._lock:
            self._load()
            # Re-read so entries written by other processes sharing the store survive
            self._outfits = self._read_outfits()
            self._outfits[signature] = combination
            self._persist_outfits()
        logger.info("Outfit combination saved: %s", signature)

    async def get_single(self, avatar_url: str, garment_url: str) -> str | None:
        async with self._lock:
            self._load()
            return self._results.get(single_key(avatar_url, garment_url))

    async def put_single(self, avatar_url: str, garment_url: str, image_url: str) -> None:
        async with self._lock:
            self._load()
            self._results = self._read_results()
            self._results[single_key(avatar_url, garment_url)] = image_url
            self._persist_results()

    async def clear(self) -> None:
        """Empty both tiers, in memory and in the store."""
        async with self._lock:
            self._outfits.clear()
            self._results.clear()
            self.store.delete(OUTFITS_KEY)
            self.store.delete(RESULTS_KEY)
            self._loaded = True
        logger.info("Cache cleared")

    async def stats(self) -> CacheStats:
        async with self._lock:
            self._load()
            return CacheStats(
                outfit_count=len(self._outfits),
                result_count=len(self._results),
                size_bytes=self.store.size_bytes(),
            )
