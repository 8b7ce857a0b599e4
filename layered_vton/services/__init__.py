"""Remote API client, caching, and garment application services."""

from .fashn_client import FashnClient
from .storage import KeyValueStore, MemoryStore, JsonFileStore
from .result_cache import ResultCache, outfit_signature
from .garment_applier import GarmentApplier
from .accessory_router import AccessoryRouter

__all__ = [
    "FashnClient",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "ResultCache",
    "outfit_signature",
    "GarmentApplier",
    "AccessoryRouter",
]
