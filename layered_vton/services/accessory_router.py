"""Route accessory-layer garments to their submission strategy."""

import logging

from ..models import AccessoryKind, Garment, Layer, LayerResult, TryOnCategory
from ..utils.classifier import accessory_kind
from .fashn_client import ProgressCallback
from .garment_applier import GarmentApplier

logger = logging.getLogger(__name__)


# jewelry: plain overlay, no region targeting
# headwear: upper-body category keeps the hat near the head
# bag/belt/footwear: auto overlay, a garment category would replace the clothing underneath
ACCESSORY_CATEGORIES: dict[AccessoryKind, TryOnCategory] = {
    AccessoryKind.JEWELRY: TryOnCategory.AUTO,
    AccessoryKind.HEADWEAR: TryOnCategory.TOPS,
    AccessoryKind.BAG: TryOnCategory.AUTO,
    AccessoryKind.BELT: TryOnCategory.AUTO,
    AccessoryKind.FOOTWEAR: TryOnCategory.AUTO,
}


class AccessoryRouter:
    """Dispatch accessories to a per-subtype category strategy."""

    def __init__(self, applier: GarmentApplier):
        self.applier = applier

    def category_for(self, kind: AccessoryKind | str) -> TryOnCategory:
        try:
            kind = AccessoryKind(kind)
        except ValueError:
            logger.warning("Unknown accessory subtype %r, treating as jewelry", kind)
            kind = AccessoryKind.JEWELRY
        return ACCESSORY_CATEGORIES[kind]

    async def apply_accessory(
        self,
        avatar_url: str,
        garment: Garment,
        kind: AccessoryKind | str | None = None,
        layer: Layer | int = Layer.ACCESSORY,
        on_progress: ProgressCallback | None = None,
    ) -> LayerResult:
        if kind is None:
            kind = accessory_kind(garment.clothing_type)
        category = self.category_for(kind)
        kind_name = kind.value if isinstance(kind, AccessoryKind) else kind
        logger.info("Applying accessory %s as %s (category=%s)", garment.display_name, kind_name, category.value)
        return await self.applier.apply(avatar_url, garment, category, layer=layer, on_progress=on_progress)
