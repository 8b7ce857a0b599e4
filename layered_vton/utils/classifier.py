"""Map clothing types to application layers and try-on categories."""

import logging
from typing import Iterable

from ..models import AccessoryKind, Garment, Layer, TryOnCategory

logger = logging.getLogger(__name__)


LAYER_BY_TYPE: dict[str, Layer] = {
    # Base
    'underwear': Layer.BASE,
    'bra': Layer.BASE,
    'undershirt': Layer.BASE,
    'base': Layer.BASE,

    # Main
    'top': Layer.MAIN,
    'shirt': Layer.MAIN,
    'blouse': Layer.MAIN,
    't-shirt': Layer.MAIN,
    'tshirt': Layer.MAIN,
    'bottom': Layer.MAIN,
    'pants': Layer.MAIN,
    'jeans': Layer.MAIN,
    'trousers': Layer.MAIN,
    'shorts': Layer.MAIN,
    'skirt': Layer.MAIN,
    'dress': Layer.MAIN,
    'dresses': Layer.MAIN,
    'jumpsuit': Layer.MAIN,
    'romper': Layer.MAIN,

    # Outer
    'outerwear': Layer.OUTER,
    'jacket': Layer.OUTER,
    'coat': Layer.OUTER,
    'blazer': Layer.OUTER,
    'sweater': Layer.OUTER,
    'cardigan': Layer.OUTER,
    'hoodie': Layer.OUTER,

    # Accessories
    'shoes': Layer.ACCESSORY,
    'sneakers': Layer.ACCESSORY,
    'boots': Layer.ACCESSORY,
    'heels': Layer.ACCESSORY,
    'hat': Layer.ACCESSORY,
    'cap': Layer.ACCESSORY,
    'beanie': Layer.ACCESSORY,
    'jewelry': Layer.ACCESSORY,
    'necklace': Layer.ACCESSORY,
    'earrings': Layer.ACCESSORY,
    'bracelet': Layer.ACCESSORY,
    'ring': Layer.ACCESSORY,
    'watch': Layer.ACCESSORY,
    'bag': Layer.ACCESSORY,
    'purse': Layer.ACCESSORY,
    'handbag': Layer.ACCESSORY,
    'backpack': Layer.ACCESSORY,
    'belt': Layer.ACCESSORY,
    'sunglasses': Layer.ACCESSORY,
    'scarf': Layer.ACCESSORY,
}

CATEGORY_BY_TYPE: dict[str, TryOnCategory] = {
    'top': TryOnCategory.TOPS,
    'shirt': TryOnCategory.TOPS,
    'blouse': TryOnCategory.TOPS,
    'sweater': TryOnCategory.TOPS,
    'jacket': TryOnCategory.TOPS,
    'outerwear': TryOnCategory.TOPS,
    't-shirt': TryOnCategory.TOPS,
    'tshirt': TryOnCategory.TOPS,

    'bottom': TryOnCategory.BOTTOMS,
    'pants': TryOnCategory.BOTTOMS,
    'jeans': TryOnCategory.BOTTOMS,
    'shorts': TryOnCategory.BOTTOMS,
    'skirt': TryOnCategory.BOTTOMS,
    'trousers': TryOnCategory.BOTTOMS,

    'dress': TryOnCategory.ONE_PIECES,
    'dresses': TryOnCategory.ONE_PIECES,
    'jumpsuit': TryOnCategory.ONE_PIECES,
    'romper': TryOnCategory.ONE_PIECES,
    'suit': TryOnCategory.ONE_PIECES,
    'gown': TryOnCategory.ONE_PIECES,
}

ACCESSORY_BY_TYPE: dict[str, AccessoryKind] = {
    'jewelry': AccessoryKind.JEWELRY,
    'necklace': AccessoryKind.JEWELRY,
    'earrings': AccessoryKind.JEWELRY,
    'bracelet': AccessoryKind.JEWELRY,
    'ring': AccessoryKind.JEWELRY,
    'hat': AccessoryKind.HEADWEAR,
    'cap': AccessoryKind.HEADWEAR,
    'beanie': AccessoryKind.HEADWEAR,
    'bag': AccessoryKind.BAG,
    'purse': AccessoryKind.BAG,
    'handbag': AccessoryKind.BAG,
    'backpack': AccessoryKind.BAG,
    'belt': AccessoryKind.BELT,
    'shoes': AccessoryKind.FOOTWEAR,
    'sneakers': AccessoryKind.FOOTWEAR,
    'boots': AccessoryKind.FOOTWEAR,
    'heels': AccessoryKind.FOOTWEAR,
}


def _normalize(clothing_type: str) -> str:
    return (clothing_type or '').strip().lower()


def classify_layer(clothing_type: str) -> Layer:
    """Return the application layer for a clothing type.

    Unknown types are worn as main clothing rather than rejected.
    """
    key = _normalize(clothing_type)
    layer = LAYER_BY_TYPE.get(key)
    if layer is None:
        logger.warning("Unmapped clothing type %r, defaulting to layer %d", clothing_type, Layer.MAIN)
        return Layer.MAIN
    return layer


def classify_category(clothing_type: str) -> TryOnCategory:
    """Return the category hint sent with the remote submission."""
    return CATEGORY_BY_TYPE.get(_normalize(clothing_type), TryOnCategory.AUTO)


def accessory_kind(clothing_type: str) -> AccessoryKind:
    """Return the accessory subtype; unknown accessories are treated as jewelry."""
    return ACCESSORY_BY_TYPE.get(_normalize(clothing_type), AccessoryKind.JEWELRY)


def order_layers(garments: Iterable[Garment]) -> list[tuple[Garment, Layer]]:
    """Pair each garment with its layer, ordered base-first.

    The sort is stable: garments sharing a layer keep their input order.
    """
    layered = [(g, classify_layer(g.clothing_type)) for g in garments]
    return sorted(layered, key=lambda pair: pair[1])


def sort_for_application(garments: Iterable[Garment]) -> list[Garment]:
    return [g for g, _ in order_layers(garments)]
