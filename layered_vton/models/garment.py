"""Garment models and classification enums."""

from enum import Enum, IntEnum

from pydantic import BaseModel, Field


class Layer(IntEnum):
    """Application order of a garment on the avatar."""
    BASE = 1
    MAIN = 2
    OUTER = 3
    ACCESSORY = 4


class TryOnCategory(str, Enum):
    """Category hint understood by the remote transform API."""
    AUTO = "auto"
    TOPS = "tops"
    BOTTOMS = "bottoms"
    ONE_PIECES = "one-pieces"


class AccessoryKind(str, Enum):
    """Accessory subtypes with their own submission strategy."""
    JEWELRY = "jewelry"
    HEADWEAR = "headwear"
    BAG = "bag"
    BELT = "belt"
    FOOTWEAR = "footwear"


class Garment(BaseModel):
    """A wearable item supplied by the wardrobe for one request."""

    id: str
    name: str = ""
    image_url: str = Field(description="Garment image reference, owned by the wardrobe")
    category: str = Field(default="", description="Coarse family, e.g. 'shirts', 'accessories'")
    clothing_type: str = Field(description="e.g. 'shirt', 'jacket', 'necklace'")

    @property
    def display_name(self) -> str:
        return self.name or self.clothing_type
