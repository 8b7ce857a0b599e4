"""Classification and payload helpers."""

from .classifier import (
    classify_layer,
    classify_category,
    accessory_kind,
    order_layers,
    sort_for_application,
)
from .response_shapes import extract_image_url, extract_error_message

__all__ = [
    "classify_layer",
    "classify_category",
    "accessory_kind",
    "order_layers",
    "sort_for_application",
    "extract_image_url",
    "extract_error_message",
]
