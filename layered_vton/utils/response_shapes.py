"""Extract the output image from a completed job's status payload.

The transform API has changed the shape of its completed payload over time.
Each extractor below reads exactly one known shape; they are tried in order and
the first one that yields a URL wins. The flat ``output`` array is the current
API format and stays first.
"""

from typing import Any, Callable


Extractor = Callable[[dict[str, Any]], str | None]


def _first(value: Any) -> str | None:
    if isinstance(value, list) and value and isinstance(value[0], str) and value[0]:
        return value[0]
    return None


def _result(payload: dict[str, Any]) -> dict[str, Any]:
    result = payload.get("result")
    return result if isinstance(result, dict) else {}


def flat_output(payload: dict[str, Any]) -> str | None:
    """``{"output": ["<url>"]}``"""
    return _first(payload.get("output"))


def result_images(payload: dict[str, Any]) -> str | None:
    """``{"result": {"images": ["<url>"]}}``"""
    return _first(_result(payload).get("images"))


def result_image(payload: dict[str, Any]) -> str | None:
    """``{"result": {"image": "<url>"}}``"""
    image = _result(payload).get("image")
    return image if isinstance(image, str) and image else None


def result_output(payload: dict[str, Any]) -> str | None:
    """``{"result": {"output": ["<url>"]}}``"""
    return _first(_result(payload).get("output"))


def result_data_images(payload: dict[str, Any]) -> str | None:
    """``{"result": {"data": {"images": ["<url>"]}}}``"""
    data = _result(payload).get("data")
    if not isinstance(data, dict):
        return None
    return _first(data.get("images"))


RESULT_EXTRACTORS: list[tuple[str, Extractor]] = [
    ("output[0]", flat_output),
    ("result.images[0]", result_images),
    ("result.image", result_image),
    ("result.output[0]", result_output),
    ("result.data.images[0]", result_data_images),
]


def extract_image_url(payload: dict[str, Any]) -> tuple[str, str] | None:
    """Return ``(shape_name, url)`` for the first matching shape, or None."""
    for name, extractor in RESULT_EXTRACTORS:
        url = extractor(payload)
        if url:
            return name, url
    return None


def extract_error_message(payload: dict[str, Any], default: str = "Try-on job failed") -> str:
    """Normalize the ``error`` field of a failed job to a message string."""
    error = payload.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        for key in ("message", "error", "detail", "description"):
            value = error.get(key)
            if isinstance(value, str) and value:
                return value
        if error:
            return str(error)
    return default
