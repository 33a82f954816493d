"""Decoding of Browshot API replies."""

from __future__ import annotations

import json
import logging
from io import BytesIO
from typing import Any, Dict, Optional

from PIL import Image

logger = logging.getLogger("browshot.replies")

IMAGE_FORMATS = ("PNG", "JPEG")


def invalid_response() -> Dict[str, Any]:
    return {"error": 1, "message": "Invalid server response"}


def missing_argument(message: str) -> Dict[str, Any]:
    return {"status": "error", "error": message}


def decode_reply(body: str) -> Any:
    """Parse a JSON reply body.

    An empty body, or one that is not valid JSON, gives the fixed
    invalid-response error instead of raising.
    """
    if body == "":
        return invalid_response()

    try:
        return json.loads(body)
    except ValueError as exc:
        logger.error("Invalid JSON: %s", exc)
        logger.error("%s", body)
        return invalid_response()


def sniff_image(body: bytes) -> Optional[str]:
    """Return the Pillow format name of ``body``, or None if unrecognised."""
    if not body:
        return None
    try:
        with Image.open(BytesIO(body)) as img:
            return img.format
    except Image.DecompressionBombError:
        # Oversized full-page captures; the header alone names the format.
        return _format_from_header(body)
    except OSError:
        return None


def _format_from_header(body: bytes) -> Optional[str]:
    Image.init()
    prefix = body[:16]
    for name in Image.ID:
        _, accept = Image.OPEN[name]
        if accept is not None and accept(prefix) is True:
            return name
    return None


__all__ = [
    "IMAGE_FORMATS",
    "decode_reply",
    "invalid_response",
    "missing_argument",
    "sniff_image",
]
