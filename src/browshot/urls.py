"""Request URL construction for the Browshot API."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

from .config import ClientConfig

logger = logging.getLogger("browshot.urls")

# Same unreserved set as JavaScript's encodeURIComponent.
_SAFE = "-_.!~*'()"

LIST_PARAMETERS = (("urls", "url"), ("instances", "instance_id"))


def encode(value: Any) -> str:
    if isinstance(value, bool):
        value = int(value)
    return quote(str(value), safe=_SAFE)


def build_url(config: ClientConfig, action: str, args: Optional[Mapping[str, Any]] = None) -> str:
    """Build the full endpoint URL for ``action``.

    The API key is always sent as ``key``. List-valued ``urls`` and
    ``instances`` are expanded into one ``url`` / ``instance_id`` parameter
    per element, in order. Every other entry becomes a single ``key=value``
    pair in mapping order; ``None`` values are left out. ``args`` is not
    modified.

    Booleans are sent as ``1``/``0``, not the ``true``/``false`` literals of the
    Node.js client.
    """
    remaining = dict(args or {})
    url = f"{config.base_url.rstrip('/')}/{action or ''}?key={encode(config.api_key)}"

    for list_key, param in LIST_PARAMETERS:
        if list_key not in remaining:
            continue
        for item in remaining.pop(list_key) or ():
            url += f"&{param}={encode(item)}"

    for key, value in remaining.items():
        if value is None:
            continue
        url += f"&{encode(key)}={encode(value)}"

    if config.debug:
        logger.info("%s", url)
    return url


__all__ = ["build_url", "encode", "LIST_PARAMETERS"]
