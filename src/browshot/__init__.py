"""Browshot Python client."""

from ._version import __version__
from .client import BrowshotClient
from .config import ClientConfig
from .models import ShotThumbnail, SimpleFileResult, SimpleResult

__all__ = [
    "BrowshotClient",
    "ClientConfig",
    "ShotThumbnail",
    "SimpleFileResult",
    "SimpleResult",
    "__version__",
]
