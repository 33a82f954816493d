"""Configuration objects for the Browshot Python client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict

from ._version import __version__

DEFAULT_BASE_URL = "https://api.browshot.com/api/v1"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    debug: bool = False
    max_retries: int = 3
    timeout: float = 60.0
    max_redirects: int = 32
    verify: bool = True
    user_agent: str = f"browshot-python/{__version__}"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be a non-negative integer")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        api_key = os.environ.get("BROWSHOT_API_KEY")
        if not api_key:
            raise ValueError("Browshot API key required: set BROWSHOT_API_KEY")

        return cls(
            api_key=api_key,
            base_url=os.environ.get("BROWSHOT_BASE_URL", DEFAULT_BASE_URL),
            debug=os.environ.get("BROWSHOT_DEBUG", "false").strip().lower() in _TRUTHY,
            max_retries=int(os.environ.get("BROWSHOT_RETRY", "3")),
            timeout=float(os.environ.get("BROWSHOT_TIMEOUT", "60")),
            verify=os.environ.get("BROWSHOT_VERIFY_SSL", "true").strip().lower() in _TRUTHY,
        )


__all__ = ["ClientConfig", "DEFAULT_BASE_URL"]
