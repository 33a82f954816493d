"""Async Python client for the Browshot screenshot API."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import httpx

from ._version import __version__
from .config import DEFAULT_BASE_URL, ClientConfig
from .models import ShotThumbnail, SimpleFileResult, SimpleResult
from .replies import IMAGE_FORMATS, decode_reply, missing_argument, sniff_image
from .urls import build_url

logger = logging.getLogger("browshot.client")

Args = Optional[Mapping[str, Any]]


def _merge(args: Args, **extra: Any) -> Dict[str, Any]:
    outgoing = dict(args or {})
    outgoing.update(extra)
    return outgoing


class BrowshotClient:
    """Client for https://browshot.com/api/documentation.

    Method names follow the API paths: ``screenshot/create`` is
    :meth:`screenshot_create`, ``instance/list`` is :meth:`instance_list`, and
    extra keyword arguments of the API are passed through ``args`` unchanged.
    """

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            timeout=config.timeout,
            follow_redirects=True,
            max_redirects=config.max_redirects,
            verify=config.verify,
            headers=self._headers(),
            transport=transport,
        )

    @classmethod
    def from_key(
        cls,
        key: str,
        debug: bool = False,
        base: str = DEFAULT_BASE_URL,
        retry: int = 3,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BrowshotClient":
        config = ClientConfig(api_key=key, debug=debug, base_url=base, max_retries=retry)
        return cls(config, transport=transport)

    async def __aenter__(self) -> "BrowshotClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def set_key(self, key: str) -> None:
        self._config = replace(self._config, api_key=key)

    def set_debug(self, debug: bool = False) -> None:
        self._config = replace(self._config, debug=debug)

    def set_base(self, base: str = DEFAULT_BASE_URL) -> None:
        self._config = replace(self._config, base_url=base)

    def set_retry(self, retry: int = 3) -> None:
        self._config = replace(self._config, max_retries=retry)

    def api_version(self) -> str:
        """API version handled by this library, as ``major.minor``."""
        return ".".join(__version__.split(".")[:2])

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self._config.user_agent}
        headers.update(self._config.headers)
        return headers

    def _info(self, msg: str, *args: Any) -> None:
        if self._config.debug:
            logger.info(msg, *args)

    def _missing(self, message: str) -> Dict[str, Any]:
        logger.error("%s", message)
        return missing_argument(message)

    # Transport and retry

    async def return_string(self, action: str, args: Args = None) -> str:
        """GET ``action`` and return the body text.

        Transport errors and HTTP errors are retried immediately while the
        budget lasts. An empty string means every attempt failed.
        """
        config = self._config
        attempt = 0
        while attempt <= config.max_retries:
            url = build_url(config, action, args)
            try:
                response = await self._client.get(url)
            except httpx.TransportError as exc:
                attempt += 1
                logger.error("%s - Retry: %s", exc, attempt)
                continue

            attempt += 1
            if response.status_code >= 400 and attempt <= config.max_retries:
                logger.error("HTTP %s - Retry: %s", response.status_code, attempt)
                continue
            return response.text

        logger.error("Too many retries: %s - %s", attempt, (args or {}).get("url", ""))
        return ""

    async def return_post_string(self, action: str, args: Args = None) -> str:
        """POST the local file named by ``args['file']`` as multipart data.

        The file is reopened for every attempt. A file that cannot be opened
        ends the call with an empty string.
        """
        config = self._config
        outgoing = dict(args or {})
        path = Path(outgoing.pop("file", ""))
        attempt = 0
        while attempt <= config.max_retries:
            url = build_url(config, action, outgoing)
            try:
                handle = path.open("rb")
            except OSError as exc:
                logger.error("Cannot read %s: %s", path, exc)
                return ""

            with handle:
                try:
                    response = await self._client.post(url, files={"file": (path.name, handle)})
                except httpx.TransportError as exc:
                    attempt += 1
                    logger.error("%s - Retry: %s", exc, attempt)
                    continue

            attempt += 1
            if response.status_code >= 400 and attempt <= config.max_retries:
                logger.error("HTTP %s - Retry: %s", response.status_code, attempt)
                continue
            return response.text

        logger.error("Too many retries: %s - %s", attempt, path)
        return ""

    async def return_reply(self, action: str, args: Args = None) -> Any:
        return decode_reply(await self.return_string(action, args))

    async def return_post_reply(self, action: str, args: Args = None) -> Any:
        return decode_reply(await self.return_post_string(action, args))

    async def _fetch_image(self, label: str, args: Dict[str, Any]) -> bytes:
        config = self._config
        for attempt in range(1, config.max_retries + 2):
            self._info("%s attempt %s", label, attempt)
            url = build_url(config, "screenshot/thumbnail", args)
            try:
                response = await self._client.get(url)
            except httpx.TransportError as exc:
                logger.error("%s - %s", exc, attempt)
                continue

            if response.status_code != 200:
                logger.error("Image cannot be retrieved - %s", attempt)
                continue

            image_format = sniff_image(response.content)
            self._info("image format %s", image_format)
            if image_format not in IMAGE_FORMATS:
                logger.error("Image cannot be retrieved: incorrect format - %s - %s", attempt, image_format)
                continue

            self._info("%s successful", label)
            return response.content

        return b""

    # Simple API

    async def simple(self, args: Args = None) -> SimpleResult:
        """Create and fetch a screenshot in one call. The status code is returned as-is."""
        config = self._config
        for attempt in range(1, config.max_retries + 2):
            url = build_url(config, "simple", args)
            try:
                response = await self._client.get(url)
            except httpx.TransportError as exc:
                logger.error("%s - Retry: %s", exc, attempt)
                continue
            return SimpleResult(code=response.status_code, data=response.content)

        return SimpleResult(code=500)

    async def simple_file(self, file: str, args: Args = None) -> SimpleFileResult:
        """Like :meth:`simple`, saving the image to ``file``.

        ``file`` in the result is empty if nothing was written.
        """
        result = await self.simple(args)
        if result.code != 200:
            logger.error("Screenshot failed with status %s", result.code)
            return SimpleFileResult(code=result.code)
        if not result.data:
            logger.error("No image returned")
            return SimpleFileResult(code=result.code)

        try:
            Path(file).write_bytes(result.data)
        except OSError as exc:
            logger.error("%s", exc)
            return SimpleFileResult(code=result.code)
        return SimpleFileResult(code=result.code, file=file)

    # Instances and browsers

    async def instance_list(self) -> Any:
        return await self.return_reply("instance/list")

    async def instance_info(self, instance_id: int = 0) -> Any:
        if not instance_id:
            return self._missing("Missing instance ID")
        return await self.return_reply("instance/info", {"id": instance_id})

    async def browser_list(self) -> Any:
        return await self.return_reply("browser/list")

    async def browser_info(self, browser_id: int = 0) -> Any:
        if not browser_id:
            return self._missing("Missing browser ID")
        return await self.return_reply("browser/info", {"id": browser_id})

    # Screenshots

    async def screenshot_create(self, args: Args = None) -> Any:
        """Request a screenshot. ``args`` must hold ``url`` and ``instance_id``.

        Screenshots are cached for 24 hours by default; pass ``cache`` to change it.
        """
        args = dict(args or {})
        if "url" not in args:
            return self._missing("Missing URL")
        if "instance_id" not in args:
            return self._missing("Missing instance ID")
        return await self.return_reply("screenshot/create", args)

    async def screenshot_info(self, screenshot_id: int = 0, args: Args = None) -> Any:
        if not screenshot_id:
            return self._missing("Missing screenshot ID")
        return await self.return_reply("screenshot/info", _merge(args, id=screenshot_id))

    async def screenshot_list(self, args: Args = None) -> Any:
        return await self.return_reply("screenshot/list", args)

    async def screenshot_search(self, url: str = "", args: Args = None) -> Any:
        if not url:
            return self._missing("Missing screenshot URL")
        return await self.return_reply("screenshot/search", _merge(args, url=url))

    async def screenshot_host(self, screenshot_id: int = 0, args: Args = None) -> Any:
        if not screenshot_id:
            return self._missing("Missing screenshot ID")
        return await self.return_reply("screenshot/host", _merge(args, id=screenshot_id))

    async def screenshot_thumbnail(self, screenshot_id: int = 0, args: Args = None) -> bytes:
        """Fetch the screenshot image or a thumbnail of it.

        Only PNG or JPEG content is accepted; anything else is retried.
        Returns empty bytes on failure.
        """
        if not screenshot_id:
            logger.error("Missing screenshot ID")
            return b""
        return await self._fetch_image("screenshot_thumbnail", _merge(args, id=screenshot_id))

    async def shot_thumbnail(self, screenshot_id: int = 0, shot: int = 1, args: Args = None) -> ShotThumbnail:
        if not screenshot_id:
            logger.error("Missing screenshot ID")
            return ShotThumbnail(shot=shot)
        if shot < 0:
            logger.error("Invalid shot number: %s", shot)
            return ShotThumbnail(shot=shot)
        data = await self._fetch_image("shot_thumbnail", _merge(args, id=screenshot_id, shot=shot))
        return ShotThumbnail(data=data, shot=shot)

    async def screenshot_thumbnail_file(self, screenshot_id: int = 0, file: str = "", args: Args = None) -> str:
        """Fetch a thumbnail and write it to ``file``. Returns ``file``, or "" on failure."""
        if not screenshot_id:
            logger.error("Missing screenshot ID")
            return ""
        if not file:
            logger.error("Missing file")
            return ""

        data = await self.screenshot_thumbnail(screenshot_id, args)
        if not data:
            logger.error("No screenshot retrieved")
            return ""

        try:
            Path(file).write_bytes(data)
        except OSError as exc:
            logger.error("%s", exc)
            return ""
        return file

    async def screenshot_share(self, screenshot_id: int = 0, args: Args = None) -> Any:
        if not screenshot_id:
            return self._missing("Missing screenshot ID")
        return await self.return_reply("screenshot/share", _merge(args, id=screenshot_id))

    async def screenshot_delete(self, screenshot_id: int = 0, args: Args = None) -> Any:
        if not screenshot_id:
            return self._missing("Missing screenshot ID")
        return await self.return_reply("screenshot/delete", _merge(args, id=screenshot_id))

    async def screenshot_html(self, screenshot_id: int = 0) -> str:
        """HTML of the rendered page."""
        if not screenshot_id:
            logger.error("Missing screenshot ID")
            return ""
        return await self.return_string("screenshot/html", {"id": screenshot_id})

    async def screenshot_multiple(self, args: Args = None) -> Any:
        return await self.return_reply("screenshot/multiple", args)

    # Batches and crawls

    async def batch_create(self, file: str = "", instance_id: int = 0, args: Args = None) -> Any:
        """Request screenshots for every URL listed in the text file ``file``."""
        if not file:
            return self._missing("Missing file")
        if not instance_id:
            return self._missing("Missing instance ID")
        return await self.return_post_reply("batch/create", _merge(args, instance_id=instance_id, file=file))

    async def batch_info(self, batch_id: int = 0, args: Args = None) -> Any:
        if not batch_id:
            return self._missing("Missing batch ID")
        return await self.return_reply("batch/info", _merge(args, id=batch_id))

    async def crawl_create(self, domain: str = "", url: str = "", instance_id: int = 0, args: Args = None) -> Any:
        """Crawl ``domain`` starting from ``url`` and screenshot every page found."""
        if not domain:
            return self._missing("Missing domain")
        if not url:
            return self._missing("Missing url")
        if not instance_id:
            return self._missing("Missing instance ID")
        return await self.return_reply(
            "crawl/create",
            _merge(args, instance_id=instance_id, domain=domain, url=url),
        )

    async def crawl_info(self, crawl_id: int = 0, args: Args = None) -> Any:
        if not crawl_id:
            return self._missing("Missing crawl ID")
        return await self.return_reply("crawl/info", _merge(args, id=crawl_id))

    # Account

    async def account_info(self, args: Args = None) -> Any:
        return await self.return_reply("account/info", args)

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["BrowshotClient"]
