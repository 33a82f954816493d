from __future__ import annotations

import struct
import zlib
from io import BytesIO
from typing import Callable, List

import httpx
import pytest
from PIL import Image

from browshot.client import BrowshotClient
from browshot.config import ClientConfig


def image_bytes(fmt: str) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (4, 4), "white").save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def png() -> bytes:
    return image_bytes("PNG")


@pytest.fixture()
def jpeg() -> bytes:
    return image_bytes("JPEG")


@pytest.fixture()
def gif() -> bytes:
    return image_bytes("GIF")


def png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture()
def tall_png() -> bytes:
    """PNG header for a 1280x200000 capture, past Pillow's decompression bomb limit."""
    header = struct.pack(">IIBBBBB", 1280, 200000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + png_chunk(b"IHDR", header)
        + png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + png_chunk(b"IEND", b"")
    )


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(api_key="test-key", base_url="https://api.example.com/api/v1")


@pytest.fixture()
async def make_client(config: ClientConfig):
    clients: List[BrowshotClient] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], **overrides) -> BrowshotClient:
        cfg = ClientConfig(**{**config.__dict__, **overrides})
        client = BrowshotClient(cfg, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
