"""Pydantic models for the structured results of the convenience helpers."""

from __future__ import annotations

from pydantic import BaseModel


class SimpleResult(BaseModel):
    code: int
    data: bytes = b""


class SimpleFileResult(BaseModel):
    code: int
    file: str = ""


class ShotThumbnail(BaseModel):
    data: bytes = b""
    shot: int = 1


__all__ = ["ShotThumbnail", "SimpleFileResult", "SimpleResult"]
