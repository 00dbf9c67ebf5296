"""HTTP utilities for calling the text generation service."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from .config import Settings


@asynccontextmanager
async def get_generation_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> AsyncIterator[httpx.AsyncClient]:
    headers = {"Content-Type": "application/json"}
    if settings.openai_api_key:
        headers["Authorization"] = f"Bearer {settings.openai_api_key}"
    async with httpx.AsyncClient(
        base_url=settings.openai_base_url.rstrip("/"),
        timeout=settings.generation_timeout_seconds,
        headers=headers,
        transport=transport,
    ) as client:
        yield client
