"""Telemetry event collection for CareNote."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List, Optional

import httpx

from ..core.config import get_settings

logger = logging.getLogger("carenote.telemetry")


@dataclass(slots=True)
class TelemetryEvent:
    """Represents a single telemetry data point."""

    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=lambda: time.time())


class TelemetryClient:
    """Keeps the most recent events and forwards them when an endpoint is configured."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        *,
        history: int = 256,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint
        self._transport = transport
        self._recent: Deque[TelemetryEvent] = deque(maxlen=history)
        self._outbox: Optional[asyncio.Queue[TelemetryEvent]] = None
        self._sender_task: Optional[asyncio.Task[None]] = None

    async def start(self) -> None:
        if self._endpoint and self._sender_task is None:
            self._outbox = asyncio.Queue()
            self._sender_task = asyncio.create_task(self._forward_events())

    async def stop(self) -> None:
        if self._sender_task:
            self._sender_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sender_task
            self._sender_task = None
            self._outbox = None

    async def record(self, event: TelemetryEvent) -> None:
        self._recent.append(event)
        if self._outbox is not None:
            await self._outbox.put(event)

    def recent(self, name: Optional[str] = None) -> List[TelemetryEvent]:
        return [event for event in self._recent if name is None or event.name == name]

    async def _forward_events(self) -> None:
        assert self._endpoint is not None and self._outbox is not None
        async with httpx.AsyncClient(transport=self._transport) as client:
            while True:
                event = await self._outbox.get()
                try:
                    await client.post(self._endpoint, json=asdict(event))
                except httpx.HTTPError as exc:
                    # Telemetry must never fail a request
                    logger.debug("Dropped telemetry event %s: %s", event.name, exc)


telemetry_client = TelemetryClient(get_settings().telemetry_endpoint)
