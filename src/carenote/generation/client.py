"""Chat completion client for the OpenAI compatible generation API."""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from ..core.config import Settings
from ..core.http import get_generation_client
from .base import BaseTextGenerator, IncidentDetails, StatementDetails, TextGenerationError
from .prompts import Message, general_statement_messages, incident_report_messages, translation_messages

logger = logging.getLogger("carenote.generation")


class ChatCompletionGenerator(BaseTextGenerator):
    """Generates documentation text through ``POST /chat/completions``."""

    def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._settings = settings
        self._transport = transport

    async def _complete(self, messages: List[Message], *, max_tokens: int) -> str:
        payload = {"model": self._settings.openai_model, "messages": messages, "max_tokens": max_tokens}
        async with get_generation_client(self._settings, transport=self._transport) as client:
            try:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TextGenerationError(
                    f"Generation API returned {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise TextGenerationError(f"Generation API request failed: {exc}") from exc
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise TextGenerationError("Generation API returned an unexpected payload") from exc
        if not content or not content.strip():
            raise TextGenerationError("Generation API returned an empty completion")
        logger.debug("Completion of %s characters from %s", len(content), self._settings.openai_model)
        return content.strip()

    async def generate_incident_report(self, details: IncidentDetails) -> str:
        return await self._complete(incident_report_messages(details), max_tokens=self._settings.report_max_tokens)

    async def translate_report(self, report_text: str, target_language: str) -> str:
        return await self._complete(
            translation_messages(report_text, target_language),
            max_tokens=self._settings.translation_max_tokens,
        )

    async def process_general_statement(self, details: StatementDetails) -> str:
        return await self._complete(
            general_statement_messages(details), max_tokens=self._settings.statement_max_tokens
        )
