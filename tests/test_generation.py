from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from carenote.core.config import Settings
from carenote.generation.base import IncidentDetails, StatementDetails, TextGenerationError
from carenote.generation.client import ChatCompletionGenerator
from carenote.generation.prompts import (
    general_statement_messages,
    incident_report_messages,
    language_name,
    translation_messages,
)


def make_details(**overrides) -> IncidentDetails:
    values = dict(
        cna_name="Jordan Lee",
        shift_time="7am-3pm",
        floor="2",
        supervisor_on_duty="Pat Smith",
        patient_name="Ann Doe",
        patient_room="214B",
        incident_time="10:15",
        incident_nature="Fall",
        incident_description="Resident found seated on the floor beside the bed.",
        patient_able_to_state="yes",
        patient_statement="I slipped reaching for my glasses.",
        cna_actions="Called the nurse and stayed with the resident.",
        supervisor_notified="yes",
    )
    values.update(overrides)
    return IncidentDetails(**values)


def make_settings(**overrides) -> Settings:
    return Settings(
        openai_api_key="sk-test",
        openai_base_url="https://llm.example/v1/",
        master_key="k",
        **overrides,
    )


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_incident_prompt_includes_statement_only_when_patient_could_state():
    with_statement = incident_report_messages(make_details())[1]["content"]
    without = incident_report_messages(make_details(patient_able_to_state="no"))[1]["content"]

    assert "Patient's statement: I slipped reaching for my glasses." in with_statement
    assert "Patient's statement" not in without
    assert "Patient Room: 214B" in without


def test_translation_prompt_maps_language_codes():
    assert language_name("ht") == "Haitian Kreyol"
    assert language_name("TL") == "Tagalog"
    assert language_name("de") == "de"
    messages = translation_messages("Report body", "es")
    assert "into Spanish" in messages[0]["content"]
    assert messages[1] == {"role": "user", "content": "Report body"}


def test_general_statement_prompt_lists_resident():
    messages = general_statement_messages(StatementDetails("Ann Doe", "214B", "she ate half her lunch"))
    assert "Resident Name: Ann Doe" in messages[1]["content"]
    assert "Room Number: 214B" in messages[1]["content"]


def test_generator_posts_chat_completion_and_strips_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion("  INCIDENT REPORT\n...  "))

    generator = ChatCompletionGenerator(make_settings(), transport=httpx.MockTransport(handler))

    text = asyncio.run(generator.generate_incident_report(make_details()))

    assert text == "INCIDENT REPORT\n..."
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o"
    assert seen["body"]["max_tokens"] == 1000
    assert seen["body"]["messages"][0]["role"] == "system"


def test_generator_uses_translation_token_cap():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=completion("Rapport"))

    generator = ChatCompletionGenerator(
        make_settings(translation_max_tokens=1234), transport=httpx.MockTransport(handler)
    )

    assert asyncio.run(generator.translate_report("Report", "fr")) == "Rapport"
    assert bodies[0]["max_tokens"] == 1234


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json=completion("   ")),
        httpx.Response(200, content=b"not json"),
    ],
)
def test_generator_wraps_failures(response):
    generator = ChatCompletionGenerator(
        make_settings(), transport=httpx.MockTransport(lambda request: response)
    )

    with pytest.raises(TextGenerationError):
        asyncio.run(generator.process_general_statement(StatementDetails("Ann", "1", "text")))


def test_generator_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    generator = ChatCompletionGenerator(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(TextGenerationError):
        asyncio.run(generator.translate_report("Report", "es"))
