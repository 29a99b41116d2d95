"""
Tests for the OpenAI completion client wrapper.

The AsyncOpenAI client is replaced by a stub whose chat.completions.create
is an AsyncMock, so these never hit the API.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from app.config import Settings
from app.services.completion import CompletionClient
from app.services.errors import UpstreamError, UpstreamQuotaExhausted

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _response(content="RESPONSE: hi", total_tokens=321):
    usage = SimpleNamespace(total_tokens=total_tokens) if total_tokens is not None else None
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
    )


def _client(create: AsyncMock) -> CompletionClient:
    stub = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return CompletionClient(stub, model="gpt-4o-mini", default_token_usage=1200)


@pytest.mark.asyncio
async def test_complete_sends_persona_and_prompt():
    create = AsyncMock(return_value=_response())
    client = _client(create)

    completion = await client.complete("persona", "prompt", max_tokens=1500, temperature=0.7)

    assert completion.text == "RESPONSE: hi"
    assert completion.token_usage == 321
    create.assert_awaited_once_with(
        model="gpt-4o-mini",
        messages=[
            {"role": "system", "content": "persona"},
            {"role": "user", "content": "prompt"},
        ],
        max_tokens=1500,
        temperature=0.7,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("total_tokens", [None, 0])
async def test_missing_usage_defaults_to_1200(total_tokens):
    client = _client(AsyncMock(return_value=_response(total_tokens=total_tokens)))

    completion = await client.complete("p", "u", max_tokens=10, temperature=0.7)
    assert completion.token_usage == 1200


@pytest.mark.asyncio
async def test_empty_content_becomes_empty_string():
    client = _client(AsyncMock(return_value=_response(content=None)))

    completion = await client.complete("p", "u", max_tokens=10, temperature=0.7)
    assert completion.text == ""


@pytest.mark.asyncio
async def test_no_choices_becomes_empty_string():
    response = SimpleNamespace(choices=[], usage=SimpleNamespace(total_tokens=5))
    client = _client(AsyncMock(return_value=response))

    completion = await client.complete("p", "u", max_tokens=10, temperature=0.7)
    assert completion.text == ""
    assert completion.token_usage == 5


@pytest.mark.asyncio
async def test_insufficient_quota_maps_to_quota_exhausted():
    error = openai.RateLimitError(
        "You exceeded your current quota",
        response=httpx.Response(429, request=httpx.Request("POST", OPENAI_URL)),
        body={"code": "insufficient_quota", "message": "You exceeded your current quota"},
    )
    client = _client(AsyncMock(side_effect=error))

    with pytest.raises(UpstreamQuotaExhausted) as exc_info:
        await client.complete("p", "u", max_tokens=10, temperature=0.7)

    assert exc_info.value.status_code == 500
    assert "billing" in exc_info.value.message


@pytest.mark.asyncio
async def test_plain_rate_limit_is_an_upstream_error():
    error = openai.RateLimitError(
        "Rate limit reached",
        response=httpx.Response(429, request=httpx.Request("POST", OPENAI_URL)),
        body={"code": "rate_limit_exceeded", "message": "Rate limit reached"},
    )
    client = _client(AsyncMock(side_effect=error))

    with pytest.raises(UpstreamError) as exc_info:
        await client.complete("p", "u", max_tokens=10, temperature=0.7)

    assert "Rate limit reached" in exc_info.value.message


@pytest.mark.asyncio
async def test_connection_error_is_an_upstream_error():
    error = openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
    client = _client(AsyncMock(side_effect=error))

    with pytest.raises(UpstreamError):
        await client.complete("p", "u", max_tokens=10, temperature=0.7)


def test_from_settings_disables_sdk_retries():
    settings = Settings(_env_file=None, openai_api_key="sk-test", openai_model="gpt-4o")

    client = CompletionClient.from_settings(settings)

    assert client.model == "gpt-4o"
    assert client.default_token_usage == 1200
    assert client.client.max_retries == 0
