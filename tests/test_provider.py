"""Tests for the OpenAI-backed generation provider."""

import base64
import json

import httpx
import pytest
from openai import AsyncOpenAI

from coinforge.errors.exceptions import ProviderError
from coinforge.services.generation.provider import GeneratedImage, OpenAIGenerationProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\nprovider-test"


def _chat_completion(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": "gpt-4o",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 34, "total_tokens": 46},
    }


def _provider(handler, **kwargs) -> OpenAIGenerationProvider:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = AsyncOpenAI(
        api_key="sk-test", base_url="https://openai.test/v1", max_retries=0, http_client=http_client
    )
    return OpenAIGenerationProvider(client=client, http_client=http_client, **kwargs)


def test_data_uri():
    image = GeneratedImage(PNG_BYTES)
    assert image.to_data_uri() == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


@pytest.mark.asyncio
async def test_generate_document_sends_prompts():
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_chat_completion("  <html>doc</html>  "))

    provider = _provider(handler, text_model="gpt-4o", max_tokens=3500, temperature=0.9)
    document = await provider.generate_document("system text", "user text")

    assert document == "<html>doc</html>"
    assert captured["path"] == "/v1/chat/completions"
    assert captured["body"]["model"] == "gpt-4o"
    assert captured["body"]["max_tokens"] == 3500
    assert captured["body"]["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]


@pytest.mark.asyncio
async def test_generate_document_api_error_becomes_provider_error():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "rate limited", "type": "rate_limit"}})

    with pytest.raises(ProviderError):
        await _provider(handler).generate_document("s", "u")


@pytest.mark.asyncio
async def test_generate_image_inline_payload():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "created": 1_700_000_000,
            "data": [{"b64_json": base64.b64encode(PNG_BYTES).decode()}],
        })

    image = await _provider(handler, image_model="dall-e-2").generate_image("a logo", "256x256")

    assert image.data == PNG_BYTES
    assert captured["body"]["size"] == "256x256"
    assert captured["body"]["model"] == "dall-e-2"


@pytest.mark.asyncio
async def test_generate_image_fetches_url_payload():
    def handler(request):
        if request.url.host == "cdn.test":
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
        return httpx.Response(200, json={
            "created": 1_700_000_000,
            "data": [{"url": "https://cdn.test/img/1.png"}],
        })

    image = await _provider(handler).generate_image("a logo", "256x256")

    assert image.data == PNG_BYTES
    assert image.media_type == "image/png"


@pytest.mark.asyncio
async def test_generate_image_fetch_failure():
    def handler(request):
        if request.url.host == "cdn.test":
            return httpx.Response(404)
        return httpx.Response(200, json={"created": 1, "data": [{"url": "https://cdn.test/gone.png"}]})

    with pytest.raises(ProviderError):
        await _provider(handler).generate_image("a logo", "256x256")


@pytest.mark.asyncio
async def test_missing_api_key_fails_calls():
    provider = OpenAIGenerationProvider(api_key=None)
    with pytest.raises(ProviderError):
        await provider.generate_document("s", "u")
    with pytest.raises(ProviderError):
        await provider.generate_image("p", "256x256")
