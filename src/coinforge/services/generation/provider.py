"""Generation provider: text completion and image generation endpoints.

The pipeline only depends on the abstract ``GenerationProvider``; the OpenAI
implementation wraps the ``openai`` SDK and converts SDK/transport failures
into ``ProviderError``.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI, OpenAIError

from coinforge.errors.exceptions import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedImage:
    data: bytes
    media_type: str = "image/png"

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"


class GenerationProvider(ABC):
    """Text and image generation capability used by the pipeline."""

    name: str = "unknown"

    @abstractmethod
    async def generate_document(self, system_prompt: str, user_prompt: str) -> str:
        """Return the generated document body as plain text."""
        ...

    @abstractmethod
    async def generate_image(self, prompt: str, size: str) -> GeneratedImage:
        """Return the generated image bytes for *prompt* at *size* (e.g. ``256x256``)."""
        ...


class OpenAIGenerationProvider(GenerationProvider):
    """Chat completions for the document, the images endpoint for slot assets."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        text_model: str = "gpt-4o",
        max_tokens: int = 3500,
        temperature: float = 0.9,
        image_model: str = "dall-e-2",
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.text_model = text_model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.image_model = image_model
        self._timeout = timeout
        self._http_client = http_client

        if client is not None:
            self._client = client
        elif api_key:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        else:
            self._client = None
            logger.warning("No OpenAI API key configured; generation jobs will fail")

    def _require_client(self) -> AsyncOpenAI:
        if self._client is None:
            raise ProviderError("OpenAI API key is not configured")
        return self._client

    async def generate_document(self, system_prompt: str, user_prompt: str) -> str:
        client = self._require_client()
        try:
            response = await client.chat.completions.create(
                model=self.text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as exc:
            raise ProviderError(f"Text generation failed: {exc}") from exc

        if not response.choices:
            raise ProviderError("Text generation returned no choices")
        content = response.choices[0].message.content or ""
        if response.usage:
            logger.info(
                "Document generated (model=%s, prompt_tokens=%s, completion_tokens=%s)",
                self.text_model,
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return content.strip()

    async def generate_image(self, prompt: str, size: str) -> GeneratedImage:
        client = self._require_client()
        try:
            response = await client.images.generate(
                model=self.image_model,
                prompt=prompt,
                n=1,
                size=size,
            )
        except OpenAIError as exc:
            raise ProviderError(f"Image generation failed: {exc}") from exc

        if not response.data:
            raise ProviderError("Image generation returned no data")
        image = response.data[0]

        if image.b64_json:
            return GeneratedImage(data=base64.b64decode(image.b64_json))
        if image.url:
            return await self._fetch_asset(image.url)
        raise ProviderError("Image generation returned neither a URL nor inline data")

    async def _fetch_asset(self, url: str) -> GeneratedImage:
        try:
            if self._http_client is not None:
                resp = await self._http_client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise ProviderError(f"Could not fetch generated image: {exc}") from exc

        media_type = resp.headers.get("content-type", "image/png").split(";")[0].strip()
        if not media_type.startswith("image/"):
            media_type = "image/png"
        return GeneratedImage(data=resp.content, media_type=media_type)
