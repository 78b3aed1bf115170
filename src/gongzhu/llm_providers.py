"""
Text-completion providers used by LLM-backed seats.

Each provider exposes ``async generate(prompt, options) -> str`` and raises
``ProviderError`` for anything that is not a usable reply: missing API key,
transport failure, non-2xx status, or an unexpected payload shape.

- anthropic:  official ``anthropic`` SDK (Messages API).
- google:     Gemini ``generateContent`` over httpx.
- openrouter: OpenAI-compatible chat completions over httpx.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import anthropic
import httpx

from .errors import ConfigError, ProviderError

logger = logging.getLogger(__name__)

ANTHROPIC = "anthropic"
GOOGLE = "google"
OPENROUTER = "openrouter"
PROVIDERS = (ANTHROPIC, GOOGLE, OPENROUTER)


@dataclass(frozen=True)
class GenerationOptions:
    max_tokens: int = 300
    temperature: float = 0.3
    timeout: float = 8.0


class TextCompletionProvider(Protocol):
    name: str

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Return the model's text reply for ``prompt``."""


class AnthropicProvider:
    """Claude via the Messages API."""

    name = ANTHROPIC
    default_model = "claude-3-5-haiku-20241022"
    api_key_env = "ANTHROPIC_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.api_key = api_key or os.environ.get(self.api_key_env)
        self.model = model or self.default_model
        self._client = client

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.api_key:
                raise ProviderError(self.name, "API key not configured")
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                messages=[{"role": "user", "content": prompt}],
                timeout=options.timeout,
            )
        except anthropic.APIError as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc
        texts = [getattr(block, "text", "") for block in response.content or []]
        text = "".join(t for t in texts if t).strip()
        if not text:
            raise ProviderError(self.name, "empty reply")
        return text


class _HTTPProvider:
    """Shared httpx plumbing for JSON-over-HTTP providers."""

    name = ""
    default_model = ""
    api_key_env = ""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key or os.environ.get(self.api_key_env)
        self.model = model or self.default_model
        self._client = client

    def _request(self, prompt: str, options: GenerationOptions) -> tuple[str, dict[str, str], dict[str, Any]]:
        raise NotImplementedError

    def _extract(self, data: Any) -> str:
        raise NotImplementedError

    async def _post(self, client: httpx.AsyncClient, prompt: str, options: GenerationOptions) -> str:
        url, headers, body = self._request(prompt, options)
        response = await client.post(url, headers=headers, json=body, timeout=options.timeout)
        response.raise_for_status()
        try:
            text = self._extract(response.json())
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, f"unexpected payload: {exc!r}") from exc
        if not isinstance(text, str) or not text.strip():
            raise ProviderError(self.name, "empty reply")
        return text.strip()

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")
        try:
            if self._client is not None:
                return await self._post(self._client, prompt, options)
            async with httpx.AsyncClient() as client:
                return await self._post(client, prompt, options)
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc


class GoogleProvider(_HTTPProvider):
    """Gemini ``generateContent``."""

    name = GOOGLE
    default_model = "gemini-1.5-flash"
    api_key_env = "GOOGLE_API_KEY"
    base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    def _request(self, prompt, options):
        url = f"{self.base_url}/{self.model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key or ""}
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": options.max_tokens,
                "temperature": options.temperature,
            },
        }
        return url, headers, body

    def _extract(self, data):
        return data["candidates"][0]["content"]["parts"][0]["text"]


class OpenRouterProvider(_HTTPProvider):
    """OpenRouter chat completions (many upstream models)."""

    name = OPENROUTER
    default_model = "anthropic/claude-3-haiku"
    api_key_env = "OPENROUTER_API_KEY"
    base_url = "https://openrouter.ai/api/v1/chat/completions"

    def _request(self, prompt, options):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": "Gongzhu Card Game",
        }
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        return self.base_url, headers, body

    def _extract(self, data):
        return data["choices"][0]["message"]["content"]


def create_provider(
    name: str,
    api_key: str | None = None,
    model: str | None = None,
) -> TextCompletionProvider:
    """Factory: ``anthropic`` | ``google`` | ``openrouter``."""
    key = name.lower()
    if key == ANTHROPIC:
        return AnthropicProvider(api_key=api_key, model=model)
    if key == GOOGLE:
        return GoogleProvider(api_key=api_key, model=model)
    if key == OPENROUTER:
        return OpenRouterProvider(api_key=api_key, model=model)
    raise ConfigError(f"Unknown LLM provider type: {name!r}; expected one of {PROVIDERS}")


__all__ = [
    "GenerationOptions",
    "TextCompletionProvider",
    "AnthropicProvider",
    "GoogleProvider",
    "OpenRouterProvider",
    "create_provider",
    "PROVIDERS",
]
