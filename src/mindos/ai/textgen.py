"""
Text generation collaborator.

Used only to polish community submissions. Any failure surfaces as
ExternalServiceUnavailable; callers decide how to degrade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog

from mindos.errors import ExternalServiceUnavailable

logger = structlog.get_logger()

CURATOR_SYSTEM_PROMPT = (
    "You are the AI Mind OS content curator. Create tight, tactical, accurate content. "
    "Bold voice. Focus on actionable insights for AI-powered productivity and dangerous thinking."
)


class BaseTextGenerator(ABC):
    """Abstract base class for text generation providers."""

    @abstractmethod
    async def generate(self, prompt: str, system: str | None = None) -> str:
        """Return generated text for the prompt."""
        ...


class OpenAITextGenerator(BaseTextGenerator):
    """Generate text via the OpenAI chat completions API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        max_tokens: int = 800,
        temperature: float = 0.7,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, prompt: str, system: str | None = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": messages,
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("text_generation_failed", provider="openai", error=str(exc))
            msg = "Text generation service unavailable"
            raise ExternalServiceUnavailable(msg) from exc

        if not isinstance(content, str) or not content.strip():
            raise ExternalServiceUnavailable("Text generation returned no content")
        return content.strip()


class NullTextGenerator(BaseTextGenerator):
    """Used when no provider is configured; always unavailable."""

    async def generate(self, prompt: str, system: str | None = None) -> str:
        raise ExternalServiceUnavailable("Text generation is not configured")


async def polish_content(generator: BaseTextGenerator, title: str, content: str) -> tuple[str, bool]:
    """Polish a submission. Returns ``(text, polished)``; falls back to the original."""
    prompt = (
        f"TITLE: {title}\n\nCONTENT:\n{content}\n\n"
        "Polish this for AI Mind OS. Keep it dangerous and actionable. "
        "Maintain the core message but make it more compelling and structured."
    )
    try:
        polished = await generator.generate(prompt, system=CURATOR_SYSTEM_PROMPT)
    except ExternalServiceUnavailable:
        logger.info("content_polish_skipped", title=title)
        return content, False
    return polished, polished != content
