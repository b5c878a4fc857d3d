"""LLM services for Ollama and Anthropic integration."""

import logging
from typing import Protocol

import anthropic
import httpx

from src.config import get_settings

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into text."""

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str: ...


class LLMService:
    """Service for interacting with Ollama LLM."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.base_url = self.settings.ollama_base_url
        self.model = self.settings.llm_model
        self.timeout = self.settings.generator_timeout_seconds

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a response from the LLM."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/api/chat",
                json={
                    "model": self.model,
                    "messages": messages,
                    "stream": False,
                    "options": {
                        "temperature": temperature,
                        "num_predict": max_tokens,
                    },
                },
            )
            response.raise_for_status()
            data = response.json()
            return data["message"]["content"]


class AnthropicLLMService:
    """Service for generating text with Claude."""

    def __init__(self) -> None:
        settings = get_settings()
        self.api_key = settings.anthropic_api_key
        self.model = settings.anthropic_model
        self.timeout = settings.generator_timeout_seconds
        self._configured = bool(self.api_key)

    @property
    def is_configured(self) -> bool:
        """Check if the Anthropic API is configured."""
        return self._configured

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a response from Claude."""
        if not self.is_configured:
            raise ValueError("Anthropic API not configured")

        client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt

        message = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        return "".join(block.text for block in message.content if block.type == "text")


def get_llm_service() -> TextGenerator:
    """Get the LLM service for the configured provider."""
    settings = get_settings()
    if settings.recipe_provider == "anthropic":
        return AnthropicLLMService()
    return LLMService()
