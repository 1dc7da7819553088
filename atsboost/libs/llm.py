"""
LLM providers for CV analysis.
Providers are registered by name; ``generate_json_with_fallback`` walks the
configured provider chain and returns the first usable JSON answer.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import httpx
import openai
from google import genai

from atsboost.config import settings
from atsboost.libs.exceptions import LLMServiceException
from atsboost.utils.util import format_exception_message

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first ``{...}`` block found in a model response."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise ValueError("No JSON object found in model response")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model response JSON is not an object")
    return data


class BaseLLM(ABC):
    """
    Provider-agnostic LLM client. Services call ``generate_text`` and
    ``generate_json``; subclasses only implement ``_generate_text``."""

    provider: str = "base"
    max_tokens: int = 2000
    temperature: float = 0.3

    @abstractmethod
    async def _generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        """Generate a full text response for a prompt."""
        raise NotImplementedError

    async def generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        return await self._generate_text(prompt, system_prompt)

    async def generate_json(self, prompt: str, system_prompt: str | None = None) -> dict[str, Any]:
        """Generate a response and parse it as a JSON object."""
        system = (system_prompt or "") + " Return your response as a valid JSON object."
        text = await self._generate_text(prompt, system.strip())
        return extract_json_object(text)

    @staticmethod
    def _messages(prompt: str, system_prompt: str | None) -> list[dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages


LLMServiceFactoryCallable = Callable[
    [], # input args
    BaseLLM # return type
]
_LLM_SERVICE_REGISTRY: dict[str, LLMServiceFactoryCallable] = {}


def register_llm(provider: str, factory: LLMServiceFactoryCallable) -> None:
    """Register an LLM provider without modifying the factory implementation."""
    key = provider.strip().lower()
    if not key:
        raise ValueError("LLM provider name cannot be empty")
    _LLM_SERVICE_REGISTRY[key] = factory


def available_llm_providers() -> list[str]:
    """Return registered LLM provider names."""
    return sorted(_LLM_SERVICE_REGISTRY.keys())


class OpenAILLM(BaseLLM):
    """OpenAI GPT service implementation"""

    provider = "openai"

    def __init__(self) -> None:
        self.api_key: str | None = settings.openai_api_key
        self.model: str = settings.openai_model

        if not self.api_key:
            raise ValueError("OpenAI API key not set")

        self.client: openai.AsyncOpenAI = openai.AsyncOpenAI(
            api_key=self.api_key,
            timeout=settings.llm_timeout_seconds,
        )

    async def _generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._messages(prompt, system_prompt),  # type: ignore[arg-type]
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        message = response.choices[0].message
        return message.content or ""


class XaiLLM(OpenAILLM):
    """xAI Grok through its OpenAI-compatible endpoint."""

    provider = "xai"

    def __init__(self) -> None:
        self.api_key: str | None = settings.xai_api_key
        self.model: str = settings.xai_model

        if not self.api_key:
            raise ValueError("xAI API key not set")

        self.client = openai.AsyncOpenAI(
            api_key=self.api_key,
            base_url=settings.xai_base_url,
            timeout=settings.llm_timeout_seconds,
        )


class AbacusLLM(BaseLLM):
    """Abacus AI completions over plain HTTP."""

    provider = "abacus"

    def __init__(self) -> None:
        self.api_key: str | None = settings.abacus_api_key
        self.base_url: str = settings.abacus_api_url.rstrip("/")
        self.model: str = settings.abacus_model

        if not self.api_key:
            raise ValueError("Abacus API key not set")

    async def _generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        payload = {
            "model": self.model,
            "messages": self._messages(prompt, system_prompt),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/llm/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=settings.llm_timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""


class GoogleLLM(BaseLLM):
    """Google Gemini LLM service implementation"""

    provider = "google"

    def __init__(self) -> None:
        self.api_key: str | None = settings.google_api_key
        self.model: str = settings.google_model

        if not self.api_key:
            raise ValueError("Google API key not set")

        self.client: genai.Client = genai.Client(api_key=self.api_key)

    async def _generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        contents = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
        )
        text = getattr(response, "text", None)
        return text or ""


class OllamaLLM(BaseLLM):
    """Ollama LLM service implementation"""

    provider = "ollama"

    def __init__(self) -> None:
        self.base_url: str = settings.ollama_url
        self.model: str = settings.ollama_model

    async def _generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if system_prompt:
            payload["system"] = system_prompt
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=settings.llm_timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
            return data.get("response", "")


class LLMServiceFactory:
    """Factory for creating LLM service instances using a provider registry."""

    @staticmethod
    def create(provider: str) -> BaseLLM:
        provider_key = provider.strip().lower()
        try:
            factory = _LLM_SERVICE_REGISTRY[provider_key]
        except KeyError as exc:
            supported = ", ".join(available_llm_providers()) or "none"
            raise ValueError(
                f"Unsupported LLM provider: {provider_key}. Supported: {supported}"
            ) from exc
        return factory()


register_llm("openai", OpenAILLM)
register_llm("xai", XaiLLM)
register_llm("abacus", AbacusLLM)
register_llm("google", GoogleLLM)
register_llm("ollama", OllamaLLM)


async def generate_json_with_fallback(
    prompt: str,
    system_prompt: str | None = None,
    providers: list[str] | None = None,
    operation: str = "AI analysis",
) -> tuple[str, dict[str, Any]]:
    """
    Ask each provider in turn for a JSON answer.

    Args:
        prompt: User prompt sent to the model.
        system_prompt: Optional system instructions.
        providers: Provider names to try; defaults to ``settings.llm_provider_chain``.
        operation: Label used in the error raised when every provider fails.

    Returns:
        ``(provider_name, data)`` from the first provider that answered with a JSON object.

    Raises:
        LLMServiceException: No provider is configured or all of them failed.
    """
    chain = settings.llm_provider_chain if providers is None else providers
    failures: list[str] = []
    for name in chain:
        try:
            llm = LLMServiceFactory.create(name)
        except ValueError as exc:
            logger.debug("Skipping LLM provider %s: %s", name, exc)
            failures.append(f"{name}: {format_exception_message(exc)}")
            continue
        try:
            data = await llm.generate_json(prompt, system_prompt)
        except Exception as exc:
            logger.warning("LLM provider %s failed: %s", name, format_exception_message(exc))
            failures.append(f"{name}: {format_exception_message(exc)}")
            continue
        logger.info("%s served by %s", operation, name)
        return llm.provider, data

    detail = "; ".join(failures) if failures else "no LLM providers configured"
    raise LLMServiceException(operation, detail)
