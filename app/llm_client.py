"""
LLM client abstraction layer to support multiple providers.

This module provides a unified interface for different LLM providers,
making it easy to switch between Ollama and OpenAI API while maintaining
the same interface for the rest of the application.

Provider failures are translated into the GenerationError family so callers
never have to know which SDK raised what.
"""

from __future__ import annotations
import logging
from typing import List, Dict
from abc import ABC, abstractmethod

import httpx
import ollama
import openai
from openai import OpenAI

from config import (
    LLM_PROVIDER, OLLAMA_BASE_URL, OPENAI_API_KEY, OPENAI_MODEL_PARAMS,
    REWRITE_TIMEOUT_SECONDS,
)
from errors import GenerationError, Timeout, UpstreamThrottled

logger = logging.getLogger(__name__)


class LLMResponse:
    """Unified response object for LLM responses."""

    def __init__(self, content: str):
        self.message = MessageContent(content)


class MessageContent:
    """Message content wrapper."""

    def __init__(self, content: str):
        self.content = content


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def chat(self, model: str, messages: List[Dict[str, str]], json_mode: bool = False) -> LLMResponse:
        """Send a chat request to the LLM provider."""
        pass


class OllamaClient(LLMClient):
    """Ollama client implementation."""

    def __init__(self, host: str | None = None, timeout: float = REWRITE_TIMEOUT_SECONDS):
        self.client = ollama.Client(host=host or OLLAMA_BASE_URL, timeout=timeout)

    def chat(self, model: str, messages: List[Dict[str, str]], json_mode: bool = False) -> LLMResponse:
        """Send a chat request to Ollama."""
        try:
            response = self.client.chat(
                model=model,
                messages=messages,
                format="json" if json_mode else None,
                options={"temperature": OPENAI_MODEL_PARAMS.get("temperature", 0.3)},
            )
        except httpx.TimeoutException as e:
            raise Timeout(f"ollama did not answer in time: {e}") from e
        except ollama.ResponseError as e:
            if e.status_code == 429:
                raise UpstreamThrottled(f"ollama throttled the request: {e.error}") from e
            raise GenerationError(f"ollama error {e.status_code}: {e.error}") from e
        except httpx.HTTPError as e:
            raise GenerationError(f"ollama unreachable: {e}") from e
        return LLMResponse(response.message.content or "")


class OpenAIClient(LLMClient):
    """OpenAI client implementation."""

    def __init__(self, api_key: str | None = None, timeout: float = REWRITE_TIMEOUT_SECONDS):
        # Use provided API key or get from environment
        api_key = api_key or OPENAI_API_KEY
        if not api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY environment variable or pass api_key parameter.")

        # Retries are decided by the caller, not the SDK.
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def chat(self, model: str, messages: List[Dict[str, str]], json_mode: bool = False) -> LLMResponse:
        """Send a chat request to OpenAI."""
        extra = {"response_format": {"type": "json_object"}} if json_mode else {}
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=OPENAI_MODEL_PARAMS.get("temperature", 0.3),
                max_tokens=OPENAI_MODEL_PARAMS.get("max_tokens", 2000),
                **extra,
            )
        except openai.APITimeoutError as e:
            raise Timeout(f"openai did not answer in time: {e}") from e
        except openai.RateLimitError as e:
            raise UpstreamThrottled(f"openai rate limit / quota: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code == 429:
                raise UpstreamThrottled(f"openai returned 429: {e}") from e
            raise GenerationError(f"openai error {e.status_code}: {e}") from e
        except openai.APIConnectionError as e:
            raise GenerationError(f"openai unreachable: {e}") from e

        if not response.choices:
            return LLMResponse("")
        return LLMResponse(response.choices[0].message.content or "")


def get_llm_client(provider: str | None = None, **kwargs) -> LLMClient:
    """Factory function to get the appropriate LLM client based on configuration."""
    provider = (provider or LLM_PROVIDER).lower()

    if provider == "openai":
        return OpenAIClient(**kwargs)
    elif provider == "ollama":
        return OllamaClient(**kwargs)
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
