"""LLM providers behind a single chat capability."""

import logging
from typing import Optional, Protocol, runtime_checkable

import httpx
from openai import APIError, APITimeoutError, AsyncOpenAI, RateLimitError

from app.config import settings
from app.core.enums import LLMProviderName
from app.core.exceptions import DecisionEvaluationError, LLMConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class LLMProvider(Protocol):
    """Chat capability shared by all LLM backends."""

    name: str

    async def chat(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 500,
        json_mode: bool = False,
    ) -> str:
        """Send one system+user exchange and return the raw reply text."""
        ...

    async def is_available(self) -> bool:
        """Whether the provider is configured and reachable."""
        ...


class OpenAIProvider:
    """Provider for OpenAI or any OpenAI-compatible endpoint."""

    name = LLMProviderName.OPENAI.value

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize the OpenAI provider.

        Args:
            api_key: API key (defaults to settings)
            base_url: Override for OpenAI-compatible endpoints (defaults to settings)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = base_url or settings.OPENAI_BASE_URL

        if not self.api_key:
            logger.warning("OpenAI API key not configured. Set OPENAI_API_KEY in environment.")
            self.client = None
        else:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=timeout,
                max_retries=0,
                http_client=httpx.AsyncClient(timeout=timeout),
            )

    async def chat(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 500,
        json_mode: bool = False,
    ) -> str:
        """
        Send a chat completion request.

        Raises:
            LLMConfigurationError: If the API key is not configured
            DecisionEvaluationError: On API, rate-limit or timeout errors
        """
        if self.client is None:
            raise LLMConfigurationError("OpenAI service is not configured")

        request_params = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            request_params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request_params)
        except RateLimitError as e:
            logger.warning(f"OpenAI rate limit hit: {e}")
            raise DecisionEvaluationError("OpenAI rate limit exceeded") from e
        except APITimeoutError as e:
            logger.warning(f"OpenAI request timed out: {e}")
            raise DecisionEvaluationError("OpenAI request timed out") from e
        except APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise DecisionEvaluationError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content
        if not content:
            raise DecisionEvaluationError("Empty response from LLM")

        if response.usage is not None:
            logger.debug(f"OpenAI tokens used: {response.usage.total_tokens}")
        return content

    async def is_available(self) -> bool:
        return self.client is not None


class OllamaProvider:
    """Provider for a local Ollama server."""

    name = LLMProviderName.OLLAMA.value

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.timeout = timeout or max(settings.HTTP_TIMEOUT_SECONDS, 60.0)

    async def chat(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 500,
        json_mode: bool = False,
    ) -> str:
        """
        Call Ollama's chat API without streaming.

        Raises:
            DecisionEvaluationError: On timeout, HTTP errors, or a malformed reply
        """
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if json_mode:
            payload["format"] = "json"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(f"{self.base_url}/api/chat", json=payload)
                response.raise_for_status()
                return response.json()["message"]["content"]
            except httpx.TimeoutException as e:
                raise DecisionEvaluationError(f"Ollama timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DecisionEvaluationError(f"Ollama error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise DecisionEvaluationError(f"Ollama unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise DecisionEvaluationError(f"Invalid response from Ollama: {e}") from e

    async def is_available(self) -> bool:
        """Ollama is available when its model listing answers with 200."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/api/tags")
            except httpx.HTTPError as e:
                logger.warning(f"Ollama not reachable at {self.base_url}: {e}")
                return False
        return response.status_code == 200

    async def list_models(self) -> list[str]:
        """
        Names of the models installed on the Ollama server.

        Raises:
            DecisionEvaluationError: When the listing cannot be fetched or parsed
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                return [model["name"] for model in response.json().get("models", [])]
            except httpx.HTTPStatusError as e:
                raise DecisionEvaluationError(f"Ollama error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise DecisionEvaluationError(f"Ollama unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise DecisionEvaluationError(f"Invalid model listing from Ollama: {e}") from e


def build_provider(provider: Optional[LLMProviderName] = None) -> LLMProvider:
    """Create the provider selected in settings."""
    provider = provider or settings.LLM_PROVIDER
    if provider == LLMProviderName.OLLAMA:
        return OllamaProvider()
    return OpenAIProvider()
