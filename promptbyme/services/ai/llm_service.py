"""
Unified LLM service over the provider HTTP APIs.

Each call issues exactly one POST through httpx; there are no retries.
Provider-specific request/response shapes live in providers.py.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .exceptions import (
    AIInvalidResponseError,
    AIProviderError,
    AIProviderUnreachableError,
    AITimeoutError,
)
from .providers import ProviderAdapter, get_adapter, extract_error_message
from .utils import ProviderKind, resolve_provider, get_default_model

logger = logging.getLogger('promptbyme.ai')


@dataclass(frozen=True)
class ModelBinding:
    """A model identifier resolved once to its provider binding"""
    kind: ProviderKind
    model: str
    adapter: ProviderAdapter

    @property
    def provider(self) -> str:
        return self.kind.value


@dataclass
class LLMResponse:
    """LLM service response"""
    text: str
    provider: str
    model: str
    status_code: int
    time_ms: float


def bind_model(model: Optional[str], provider: Optional[str] = None) -> ModelBinding:
    """
    Resolve a model identifier (and optional explicit provider) to a binding.

    Raises:
        AIUnsupportedModelError: before any network call, if no provider matches
    """
    kind = resolve_provider(model, provider)
    return ModelBinding(kind=kind, model=model or get_default_model(kind), adapter=get_adapter(kind))


class LLMService:
    """
    Text generation over the supported providers.

    Usage:
        async with LLMService() as service:
            binding = bind_model('gpt-4o-mini')
            response = await service.generate_text(binding, 'Say hi', api_key='sk-...')
            print(response.text)
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60,
        default_temperature: float = 0.7,
        default_max_tokens: int = 1000,
    ):
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.default_timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def generate_text(
        self,
        binding: ModelBinding,
        prompt: str,
        api_key: str,
        temperature: float = None,
        max_tokens: int = None,
    ) -> LLMResponse:
        """
        Send one prompt to the bound provider and return its completion.

        Raises:
            AIProviderError: non-success status (carries the provider's message when present)
            AIProviderUnreachableError: transport failure or timeout
        """
        temperature = temperature if temperature is not None else self.default_temperature
        max_tokens = max_tokens or self.default_max_tokens
        adapter = binding.adapter

        request = adapter.build_request(binding.model, api_key, prompt, temperature, max_tokens)

        logger.info(f"[AI] Starting generation - provider={binding.provider}, model={binding.model}")
        start_time = time.time()

        try:
            response = await self._client.post(
                request.url,
                headers=request.headers,
                params=request.params or None,
                json=request.json,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[AI] Timeout - provider={binding.provider}, model={binding.model}")
            raise AITimeoutError(
                message=f"{adapter.display_name} API request timed out",
                provider=binding.provider,
                model=binding.model,
                timeout_seconds=self.default_timeout,
            ) from e
        except httpx.RequestError as e:
            logger.error(
                f"[AI] Transport error - provider={binding.provider}, model={binding.model}, "
                f"error={type(e).__name__}: {e}"
            )
            raise AIProviderUnreachableError(
                message=f"{adapter.display_name} API unreachable: {e}",
                provider=binding.provider,
                model=binding.model,
            ) from e

        duration_ms = (time.time() - start_time) * 1000

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            provider_message = extract_error_message(body)
            message = provider_message or f"Provider error (HTTP {response.status_code})"
            logger.error(
                f"[AI] API error - provider={binding.provider}, model={binding.model}, "
                f"status={response.status_code}, error={message}"
            )
            raise AIProviderError(
                message=f"{adapter.display_name} API error: {message}",
                provider=binding.provider,
                model=binding.model,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AIInvalidResponseError(provider=binding.provider, model=binding.model) from e

        try:
            text = adapter.parse_response(data)
        except AIInvalidResponseError as e:
            raise AIInvalidResponseError(
                message=f"Invalid response format from {adapter.display_name} API",
                provider=binding.provider,
                model=binding.model,
            ) from e

        logger.info(
            f"[AI] Generation completed - provider={binding.provider}, model={binding.model}, "
            f"time_ms={duration_ms:.0f}"
        )

        return LLMResponse(
            text=text,
            provider=binding.provider,
            model=binding.model,
            status_code=response.status_code,
            time_ms=duration_ms,
        )
