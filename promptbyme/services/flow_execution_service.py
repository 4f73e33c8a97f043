"""
Flow execution service - runs one flow (or one prompt) per inbound request.

Flask views are synchronous; each run gets its own event loop via
asyncio.run and its own httpx client, so runs share no state.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx
from flask import current_app

from promptbyme.flow_engine.exceptions import UnsupportedModel
from promptbyme.flow_engine.executor import FlowExecutor, FlowRunResult, RunOptions
from promptbyme.services.ai import AIUnsupportedModelError, LLMResponse, LLMService, ModelBinding, bind_model
from promptbyme.services.flow_store import FlowRecord, FlowStore

logger = logging.getLogger(__name__)


def create_http_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout)


class FlowExecutionService:

    def __init__(self, store: Optional[FlowStore] = None, timeout: float = 60,
                 default_temperature: float = 0.7, default_max_tokens: int = 1000):
        self.store = store or FlowStore()
        self.timeout = timeout
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    def bind(self, model: Optional[str], provider: Optional[str] = None) -> ModelBinding:
        """
        Resolve the provider once for the whole run.

        Raises:
            UnsupportedModel: before any network call
        """
        try:
            return bind_model(model, provider)
        except AIUnsupportedModelError as e:
            raise UnsupportedModel(e.message) from e

    def _llm_service(self, client: httpx.AsyncClient) -> LLMService:
        return LLMService(
            client=client,
            timeout=self.timeout,
            default_temperature=self.default_temperature,
            default_max_tokens=self.default_max_tokens,
        )

    async def run_flow_async(
        self,
        flow: FlowRecord,
        binding: ModelBinding,
        api_key: str,
        variables: Optional[Mapping[str, Any]] = None,
        options: Optional[RunOptions] = None,
    ) -> FlowRunResult:
        async with create_http_client(self.timeout) as client:
            executor = FlowExecutor(self.store, self._llm_service(client))
            return await executor.execute(flow, binding, api_key, variables, options)

    def run_flow(self, *args, **kwargs) -> FlowRunResult:
        return asyncio.run(self.run_flow_async(*args, **kwargs))

    async def run_prompt_async(
        self,
        binding: ModelBinding,
        prompt: str,
        api_key: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        async with create_http_client(self.timeout) as client:
            return await self._llm_service(client).generate_text(
                binding, prompt, api_key, temperature=temperature, max_tokens=max_tokens
            )

    def run_prompt(self, *args, **kwargs) -> LLMResponse:
        return asyncio.run(self.run_prompt_async(*args, **kwargs))


def get_flow_execution_service() -> FlowExecutionService:
    config = current_app.config
    return FlowExecutionService(
        timeout=config.get('AI_REQUEST_TIMEOUT', 60),
        default_temperature=config.get('AI_DEFAULT_TEMPERATURE', 0.7),
        default_max_tokens=config.get('AI_DEFAULT_MAX_TOKENS', 1000),
    )
