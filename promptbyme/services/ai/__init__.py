"""
AI Services - text generation over the supported LLM providers.

Providers are called directly over HTTP (httpx); see providers.py for the
per-provider request and response shapes.
"""

from .llm_service import LLMService, LLMResponse, ModelBinding, bind_model
from .exceptions import (
    AIGenerationError,
    AIUnsupportedModelError,
    AIProviderError,
    AIProviderUnreachableError,
    AITimeoutError,
    AIInvalidResponseError,
)
from .utils import (
    ProviderKind,
    resolve_provider,
    get_default_model,
)

__all__ = [
    # Service
    'LLMService',
    'LLMResponse',
    'ModelBinding',
    'bind_model',
    # Exceptions
    'AIGenerationError',
    'AIUnsupportedModelError',
    'AIProviderError',
    'AIProviderUnreachableError',
    'AITimeoutError',
    'AIInvalidResponseError',
    # Utils
    'ProviderKind',
    'resolve_provider',
    'get_default_model',
]
