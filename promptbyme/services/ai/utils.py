"""
Provider kinds and model-to-provider resolution.
"""

from enum import Enum
from typing import Optional

from .exceptions import AIUnsupportedModelError


class ProviderKind(str, Enum):
    OPENAI = 'openai'
    ANTHROPIC = 'anthropic'
    GOOGLE = 'google'
    GROQ = 'groq'
    LLAMA = 'llama'


# Substring markers inspected when no explicit provider is given
MODEL_MARKERS = (
    ('gpt', ProviderKind.OPENAI),
    ('claude', ProviderKind.ANTHROPIC),
    ('gemini', ProviderKind.GOOGLE),
)

# Accepted spellings of an explicit provider name
PROVIDER_ALIASES = {
    'openai': ProviderKind.OPENAI,
    'anthropic': ProviderKind.ANTHROPIC,
    'google': ProviderKind.GOOGLE,
    'gemini': ProviderKind.GOOGLE,
    'groq': ProviderKind.GROQ,
    'llama': ProviderKind.LLAMA,
}

DEFAULT_MODELS = {
    ProviderKind.OPENAI: 'gpt-3.5-turbo',
    ProviderKind.ANTHROPIC: 'claude-3-haiku-20240307',
    ProviderKind.GOOGLE: 'gemini-pro',
    ProviderKind.GROQ: 'llama3-8b-8192',
    ProviderKind.LLAMA: 'llama-3-8b-instruct',
}

def resolve_provider(model: Optional[str], provider: Optional[str] = None) -> ProviderKind:
    """
    Resolve the provider kind for a request.

    An explicit provider name wins; otherwise the model identifier is
    matched against the substring markers.

    Raises:
        AIUnsupportedModelError: if nothing matches
    """
    if provider:
        kind = PROVIDER_ALIASES.get(provider.strip().lower())
        if kind is None:
            raise AIUnsupportedModelError(f"Unsupported provider: {provider}", provider=provider, model=model)
        return kind

    if not model:
        raise AIUnsupportedModelError("Model is required", model=model)

    lowered = model.lower()
    for marker, kind in MODEL_MARKERS:
        if marker in lowered:
            return kind

    raise AIUnsupportedModelError(model=model)


def get_default_model(kind: ProviderKind) -> str:
    return DEFAULT_MODELS[kind]

