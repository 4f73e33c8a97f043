"""
Provider bindings - one request builder and one response parser per provider.

Adding a provider means adding a ProviderKind and one ProviderAdapter entry
in ADAPTERS; the sequencer never looks at provider details.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .exceptions import AIInvalidResponseError
from .utils import ProviderKind

ANTHROPIC_VERSION = '2023-06-01'


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: Dict[str, str]
    json: Dict[str, Any]
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderAdapter:
    kind: ProviderKind
    display_name: str
    build_request: Callable[[str, str, str, float, int], ProviderRequest]
    parse_response: Callable[[Dict[str, Any]], str]


def _chat_messages(prompt: str):
    return [{'role': 'user', 'content': prompt}]


def _openai_style_builder(url: str) -> Callable[[str, str, str, float, int], ProviderRequest]:
    def build(model: str, api_key: str, prompt: str, temperature: float, max_tokens: int) -> ProviderRequest:
        return ProviderRequest(
            url=url,
            headers={
                'Content-Type': 'application/json',
                'Authorization': f'Bearer {api_key}',
            },
            json={
                'model': model,
                'messages': _chat_messages(prompt),
                'temperature': temperature,
                'max_tokens': max_tokens,
            },
        )
    return build


def _build_anthropic(model: str, api_key: str, prompt: str, temperature: float, max_tokens: int) -> ProviderRequest:
    return ProviderRequest(
        url='https://api.anthropic.com/v1/messages',
        headers={
            'Content-Type': 'application/json',
            'x-api-key': api_key,
            'anthropic-version': ANTHROPIC_VERSION,
        },
        json={
            'model': model,
            'messages': _chat_messages(prompt),
            'temperature': temperature,
            'max_tokens': max_tokens,
        },
    )


def _build_google(model: str, api_key: str, prompt: str, temperature: float, max_tokens: int) -> ProviderRequest:
    return ProviderRequest(
        url=f'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent',
        headers={'Content-Type': 'application/json'},
        params={'key': api_key},
        json={
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {
                'temperature': temperature,
                'maxOutputTokens': max_tokens,
            },
        },
    )


def _parse_chat_completion(data: Dict[str, Any]) -> str:
    try:
        return data['choices'][0]['message'].get('content') or ''
    except (KeyError, IndexError, TypeError, AttributeError):
        raise AIInvalidResponseError()


def _parse_llama(data: Dict[str, Any]) -> str:
    if not isinstance(data, dict):
        raise AIInvalidResponseError()
    # Some Llama hosts answer with a bare "generation" field
    if data.get('choices'):
        return _parse_chat_completion(data)
    if 'generation' in data:
        return data.get('generation') or ''
    raise AIInvalidResponseError()


def _parse_anthropic(data: Dict[str, Any]) -> str:
    try:
        return data['content'][0].get('text') or ''
    except (KeyError, IndexError, TypeError, AttributeError):
        raise AIInvalidResponseError()


def _parse_google(data: Dict[str, Any]) -> str:
    try:
        return data['candidates'][0]['content']['parts'][0].get('text') or ''
    except (KeyError, IndexError, TypeError, AttributeError):
        raise AIInvalidResponseError()


ADAPTERS: Dict[ProviderKind, ProviderAdapter] = {
    ProviderKind.OPENAI: ProviderAdapter(
        kind=ProviderKind.OPENAI,
        display_name='OpenAI',
        build_request=_openai_style_builder('https://api.openai.com/v1/chat/completions'),
        parse_response=_parse_chat_completion,
    ),
    ProviderKind.ANTHROPIC: ProviderAdapter(
        kind=ProviderKind.ANTHROPIC,
        display_name='Anthropic',
        build_request=_build_anthropic,
        parse_response=_parse_anthropic,
    ),
    ProviderKind.GOOGLE: ProviderAdapter(
        kind=ProviderKind.GOOGLE,
        display_name='Google',
        build_request=_build_google,
        parse_response=_parse_google,
    ),
    ProviderKind.GROQ: ProviderAdapter(
        kind=ProviderKind.GROQ,
        display_name='Groq',
        build_request=_openai_style_builder('https://api.groq.com/openai/v1/chat/completions'),
        parse_response=_parse_chat_completion,
    ),
    ProviderKind.LLAMA: ProviderAdapter(
        kind=ProviderKind.LLAMA,
        display_name='Llama',
        build_request=_openai_style_builder('https://api.llama-api.com/v1/chat/completions'),
        parse_response=_parse_llama,
    ),
}


def get_adapter(kind: ProviderKind) -> ProviderAdapter:
    return ADAPTERS[kind]


def extract_error_message(data: Any) -> Optional[str]:
    """Pull the provider's own error message out of an error body, if any"""
    if not isinstance(data, dict):
        return None
    error = data.get('error')
    if isinstance(error, dict) and error.get('message'):
        return error['message']
    if isinstance(error, str) and error:
        return error
    if data.get('message'):
        return data['message']
    return None
