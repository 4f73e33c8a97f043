"""
Tests for promptbyme/services/ai/llm_service.py

Provider HTTP calls go through httpx.MockTransport; no real API is called.
"""

import json
import pytest
import httpx

from promptbyme.services.ai.llm_service import LLMService, bind_model
from promptbyme.services.ai.exceptions import (
    AIInvalidResponseError,
    AIProviderError,
    AIProviderUnreachableError,
    AITimeoutError,
    AIUnsupportedModelError,
)
from promptbyme.services.ai.utils import ProviderKind


def make_service(handler):
    calls = []

    def _handler(request):
        calls.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_handler))
    return LLMService(client=client), calls


class TestBindModel:

    def test_binds_openai(self):
        binding = bind_model('gpt-4o-mini')
        assert binding.kind == ProviderKind.OPENAI
        assert binding.model == 'gpt-4o-mini'
        assert binding.provider == 'openai'

    def test_default_model_for_explicit_provider(self):
        binding = bind_model(None, provider='groq')
        assert binding.model == 'llama3-8b-8192'

    def test_unsupported_model(self):
        with pytest.raises(AIUnsupportedModelError):
            bind_model('mistral-large')


class TestLLMService:
    """Tests for LLMService.generate_text"""

    def test_init_defaults(self):
        service = LLMService(client=httpx.AsyncClient())
        assert service.default_temperature == 0.7
        assert service.default_max_tokens == 1000
        assert service.default_timeout == 60

    @pytest.mark.asyncio
    async def test_openai_request_and_response(self):
        service, calls = make_service(lambda r: httpx.Response(200, json={
            'choices': [{'message': {'role': 'assistant', 'content': 'Hello there'}}]
        }))

        result = await service.generate_text(bind_model('gpt-4o'), 'Say hi', 'sk-test')

        assert result.text == 'Hello there'
        assert result.provider == 'openai'
        assert len(calls) == 1
        request = calls[0]
        assert str(request.url) == 'https://api.openai.com/v1/chat/completions'
        assert request.headers['Authorization'] == 'Bearer sk-test'
        body = json.loads(request.content)
        assert body['messages'] == [{'role': 'user', 'content': 'Say hi'}]
        assert body['temperature'] == 0.7
        assert body['max_tokens'] == 1000

    @pytest.mark.asyncio
    async def test_anthropic_request_and_response(self):
        service, calls = make_service(lambda r: httpx.Response(200, json={
            'content': [{'type': 'text', 'text': 'Bonjour'}]
        }))

        result = await service.generate_text(
            bind_model('claude-3-haiku-20240307'), 'Say hi', 'ak-test', temperature=0.2, max_tokens=50
        )

        assert result.text == 'Bonjour'
        request = calls[0]
        assert str(request.url) == 'https://api.anthropic.com/v1/messages'
        assert request.headers['x-api-key'] == 'ak-test'
        assert request.headers['anthropic-version'] == '2023-06-01'
        assert 'Authorization' not in request.headers
        body = json.loads(request.content)
        assert body['temperature'] == 0.2
        assert body['max_tokens'] == 50

    @pytest.mark.asyncio
    async def test_google_request_and_response(self):
        service, calls = make_service(lambda r: httpx.Response(200, json={
            'candidates': [{'content': {'parts': [{'text': 'Hola'}]}}]
        }))

        result = await service.generate_text(bind_model('gemini-pro'), 'Say hi', 'g-key')

        assert result.text == 'Hola'
        request = calls[0]
        assert request.url.path == '/v1beta/models/gemini-pro:generateContent'
        assert request.url.params['key'] == 'g-key'
        body = json.loads(request.content)
        assert body['contents'] == [{'parts': [{'text': 'Say hi'}]}]
        assert body['generationConfig'] == {'temperature': 0.7, 'maxOutputTokens': 1000}

    @pytest.mark.asyncio
    async def test_groq_uses_openai_shape(self):
        service, calls = make_service(lambda r: httpx.Response(200, json={
            'choices': [{'message': {'content': 'fast'}}]
        }))

        result = await service.generate_text(bind_model(None, provider='groq'), 'Hi', 'gsk-test')

        assert result.text == 'fast'
        assert str(calls[0].url) == 'https://api.groq.com/openai/v1/chat/completions'
        assert json.loads(calls[0].content)['model'] == 'llama3-8b-8192'

    @pytest.mark.asyncio
    async def test_provider_error_message_surfaced(self):
        service, _ = make_service(lambda r: httpx.Response(401, json={
            'error': {'message': 'Incorrect API key provided'}
        }))

        with pytest.raises(AIProviderError) as exc_info:
            await service.generate_text(bind_model('gpt-4o'), 'Hi', 'bad')

        assert exc_info.value.status_code == 401
        assert 'Incorrect API key provided' in exc_info.value.message
        assert exc_info.value.message.startswith('OpenAI API error')

    @pytest.mark.asyncio
    async def test_provider_error_without_message(self):
        service, _ = make_service(lambda r: httpx.Response(502, text='<html>Bad gateway</html>'))

        with pytest.raises(AIProviderError) as exc_info:
            await service.generate_text(bind_model('claude-3-opus'), 'Hi', 'key')

        assert 'Provider error (HTTP 502)' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_failure_is_unreachable(self):
        def _fail(request):
            raise httpx.ConnectError('connection refused', request=request)

        service, _ = make_service(_fail)

        with pytest.raises(AIProviderUnreachableError):
            await service.generate_text(bind_model('gpt-4o'), 'Hi', 'key')

    @pytest.mark.asyncio
    async def test_timeout(self):
        def _timeout(request):
            raise httpx.ReadTimeout('timed out', request=request)

        service, _ = make_service(_timeout)

        with pytest.raises(AITimeoutError):
            await service.generate_text(bind_model('gpt-4o'), 'Hi', 'key')

    @pytest.mark.asyncio
    async def test_unexpected_success_body(self):
        service, _ = make_service(lambda r: httpx.Response(200, json={'unexpected': True}))

        with pytest.raises(AIInvalidResponseError) as exc_info:
            await service.generate_text(bind_model('gemini-pro'), 'Hi', 'key')

        assert 'Google' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_completion_is_empty_string(self):
        service, _ = make_service(lambda r: httpx.Response(200, json={
            'choices': [{'message': {'content': None}}]
        }))

        result = await service.generate_text(bind_model('gpt-4o'), 'Hi', 'key')
        assert result.text == ''

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self):
        service, calls = make_service(lambda r: httpx.Response(500, json={'error': {'message': 'boom'}}))

        with pytest.raises(AIProviderError):
            await service.generate_text(bind_model('gpt-4o'), 'Hi', 'key')

        assert len(calls) == 1
