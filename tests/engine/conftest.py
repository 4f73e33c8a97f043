"""
Pytest fixtures for engine tests
"""

import pytest
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from promptbyme.services.ai import AIProviderError, LLMResponse
from promptbyme.services.flow_store import FlowRecord, StepRecord


@dataclass
class MockFlowStore:
    """In-memory stand-in for FlowStore"""
    flows: Dict[str, FlowRecord] = field(default_factory=dict)
    steps: Dict[str, List[StepRecord]] = field(default_factory=dict)
    flow_reads: int = 0

    def get_flow(self, flow_id):
        self.flow_reads += 1
        return self.flows.get(flow_id)

    def get_ordered_steps(self, flow_id):
        return list(self.steps.get(flow_id, []))


class MockLLMService:
    """
    Records every generate_text call and answers from a list of replies.
    A reply that is an exception is raised instead of returned.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    async def generate_text(self, binding, prompt, api_key, temperature=None, max_tokens=None):
        self.calls.append({
            'binding': binding,
            'prompt': prompt,
            'api_key': api_key,
            'temperature': temperature,
            'max_tokens': max_tokens,
        })
        reply = self.replies.pop(0) if self.replies else 'ok'
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(text=reply, provider=binding.provider, model=binding.model, status_code=200, time_ms=1.0)


def make_step(step_id, order_index, title, content, custom_content=None, variables=None):
    return StepRecord(
        id=step_id,
        order_index=order_index,
        step_title=title,
        prompt_id=f'prompt-{step_id}',
        prompt_title=title,
        content=content,
        custom_content=custom_content,
        variables=variables or {},
    )


@pytest.fixture
def flow():
    return FlowRecord(id='flow-1', owner_id='user-1', name='Cats pipeline')


@pytest.fixture
def two_step_store(flow):
    """Step 1 summarizes {{topic}}, step 2 expands step 1's output"""
    return MockFlowStore(
        flows={flow.id: flow},
        steps={flow.id: [
            make_step('s1', 0, 'Summary', 'Summarize: {{topic}}'),
            make_step('s2', 1, 'Expansion', 'Expand: {{step_1_output}}'),
        ]},
    )


@pytest.fixture
def provider_failure():
    return AIProviderError('OpenAI API error: Rate limit reached', provider='openai', model='gpt-4o', status_code=429)


@pytest.fixture
def step_factory():
    return make_step


@pytest.fixture
def mock_llm():
    return MockLLMService()


@pytest.fixture
def store_factory():
    def _build(flow, steps):
        return MockFlowStore(flows={flow.id: flow}, steps={flow.id: list(steps)})
    return _build
