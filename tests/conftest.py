"""
Shared fixtures: Flask app on SQLite, seeded flows and a recording provider transport
"""

import json
import pytest
from types import SimpleNamespace
import httpx
from unittest.mock import patch

from promptbyme import create_app
from promptbyme.config import TestConfig
from promptbyme.database import db
from promptbyme.models import ApiKey, FlowStep, FlowStepOverride, Prompt, PromptFlow, PromptAccess

OWNER_ID = '11111111-1111-1111-1111-111111111111'
OTHER_USER_ID = '22222222-2222-2222-2222-222222222222'
OWNER_API_KEY = 'pbm_owner_key'
OTHER_API_KEY = 'pbm_other_key'


class RecordingTransport:
    """
    httpx transport answering provider calls from a list of canned replies.

    Each reply is either a completion text (wrapped in the OpenAI-style
    response shape), an httpx.Response, or an exception to raise.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else 'ok'
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json={'choices': [{'message': {'role': 'assistant', 'content': reply}}]})

    def prompts(self):
        """User message sent with each recorded chat request"""
        return [json.loads(r.content)['messages'][0]['content'] for r in self.requests]


@pytest.fixture
def accounts():
    """Ids and pbm API keys of the two seeded users"""
    return SimpleNamespace(
        owner_id=OWNER_ID,
        other_user_id=OTHER_USER_ID,
        owner_api_key=OWNER_API_KEY,
        other_api_key=OTHER_API_KEY,
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def provider():
    """Patch the per-run httpx client so provider calls hit a RecordingTransport"""
    transport = RecordingTransport()

    def _client(timeout):
        return httpx.AsyncClient(transport=httpx.MockTransport(transport), timeout=timeout)

    with patch('promptbyme.services.flow_execution_service.create_http_client', side_effect=_client):
        yield transport


@pytest.fixture
def session_tokens():
    """Session tokens accepted by the (patched) Supabase identity lookup"""
    tokens = {'owner-session': OWNER_ID, 'other-session': OTHER_USER_ID}
    with patch(
        'promptbyme.services.identity.IdentityService.resolve_session_token',
        autospec=True,
        side_effect=lambda self, token: tokens.get(token),
    ):
        yield tokens


@pytest.fixture
def seeded_flow(app):
    """Two-step flow owned by OWNER_ID: summarize a topic, then expand the summary"""
    summarize = Prompt(user_id=OWNER_ID, title='Summarize', content='Summarize: {{topic}}')
    expand = Prompt(user_id=OWNER_ID, title='Expand', content='Expand: {{step_1_output}}')
    flow = PromptFlow(user_id=OWNER_ID, name='Cats pipeline')
    db.session.add_all([summarize, expand, flow])
    db.session.flush()

    db.session.add_all([
        FlowStep(flow_id=flow.id, prompt_id=summarize.id, order_index=0, step_title='Summary'),
        FlowStep(flow_id=flow.id, prompt_id=expand.id, order_index=1, step_title='Expansion'),
    ])
    db.session.add_all([
        ApiKey(user_id=OWNER_ID, key=OWNER_API_KEY),
        ApiKey(user_id=OTHER_USER_ID, key=OTHER_API_KEY),
    ])
    db.session.commit()
    return flow.id


@pytest.fixture
def empty_flow(app):
    flow = PromptFlow(user_id=OWNER_ID, name='Empty')
    db.session.add(flow)
    db.session.commit()
    return flow.id


@pytest.fixture
def make_prompt(app):
    def _make(content, title='Prompt', user_id=OWNER_ID, access=PromptAccess.PRIVATE):
        prompt = Prompt(user_id=user_id, title=title, content=content, access=access)
        db.session.add(prompt)
        db.session.commit()
        return prompt
    return _make


@pytest.fixture
def add_override(app):
    def _add(flow_id, order_index, custom_content=None, variables=None):
        step = FlowStep.query.filter_by(flow_id=flow_id, order_index=order_index).one()
        db.session.add(FlowStepOverride(flow_step_id=step.id, custom_content=custom_content, variables=variables))
        db.session.commit()
    return _add
