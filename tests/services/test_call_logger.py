"""
Tests for promptbyme/services/call_logger.py
"""

from unittest.mock import patch

from promptbyme.database import db
from promptbyme.models import ANONYMOUS_USER_ID, ApiCallLog
from promptbyme.services.call_logger import ApiCallLogger, redact_request_body


class TestRedactRequestBody:

    def test_provider_keys_redacted(self):
        body = {'flow_id': 'f1', 'api_key': 'sk-secret', 'apiKey': 'sk-other'}

        redacted = redact_request_body(body)

        assert redacted == {'flow_id': 'f1', 'api_key': 'sk_...redacted...', 'apiKey': 'sk_...redacted...'}
        assert body['api_key'] == 'sk-secret'

    def test_empty_key_left_alone(self):
        assert redact_request_body({'api_key': ''}) == {'api_key': ''}

    def test_non_dict(self):
        assert redact_request_body(None) == {}


class TestApiCallLogger:

    def test_record(self, app):
        with app.test_request_context(
            '/functions/v1/run-prompt-flow-api',
            method='POST',
            headers={'User-Agent': 'pytest', 'X-Forwarded-For': '203.0.113.9'},
        ):
            entry = ApiCallLogger().record('user-1', 200, {'flow_id': 'f1'}, {'success': True})

        assert entry is not None
        log = ApiCallLog.query.one()
        assert log.user_id == 'user-1'
        assert log.endpoint.endswith('/functions/v1/run-prompt-flow-api')
        assert log.method == 'POST'
        assert log.ip_address == '203.0.113.9'
        assert log.user_agent == 'pytest'
        assert log.duration_ms >= 0

    def test_unknown_caller_logged_as_anonymous(self, app):
        with app.test_request_context('/functions/v1/run-prompt-flow-api', method='POST'):
            ApiCallLogger().record(None, 401, None, {'success': False})

        log = ApiCallLog.query.one()
        assert log.user_id == ANONYMOUS_USER_ID
        assert log.request_body == {}

    def test_write_failure_does_not_raise(self, app):
        with app.test_request_context('/functions/v1/run-prompt-flow-api', method='POST'):
            with patch.object(db.session, 'commit', side_effect=RuntimeError('db down')):
                entry = ApiCallLogger().record('user-1', 200, {}, {'success': True})

        assert entry is None
