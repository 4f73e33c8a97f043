"""
API call logging for the public API endpoints.

A failure to write the log is reported and rolled back but never changes
the response the caller receives.
"""

import time
import logging
from typing import Any, Dict, Optional

from flask import request

from promptbyme.database import db
from promptbyme.models import ApiCallLog, ANONYMOUS_USER_ID

logger = logging.getLogger(__name__)

REDACTED_KEY = 'sk_...redacted...'
SENSITIVE_FIELDS = ('api_key', 'apiKey')


def redact_request_body(body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy of body with provider credentials replaced"""
    if not isinstance(body, dict):
        return {}
    redacted = dict(body)
    for name in SENSITIVE_FIELDS:
        if redacted.get(name):
            redacted[name] = REDACTED_KEY
    return redacted


def client_ip() -> str:
    return (
        request.headers.get('x-forwarded-for')
        or request.headers.get('cf-connecting-ip')
        or request.remote_addr
        or 'unknown'
    )


class ApiCallLogger:
    """
    Usage:
        call_log = ApiCallLogger()          # at the start of the request
        ...
        call_log.record(user_id, 200, body, response_body)
    """

    def __init__(self):
        self.started_at = time.time()

    def duration_ms(self) -> int:
        return int((time.time() - self.started_at) * 1000)

    def record(
        self,
        user_id: Optional[str],
        status: int,
        request_body: Optional[Dict[str, Any]],
        response_body: Dict[str, Any],
    ) -> Optional[ApiCallLog]:
        entry = ApiCallLog(
            user_id=user_id or ANONYMOUS_USER_ID,
            endpoint=request.url,
            method=request.method,
            status=status,
            request_body=request_body if request_body is not None else {},
            response_body=response_body,
            duration_ms=self.duration_ms(),
            ip_address=client_ip(),
            user_agent=request.headers.get('user-agent') or 'unknown',
        )
        try:
            db.session.add(entry)
            db.session.commit()
            return entry
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to log API call: {e}")
            return None
