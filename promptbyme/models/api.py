"""
API access models - promptby.me API keys and the call log written by the public API
"""
from datetime import datetime
import uuid

from promptbyme.database import db


PBM_API_KEY_TYPE = 'pbm_api_key'

# Placeholder user for calls that fail before the caller is known
ANONYMOUS_USER_ID = '00000000-0000-0000-0000-000000000000'


class ApiKey(db.Model):
    __tablename__ = 'api_keys'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), nullable=False, index=True)
    key = db.Column(db.String(255), nullable=False, unique=True)
    key_type = db.Column(db.String(50), nullable=False, default=PBM_API_KEY_TYPE)
    name = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class ApiCallLog(db.Model):
    """One call to a public API endpoint; request bodies are stored with credentials redacted"""
    __tablename__ = 'api_call_logs'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), nullable=False, index=True)
    endpoint = db.Column(db.String(500), nullable=False)
    method = db.Column(db.String(10), nullable=False)
    status = db.Column(db.Integer, nullable=False)
    request_body = db.Column(db.JSON, nullable=True)
    response_body = db.Column(db.JSON, nullable=True)
    duration_ms = db.Column(db.Integer, nullable=False, default=0)
    ip_address = db.Column(db.String(100), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_api_call_logs_user_created', 'user_id', 'created_at'),
    )
