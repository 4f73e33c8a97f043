"""
Prompt model - stored prompt templates with {{variable}} placeholders
"""
from datetime import datetime
import uuid

from promptbyme.database import db


class PromptAccess:
    PUBLIC = 'public'
    PRIVATE = 'private'


class Prompt(db.Model):
    __tablename__ = 'prompts'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=False, default='')
    access = db.Column(db.String(20), nullable=False, default=PromptAccess.PRIVATE)
    views = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
