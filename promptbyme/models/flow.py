"""
Prompt Flow Models - ordered pipelines of stored prompts
"""
from datetime import datetime
import uuid

from promptbyme.database import db


class PromptFlow(db.Model):
    """
    Prompt Flow - an ordered pipeline of prompt steps owned by one user
    """
    __tablename__ = 'prompt_flows'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    steps = db.relationship(
        'FlowStep',
        back_populates='flow',
        order_by='FlowStep.order_index',
        cascade='all, delete-orphan',
    )


class FlowStep(db.Model):
    """
    Flow Step - one stage of a flow wrapping a stored prompt
    """
    __tablename__ = 'flow_steps'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    flow_id = db.Column(db.String(36), db.ForeignKey('prompt_flows.id', ondelete='CASCADE'), nullable=False)
    prompt_id = db.Column(db.String(36), db.ForeignKey('prompts.id', ondelete='CASCADE'), nullable=False)
    order_index = db.Column(db.Integer, nullable=False)
    step_title = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    flow = db.relationship('PromptFlow', back_populates='steps')
    prompt = db.relationship('Prompt')
    override = db.relationship(
        'FlowStepOverride',
        back_populates='step',
        uselist=False,
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        db.UniqueConstraint('flow_id', 'order_index', name='uq_flow_steps_flow_order'),
        db.Index('idx_flow_steps_flow_id', 'flow_id'),
    )


class FlowStepOverride(db.Model):
    """Per-step custom content and variables set in the flow editor"""
    __tablename__ = 'prompt_flow_step'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    flow_step_id = db.Column(
        db.String(36),
        db.ForeignKey('flow_steps.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
    )
    custom_content = db.Column(db.Text, nullable=True)
    variables = db.Column(db.JSON, nullable=True)

    step = db.relationship('FlowStep', back_populates='override')
