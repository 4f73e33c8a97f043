"""
Flow store - read-only access to the flow records the execution engine needs.

Rows are copied into frozen records so the engine never touches the ORM
session while awaiting providers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import joinedload

from promptbyme.database import db
from promptbyme.models import PromptFlow, FlowStep, Prompt, PromptAccess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowRecord:
    id: str
    owner_id: str
    name: str


@dataclass(frozen=True)
class StepRecord:
    id: str
    order_index: int
    step_title: str
    prompt_id: str
    prompt_title: Optional[str]
    content: str
    custom_content: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory=dict)

    @property
    def template(self) -> str:
        """Custom content set in the flow editor wins over the stored prompt body"""
        return self.custom_content or self.content or ''


@dataclass(frozen=True)
class PromptRecord:
    id: str
    owner_id: str
    title: Optional[str]
    content: str
    access: str

    def is_visible_to(self, user_id: str) -> bool:
        return self.access == PromptAccess.PUBLIC or str(self.owner_id) == str(user_id)


class FlowStore:
    """SQLAlchemy-backed flow store"""

    def get_flow(self, flow_id: str) -> Optional[FlowRecord]:
        flow = db.session.get(PromptFlow, str(flow_id))
        if not flow:
            return None
        return FlowRecord(id=flow.id, owner_id=flow.user_id, name=flow.name)

    def get_ordered_steps(self, flow_id: str) -> List[StepRecord]:
        steps = (
            FlowStep.query
            .options(joinedload(FlowStep.prompt), joinedload(FlowStep.override))
            .filter_by(flow_id=str(flow_id))
            .order_by(FlowStep.order_index.asc())
            .all()
        )

        records = []
        for step in steps:
            override = step.override
            records.append(StepRecord(
                id=step.id,
                order_index=step.order_index,
                step_title=step.step_title,
                prompt_id=step.prompt_id,
                prompt_title=step.prompt.title if step.prompt else None,
                content=step.prompt.content if step.prompt else '',
                custom_content=override.custom_content if override else None,
                variables=dict(override.variables or {}) if override else {},
            ))

        logger.debug(f"Loaded {len(records)} steps for flow {flow_id}")
        return records

    def get_prompt(self, prompt_id: str) -> Optional[PromptRecord]:
        prompt = db.session.get(Prompt, str(prompt_id))
        if not prompt:
            return None
        return PromptRecord(
            id=prompt.id,
            owner_id=prompt.user_id,
            title=prompt.title,
            content=prompt.content or '',
            access=prompt.access,
        )

    def increment_prompt_views(self, prompt_id: str) -> None:
        prompt = db.session.get(Prompt, str(prompt_id))
        if not prompt:
            return
        prompt.views = (prompt.views or 0) + 1
        db.session.commit()
