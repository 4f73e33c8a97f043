from .prompt import Prompt, PromptAccess
from .flow import PromptFlow, FlowStep, FlowStepOverride
from .api import ApiKey, ApiCallLog, PBM_API_KEY_TYPE, ANONYMOUS_USER_ID

__all__ = [
    'Prompt',
    'PromptAccess',
    'PromptFlow',
    'FlowStep',
    'FlowStepOverride',
    'ApiKey',
    'ApiCallLog',
    'PBM_API_KEY_TYPE',
    'ANONYMOUS_USER_ID',
]
