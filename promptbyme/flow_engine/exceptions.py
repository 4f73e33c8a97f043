"""
Flow execution errors.

Every failure is terminal for the run. Each class carries the HTTP status
the endpoints answer with, so views translate them without a lookup table.
"""

from typing import Dict, List, Optional


class FlowExecutionError(Exception):
    """Base class for flow execution failures"""

    status_code = 500
    error_type = 'InternalError'

    def __init__(self, message: str, step: Optional[str] = None, step_index: Optional[int] = None):
        self.message = message
        self.step = step
        self.step_index = step_index
        super().__init__(self.message)

    def to_dict(self) -> Dict:
        payload = {'error': self.message}
        if self.step is not None:
            payload['step'] = self.step
            payload['step_index'] = self.step_index
        return payload


class InternalError(FlowExecutionError):
    pass


class Unauthenticated(FlowExecutionError):
    status_code = 401
    error_type = 'Unauthenticated'

    def __init__(self, message: str = 'Unauthenticated'):
        super().__init__(message)


class Forbidden(FlowExecutionError):
    status_code = 403
    error_type = 'Forbidden'

    def __init__(self, message: str = 'Access denied: You do not have access to this flow'):
        super().__init__(message)


class NotFound(FlowExecutionError):
    status_code = 404
    error_type = 'NotFound'

    def __init__(self, message: str = 'Flow not found'):
        super().__init__(message)


class MissingParameters(FlowExecutionError):
    status_code = 400
    error_type = 'MissingParameters'

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class ReservedVariables(FlowExecutionError):
    """Caller variables collide with the step output names the run will set"""

    status_code = 400
    error_type = 'ReservedVariables'

    def __init__(self, names: List[str]):
        self.names = list(names)
        super().__init__(f"Reserved variable names: {', '.join(self.names)}")


class EmptyFlow(FlowExecutionError):
    status_code = 400
    error_type = 'EmptyFlow'

    def __init__(self, message: str = 'No steps found for this flow'):
        super().__init__(message)


class UnsupportedModel(FlowExecutionError):
    status_code = 400
    error_type = 'UnsupportedModel'


class StepExecutionError(FlowExecutionError):
    """A step failed; names the step so the caller can fix it and re-run"""

    status_code = 500
    error_type = 'StepFailed'


class MissingVariables(StepExecutionError):
    status_code = 400
    error_type = 'MissingVariables'

    def __init__(self, names: List[str], step: str, step_index: int):
        self.names = list(names)
        placeholders = ', '.join('{{%s}}' % name for name in self.names)
        super().__init__(f'Missing variables in step "{step}": {placeholders}', step=step, step_index=step_index)

    def to_dict(self) -> Dict:
        payload = super().to_dict()
        payload['missingVariables'] = self.names
        return payload
