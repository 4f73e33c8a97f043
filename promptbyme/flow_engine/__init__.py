"""
Flow Engine - prompt flow execution

Runs the ordered steps of a prompt flow against an LLM provider, threading
each step's output into the next step's variables.
"""

from promptbyme.flow_engine.executor import FlowExecutor, FlowRunResult, RunOptions, StepResult, StepState
from promptbyme.flow_engine.authorization import AuthorizationGate, AuthorizedFlow
from promptbyme.flow_engine.variable_resolver import VariableSet, render, find_placeholders, step_output_key

__all__ = [
    'FlowExecutor',
    'FlowRunResult',
    'RunOptions',
    'StepResult',
    'StepState',
    'AuthorizationGate',
    'AuthorizedFlow',
    'VariableSet',
    'render',
    'find_placeholders',
    'step_output_key',
]
