"""
Flow Executor - runs the steps of a prompt flow in order

Responsibilities:
- Load the flow's steps sorted by order index
- Render each step's prompt against the current variable set
- Call the provider for each step, one at a time
- Thread each output forward as {{step_<N>_output}}
- Stop at the first failing step (no partial results, no retries)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from promptbyme.flow_engine.exceptions import EmptyFlow, MissingVariables, ReservedVariables, StepExecutionError
from promptbyme.flow_engine.variable_resolver import (
    VariableSet,
    find_placeholders,
    render,
    step_output_key,
)
from promptbyme.services.ai import AIGenerationError, LLMService, ModelBinding
from promptbyme.services.flow_store import FlowRecord, FlowStore, StepRecord

logger = logging.getLogger(__name__)

CONTEXT_PREFIX = 'Reference from previous step:\n{output}\n\n'


class StepState(str, Enum):
    """Lifecycle of one step within a run"""
    PENDING = "PENDING"
    RENDERING = "RENDERING"
    CALLING_PROVIDER = "CALLING_PROVIDER"
    RECORDED = "RECORDED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class StepResult:
    step_id: str
    step_title: str
    order_index: int
    prompt: str
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step_id': self.step_id,
            'step_title': self.step_title,
            'order_index': self.order_index,
            'prompt': self.prompt,
            'result': self.result,
        }


@dataclass(frozen=True)
class FlowRunResult:
    flow_id: str
    flow_name: str
    results: Tuple[StepResult, ...]
    variables: VariableSet

    @property
    def output(self) -> str:
        """Output of the last step"""
        return self.results[-1].result if self.results else ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'flow_id': self.flow_id,
            'flow_name': self.flow_name,
            'results': [r.to_dict() for r in self.results],
        }


@dataclass
class RunOptions:
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    # Fail a step whose rendered prompt still has {{placeholders}}
    strict_variables: bool = False
    # Prefix each step with the previous step's output
    chain_context: bool = False


class FlowExecutor:
    """
    Sequencer for prompt flows.

    Usage:
        async with LLMService() as llm:
            executor = FlowExecutor(FlowStore(), llm)
            run = await executor.execute(flow, bind_model('gpt-4o'), api_key, {'topic': 'cats'})
    """

    def __init__(self, store: FlowStore, llm_service: LLMService):
        self.store = store
        self.llm_service = llm_service

    def load_steps(self, flow: FlowRecord) -> List[StepRecord]:
        steps = self.store.get_ordered_steps(flow.id)
        # order_index is a total-order key, not necessarily contiguous
        return sorted(steps, key=lambda s: s.order_index)

    async def execute(
        self,
        flow: FlowRecord,
        binding: ModelBinding,
        api_key: str,
        initial_variables: Optional[Mapping[str, Any]] = None,
        options: Optional[RunOptions] = None,
    ) -> FlowRunResult:
        """
        Execute every step of an authorized flow.

        Returns:
            FlowRunResult with one StepResult per step, in order-index order

        Raises:
            EmptyFlow: the flow has no steps (no provider call is made)
            StepExecutionError: a step failed; names the step
        """
        options = options or RunOptions()
        steps = self.load_steps(flow)
        if not steps:
            logger.info(f"Flow {flow.id} has no steps")
            raise EmptyFlow()

        total_steps = len(steps)
        logger.info(
            f"Executing flow {flow.id} ({flow.name}) - {total_steps} steps, "
            f"provider={binding.provider}, model={binding.model}"
        )

        variables = VariableSet(initial_variables)
        reserved = [step_output_key(p) for p in range(1, total_steps + 1) if step_output_key(p) in variables]
        if reserved:
            raise ReservedVariables(reserved)

        results: List[StepResult] = []
        previous_output = ''

        for position, step in enumerate(steps, start=1):
            self._transition(step, StepState.PENDING, position, total_steps)

            self._transition(step, StepState.RENDERING, position, total_steps)
            prompt = self.render_step(step, variables, options)
            if options.chain_context and previous_output:
                prompt = CONTEXT_PREFIX.format(output=previous_output) + prompt

            self._transition(step, StepState.CALLING_PROVIDER, position, total_steps)
            try:
                response = await self.llm_service.generate_text(
                    binding,
                    prompt,
                    api_key,
                    temperature=options.temperature,
                    max_tokens=options.max_tokens,
                )
            except AIGenerationError as e:
                self._transition(step, StepState.FAILED, position, total_steps)
                logger.error(f"Step failed: {step.step_title} - {e.message}")
                raise StepExecutionError(
                    f'Error in step "{step.step_title}": {e.message}',
                    step=step.step_title,
                    step_index=step.order_index,
                ) from e

            results.append(StepResult(
                step_id=step.id,
                step_title=step.step_title,
                order_index=step.order_index,
                prompt=prompt,
                result=response.text,
            ))
            variables = variables.with_value(step_output_key(position), response.text)
            previous_output = response.text
            self._transition(step, StepState.RECORDED, position, total_steps)

        logger.info(f"Flow {flow.id} completed: {len(results)} steps")

        return FlowRunResult(
            flow_id=flow.id,
            flow_name=flow.name,
            results=tuple(results),
            variables=variables,
        )

    def render_step(self, step: StepRecord, variables: VariableSet, options: RunOptions) -> str:
        """
        Render a step's template.

        Step-level variables from the flow editor take precedence over the
        run's variable set for this render only.
        """
        merged = variables.overlay(step.variables)
        prompt = render(step.template, merged)

        if options.strict_variables:
            # Only the step's own template counts; earlier outputs may contain literal {{...}}
            remaining = [name for name in find_placeholders(step.template) if name not in merged]
            if remaining:
                self._transition(step, StepState.FAILED)
                raise MissingVariables(remaining, step=step.step_title, step_index=step.order_index)

        return prompt

    def _transition(self, step: StepRecord, state: StepState, position: int = None, total: int = None):
        if state == StepState.PENDING:
            logger.info(f"Executing step {position}/{total}: {step.step_title}")
        else:
            logger.debug(f"Step {step.step_title} -> {state.value}")
