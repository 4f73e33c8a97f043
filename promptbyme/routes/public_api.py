"""
Public API - run prompts and flows with a promptby.me API key

Endpoints:
- POST /functions/v1/run-prompt-flow-api - Run a flow (strict variables, chained context)
- POST /functions/v1/run-prompt-api - Run a single stored prompt

Every run-prompt-flow-api call is written to api_call_logs.
"""

from flask import Blueprint, request, jsonify, g
import logging

from promptbyme.flow_engine.authorization import AuthorizationGate
from promptbyme.flow_engine.exceptions import (
    FlowExecutionError,
    InternalError,
    MissingParameters,
    StepExecutionError,
    UnsupportedModel,
)
from promptbyme.flow_engine.executor import RunOptions
from promptbyme.flow_engine.variable_resolver import find_placeholders, render
from promptbyme.services.ai import AIGenerationError
from promptbyme.services.call_logger import ApiCallLogger, redact_request_body
from promptbyme.services.flow_execution_service import get_flow_execution_service
from promptbyme.services.identity import get_identity_service
from promptbyme.utils.auth import require_api_key

logger = logging.getLogger(__name__)

public_api_bp = Blueprint('public_api', __name__, url_prefix='/functions/v1')

DEFAULT_API_PROVIDER = 'groq'


def _sampling_options(data):
    """temperature / max_tokens from the body; None means the service default"""
    temperature = data.get('temperature')
    max_tokens = data.get('max_tokens')
    try:
        temperature = float(temperature) if temperature is not None else None
        max_tokens = int(max_tokens) if max_tokens is not None else None
    except (TypeError, ValueError):
        raise MissingParameters(['temperature (number)', 'max_tokens (integer)'])
    return temperature, max_tokens


def _require_strings(data, names):
    """Reject fields that are present but not strings"""
    not_strings = [
        f'{name} (string)' for name in names
        if data.get(name) is not None and not isinstance(data.get(name), str)
    ]
    if not_strings:
        raise MissingParameters(not_strings)


def _bind(service, data):
    """An omitted provider means Groq, whatever the model; the model then defaults per provider"""
    _require_strings(data, ('model', 'provider'))
    provider = data.get('provider') or DEFAULT_API_PROVIDER
    return service.bind(data.get('model') or None, provider)


@public_api_bp.route('/run-prompt-flow-api', methods=['POST'])
def run_prompt_flow_api():
    """
    Run a flow through the public API.

    Headers:
        Authorization: Bearer <pbm_api_key>

    Body:
        {
            "flow_id": "uuid",
            "api_key": "provider key",
            "provider": "groq",            // optional
            "model": "llama3-8b-8192",     // optional
            "variables": {...},            // optional
            "temperature": 0.7,            // optional
            "max_tokens": 1000             // optional
        }

    Returns:
        200 {success, output, step_outputs, flow: {id, name, steps}}
    """
    call_log = ApiCallLogger()
    service = get_flow_execution_service()
    gate = AuthorizationGate(get_identity_service().resolve_api_key, service.store)

    user_id = None
    logged_body = {'error': 'Request body not logged for failed auth'}

    try:
        try:
            user_id = gate.authenticate(request.headers.get('Authorization'))
        except FlowExecutionError as e:
            if e.status_code == 401 and request.headers.get('Authorization'):
                e.message = 'Invalid API key'
            raise

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            logged_body = {'error': 'Invalid JSON in request body'}
            raise MissingParameters(['JSON body'])
        logged_body = redact_request_body(data)

        flow_id = data.get('flow_id')
        api_key = data.get('api_key')
        variables = data.get('variables') or {}

        missing = [name for name, value in (('flow_id', flow_id), ('api_key', api_key)) if not value]
        if missing:
            raise MissingParameters(missing)
        _require_strings(data, ('flow_id', 'api_key'))
        if not isinstance(variables, dict):
            raise MissingParameters(['variables (object)'])

        temperature, max_tokens = _sampling_options(data)
        authorized = gate.authorize_caller(user_id, flow_id)
        binding = _bind(service, data)

        options = RunOptions(
            temperature=temperature,
            max_tokens=max_tokens,
            strict_variables=True,
            chain_context=True,
        )
        run = service.run_flow(authorized.flow, binding, api_key, variables, options)

        response_body = {
            'success': True,
            'output': run.output,
            'step_outputs': {r.step_id: r.result for r in run.results},
            'flow': {
                'id': run.flow_id,
                'name': run.flow_name,
                'steps': [
                    {'id': r.step_id, 'title': r.step_title, 'order_index': r.order_index}
                    for r in run.results
                ],
            },
        }
        status = 200

    except FlowExecutionError as e:
        response_body = {'success': False}
        response_body.update(e.to_dict())
        if isinstance(e, StepExecutionError):
            response_body['error'] = f'Flow execution error: {e.message}'
        status = e.status_code
        if status >= 500:
            logger.error(f"Error in run-prompt-flow-api: {e.message}")

    except Exception as e:
        logger.exception(f"Unexpected error in run-prompt-flow-api: {e}")
        response_body = {'success': False, 'error': str(e) or 'An unexpected error occurred'}
        status = 500

    call_log.record(user_id, status, logged_body, response_body)
    return jsonify(response_body), status


@public_api_bp.route('/run-prompt-api', methods=['POST'])
@require_api_key
def run_prompt_api():
    """
    Run a single stored prompt.

    Body:
        {
            "prompt_id": "uuid",
            "api_key": "provider key",
            "provider": "openai",    // optional
            "model": "gpt-4o-mini",  // optional
            "variables": {...}       // optional
        }

    Returns:
        200 {success, output, prompt: {id, title, processed_content}, model}
        400 {success: false, error, missingVariables} when placeholders are left
    """
    service = get_flow_execution_service()

    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise MissingParameters(['JSON body'])

        prompt_id = data.get('prompt_id')
        api_key = data.get('api_key')
        variables = data.get('variables') or {}

        if not prompt_id:
            return jsonify({'success': False, 'error': 'Prompt ID is required'}), 400
        if not api_key:
            return jsonify({'success': False, 'error': 'AI provider API key is required'}), 400
        _require_strings(data, ('prompt_id', 'api_key'))
        if not isinstance(variables, dict):
            raise MissingParameters(['variables (object)'])

        prompt = service.store.get_prompt(prompt_id)
        if prompt is None:
            return jsonify({'success': False, 'error': 'Prompt not found'}), 404

        if not prompt.is_visible_to(g.user_id):
            return jsonify({'success': False, 'error': 'Access denied: This prompt is private'}), 403

        processed_content = render(prompt.content, variables)
        # Checked against the stored template so braces inside variable values do not count
        remaining = [name for name in find_placeholders(prompt.content) if name not in variables]
        if remaining:
            return jsonify({
                'success': False,
                'error': 'Missing variables: ' + ', '.join('{{%s}}' % name for name in remaining),
                'missingVariables': remaining,
            }), 400

        temperature, max_tokens = _sampling_options(data)
        binding = _bind(service, data)

        try:
            response = service.run_prompt(binding, processed_content, api_key, temperature, max_tokens)
        except AIGenerationError as e:
            logger.error(f"AI call failed for prompt {prompt_id}: {e}")
            return jsonify({'success': False, 'error': f'AI API error: {e.message}'}), 500

        try:
            service.store.increment_prompt_views(prompt.id)
        except Exception as e:
            # The caller already has the output; a lost view count is acceptable
            logger.error(f"Failed to increment view count: {e}")

        return jsonify({
            'success': True,
            'output': response.text,
            'prompt': {
                'id': prompt.id,
                'title': prompt.title,
                'processed_content': processed_content,
            },
            'model': binding.model,
        }), 200

    except (MissingParameters, UnsupportedModel) as e:
        return jsonify({'success': False, 'error': e.message}), e.status_code

    except Exception as e:
        logger.exception(f"Error in run-prompt-api: {e}")
        return jsonify({'success': False, 'error': str(e) or 'An unexpected error occurred'}), 500
