"""
Prompt Flow execution - endpoint used by the web app's flow editor

Endpoints:
- POST /functions/v1/run-prompt-flow - Run a flow with the caller's provider key
"""

from flask import Blueprint, request, jsonify
import logging

from promptbyme.flow_engine.authorization import AuthorizationGate
from promptbyme.flow_engine.exceptions import FlowExecutionError, InternalError, MissingParameters
from promptbyme.services.flow_execution_service import get_flow_execution_service
from promptbyme.services.identity import get_identity_service

logger = logging.getLogger(__name__)

prompt_flows_bp = Blueprint('prompt_flows', __name__, url_prefix='/functions/v1')


def error_response(error: FlowExecutionError):
    payload = {'success': False}
    payload.update(error.to_dict())
    return jsonify(payload), error.status_code


@prompt_flows_bp.route('/run-prompt-flow', methods=['POST'])
def run_prompt_flow():
    """
    Run every step of a flow owned by the caller.

    Headers:
        Authorization: Bearer <session token>

    Body:
        {
            "flowId": "uuid",
            "apiKey": "provider key",
            "model": "gpt-4o-mini",
            "initialVariables": {"topic": "cats"}
        }

    Returns:
        200 {success, flow_id, flow_name, results: [...]}
        4xx/5xx {error, step?}
    """
    service = get_flow_execution_service()
    gate = AuthorizationGate(get_identity_service().resolve_session_token, service.store)

    try:
        caller_id = gate.authenticate(request.headers.get('Authorization'))

        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise MissingParameters(['JSON body'])

        required = (('flowId', data.get('flowId')), ('apiKey', data.get('apiKey')), ('model', data.get('model')))
        missing = [name for name, value in required if not value]
        if missing:
            raise MissingParameters(missing)
        not_strings = [f'{name} (string)' for name, value in required if not isinstance(value, str)]
        if not_strings:
            raise MissingParameters(not_strings)

        flow_id, api_key, model = [value for _, value in required]
        initial_variables = data.get('initialVariables') or {}
        if not isinstance(initial_variables, dict):
            raise MissingParameters(['initialVariables (object)'])

        # Ownership is settled before the model, so a non-owner always gets 403
        authorized = gate.authorize_caller(caller_id, flow_id)
        binding = service.bind(model)

        run = service.run_flow(authorized.flow, binding, api_key, initial_variables)
        return jsonify(run.to_dict()), 200

    except FlowExecutionError as e:
        if e.status_code >= 500:
            logger.error(f"Error in run-prompt-flow: {e.message}")
        return error_response(e)

    except Exception as e:
        logger.exception(f"Unexpected error in run-prompt-flow: {e}")
        return error_response(InternalError(str(e) or 'An unexpected error occurred'))
