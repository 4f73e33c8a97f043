"""
Authorization Gate - caller identity and flow ownership check.

Runs before any step executes. The credential is checked before the flow
is read, so unauthenticated callers never reach the store.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from promptbyme.flow_engine.exceptions import Unauthenticated, Forbidden, NotFound, InternalError
from promptbyme.services.flow_store import FlowRecord, FlowStore
from promptbyme.services.identity import IdentityServiceError
from promptbyme.utils.auth import parse_bearer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizedFlow:
    caller_id: str
    flow: FlowRecord


class AuthorizationGate:
    """
    Usage:
        gate = AuthorizationGate(identity.resolve_session_token, FlowStore())
        authorized = gate.authorize(request.headers.get('Authorization'), flow_id)
    """

    def __init__(self, resolve_identity: Callable[[str], Optional[str]], store: FlowStore):
        self.resolve_identity = resolve_identity
        self.store = store

    def authenticate(self, authorization_header: Optional[str]) -> str:
        """
        Resolve the caller id from an Authorization header.

        Raises:
            Unauthenticated: header missing, not Bearer, or token unknown
        """
        token = parse_bearer(authorization_header)
        if not token:
            raise Unauthenticated('No authorization header provided' if not authorization_header
                                  else 'Invalid authorization header format. Use: Bearer {token}')

        try:
            caller_id = self.resolve_identity(token)
        except IdentityServiceError as e:
            raise InternalError(str(e)) from e

        if not caller_id:
            raise Unauthenticated('Invalid or expired credentials')
        return caller_id

    def authorize(self, authorization_header: Optional[str], flow_id: str) -> AuthorizedFlow:
        """
        Authenticate the caller and confirm they own the flow.

        Raises:
            Unauthenticated, NotFound, Forbidden
        """
        caller_id = self.authenticate(authorization_header)
        return self.authorize_caller(caller_id, flow_id)

    def authorize_caller(self, caller_id: str, flow_id: str) -> AuthorizedFlow:
        flow = self.store.get_flow(flow_id)
        if flow is None:
            logger.info(f"Flow not found: {flow_id}")
            raise NotFound()

        if str(flow.owner_id) != str(caller_id):
            logger.warning(f"User {caller_id} denied access to flow {flow_id}")
            raise Forbidden()

        return AuthorizedFlow(caller_id=str(caller_id), flow=flow)
