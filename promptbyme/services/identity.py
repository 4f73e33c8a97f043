"""
Identity service - resolves bearer credentials to a user id.

Two kinds of credential are accepted:
- Supabase session tokens (web app), checked against the Supabase Auth REST API
- promptby.me API keys (public API), looked up in the api_keys table
"""

import logging
from typing import Optional

import httpx
from flask import current_app

from promptbyme.models import ApiKey, PBM_API_KEY_TYPE

logger = logging.getLogger(__name__)


class IdentityServiceError(Exception):
    """Identity backend could not be reached or answered unexpectedly"""
    pass


class IdentityService:

    def __init__(self, supabase_url: str, anon_key: str, timeout: float = 10, client: Optional[httpx.Client] = None):
        self.supabase_url = (supabase_url or '').rstrip('/')
        self.anon_key = anon_key
        self.timeout = timeout
        self._client = client

    def resolve_session_token(self, token: str) -> Optional[str]:
        """
        Resolve a Supabase session token to its user id.

        Returns:
            User id, or None when the token is invalid or expired

        Raises:
            IdentityServiceError: auth backend unreachable or misconfigured
        """
        if not token:
            return None
        if not self.supabase_url:
            raise IdentityServiceError('SUPABASE_URL is not configured')

        headers = {
            'apikey': self.anon_key or '',
            'Authorization': f'Bearer {token}',
        }
        url = f'{self.supabase_url}/auth/v1/user'

        try:
            if self._client is not None:
                response = self._client.get(url, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Identity lookup failed: {type(e).__name__}: {e}")
            raise IdentityServiceError(f'Identity service unreachable: {e}') from e

        if response.status_code in (400, 401, 403, 404):
            logger.info(f"Session token rejected by auth backend (HTTP {response.status_code})")
            return None

        if not response.is_success:
            raise IdentityServiceError(f'Identity service error (HTTP {response.status_code})')

        try:
            user = response.json()
        except ValueError as e:
            raise IdentityServiceError('Invalid response from identity service') from e

        user_id = user.get('id') if isinstance(user, dict) else None
        return str(user_id) if user_id else None

    def resolve_api_key(self, token: str) -> Optional[str]:
        """Resolve a promptby.me API key to the owning user id"""
        if not token:
            return None
        api_key = ApiKey.query.filter_by(key=token, key_type=PBM_API_KEY_TYPE).first()
        if not api_key:
            return None
        return api_key.user_id


def get_identity_service() -> IdentityService:
    config = current_app.config
    return IdentityService(
        supabase_url=config.get('SUPABASE_URL', ''),
        anon_key=config.get('SUPABASE_ANON_KEY', ''),
        timeout=config.get('AUTH_REQUEST_TIMEOUT', 10),
    )
