from functools import wraps
from typing import Optional

from flask import request, jsonify, g


def parse_bearer(auth_value: Optional[str]) -> Optional[str]:
    """Extract the token from "Bearer {token}"; None when missing or malformed"""
    if not auth_value:
        return None
    try:
        token_type, token = auth_value.strip().split(' ', 1)
    except ValueError:
        return None
    if token_type.lower() != 'bearer':
        return None
    token = token.strip()
    return token or None


def require_api_key(f):
    """Decorator requiring a promptby.me API key as Bearer token.
    Sets g.user_id to the key owner.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from promptbyme.services.identity import get_identity_service

        auth_value = request.headers.get('Authorization')

        if not auth_value:
            return jsonify({
                'success': False,
                'error': 'No authorization header provided'
            }), 401

        token = parse_bearer(auth_value)
        if not token:
            return jsonify({
                'success': False,
                'error': 'Invalid authorization header format. Use: Bearer {token}'
            }), 401

        user_id = get_identity_service().resolve_api_key(token)
        if not user_id:
            return jsonify({
                'success': False,
                'error': 'Invalid API key'
            }), 401

        g.user_id = user_id

        return f(*args, **kwargs)

    return decorated_function
