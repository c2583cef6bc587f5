"""
Bearer-token authentication for the API.
A token is valid only while its identity is the logged-in session.
"""
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, jsonify, request


def issue_token(identity):
    now = datetime.now(timezone.utc)
    payload = {
        'sub': identity,
        'iat': now,
        'exp': now + timedelta(hours=current_app.config['TOKEN_TTL_HOURS'])
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')


def decode_token():
    """
    Decode the JWT from the Authorization header.
    Returns the payload, or None when missing or invalid.
    """
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None

    token = auth_header.split(' ', 1)[1]
    try:
        return jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=['HS256'])
    except jwt.InvalidTokenError:
        return None


def get_identity_from_request():
    payload = decode_token()
    return payload.get('sub') if payload else None


def require_auth(f):
    """
    Decorator to require the current session's token.

    Usage:
    @students_bp.route('', methods=['POST'])
    @require_auth
    def create_student():
        ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = get_identity_from_request()
        services = current_app.extensions['classroom']
        active = services.runner.call(lambda: services.sessions.identity)
        if not identity or identity != active:
            return jsonify({
                'success': False,
                'error': 'Authentication required',
                'code': 'AUTH_REQUIRED'
            }), 401
        return f(*args, **kwargs)
    return decorated_function
