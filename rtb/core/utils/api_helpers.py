"""Shared API utilities - auth decorator, JSON body validation, error helpers."""
import logging
from functools import wraps

from flask import jsonify, request
from flask_login import current_user

logger = logging.getLogger('rtb.api')


# ============== Decorators ==============

def api_login_required(f):
    """Like @login_required but returns JSON 401 instead of redirect."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated


# ============== Request Validation ==============

def get_json_or_error():
    """Get JSON from request body with null check.

    Returns (data, error_response) tuple. Caller pattern:
        data, error = get_json_or_error()
        if error:
            return error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, error_response('Invalid or missing JSON body', 400)
    return data, None


# ============== Error Handling ==============

def error_response(message, status_code=400):
    """Standard JSON error body."""
    return jsonify({'success': False, 'error': message}), status_code


def safe_error_response(e, status_code=500):
    """Return error response without leaking internals.

    - ValueError/KeyError: returns str(e) as 400 (validation, safe to expose)
    - Everything else: logs full exception, returns generic message
    """
    if isinstance(e, (ValueError, KeyError)):
        return error_response(str(e), 400)

    logger.exception('Unhandled error in API route')
    return error_response('An internal error occurred', status_code)
