# middleware/security.py
"""
Security Middleware for Request Processing
"""

from flask import request, current_app, g
from functools import wraps
import logging
from typing import Any

from core.errors import RateLimitExceeded
from core.rate_limiter import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


def build_csp(policy: dict) -> str:
    return '; '.join(f"{directive} {sources}" for directive, sources in policy.items())


def security_headers(response):
    """Add security headers to all responses"""
    for header, value in current_app.config['SECURITY_HEADERS'].items():
        response.headers[header] = value
    response.headers['Content-Security-Policy'] = build_csp(current_app.config['CSP_POLICY'])
    response.headers.pop('Server', None)
    response.headers.pop('X-Powered-By', None)

    return response


def sanitize_payload(value: Any) -> Any:
    """
    Strip operator-style keys and NUL characters from decoded JSON

    Keys beginning with ``$`` or containing ``.`` are dropped at every level.
    """
    if isinstance(value, dict):
        return {
            key: sanitize_payload(item)
            for key, item in value.items()
            if not (isinstance(key, str) and (key.startswith('$') or '.' in key))
        }
    if isinstance(value, list):
        return [sanitize_payload(item) for item in value]
    if isinstance(value, str):
        return value.replace('\x00', '')
    return value


def sanitize_request_body():
    """Store the sanitized JSON body on ``g.payload``"""
    data = request.get_json(silent=True) if request.is_json else None
    payload = sanitize_payload(data) if data is not None else {}
    g.payload = payload if isinstance(payload, dict) else {}


def check_limit(limiter: RateLimiter) -> RateLimitResult:
    """
    Count the current request against ``limiter``

    Raises:
        RateLimitExceeded: when the client is over the limit
    """
    key = request.remote_addr or 'unknown'
    limit_info = limiter.hit(key)

    if not limit_info.allowed:
        logger.warning(f"Rate limit '{limiter.name}' exceeded for {key} "
                       f"({limit_info.current}/{limit_info.limit}, resets in {limit_info.reset_in}s)")
        raise RateLimitExceeded(limiter.message, limit=limit_info.limit, reset_in=limit_info.reset_in)

    return limit_info


def global_rate_limit():
    """before_request hook applying the application-wide limiter"""
    check_limit(current_app.extensions['contact_relay']['global_limiter'])


def rate_limit(limiter_name: str):
    """Decorator for rate limiting"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            limit_info = check_limit(current_app.extensions['contact_relay'][limiter_name])

            # Add rate limit headers
            response = current_app.make_response(f(*args, **kwargs))
            response.headers['X-RateLimit-Limit'] = str(limit_info.limit)
            response.headers['X-RateLimit-Remaining'] = str(limit_info.remaining)

            return response
        return decorated_function
    return decorator


def init_security_middleware(app):
    """Register the middleware chain in order: global limiter, then body sanitization"""
    app.before_request(global_rate_limit)
    app.before_request(sanitize_request_body)
    app.after_request(security_headers)
