"""
Authorization gate — route decorators for bearer auth and the admin role.
"""
import functools
import hmac
import logging

from flask import current_app, g, request

from dealflow.errors import ForbiddenError, UnauthorizedError
from dealflow.services.identity import extract_bearer_token
from dealflow.services.profiles import get_profile

logger = logging.getLogger('auth')

WEBHOOK_SECRET_HEADER = 'X-Webhook-Secret'


def authenticate_request():
    """Resolve the caller from the Authorization header and stash it on g.user."""
    token = extract_bearer_token(request.headers.get('Authorization'))
    provider = current_app.extensions['identity_provider']
    g.user = provider.get_user(token)
    return g.user


def require_auth(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)
    return wrapper


def require_admin(view):
    """Bearer auth plus an admin role on the caller's profile (one extra read)."""
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        user = authenticate_request()
        profile = get_profile(user.id)
        if profile is None or not profile.is_admin:
            logger.info("Admin access denied for %s", user.id)
            raise ForbiddenError('Admin access required')
        return view(*args, **kwargs)
    return wrapper


def check_webhook_secret(expected):
    """Compare X-Webhook-Secret against expected; no-op when no secret is set."""
    if not expected:
        return
    provided = request.headers.get(WEBHOOK_SECRET_HEADER, '')
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise UnauthorizedError('Invalid webhook secret')
