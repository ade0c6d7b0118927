"""
Identity verifier — exchanges a bearer token with Supabase Auth for a user.

No local session state: every protected request costs one round trip.
"""
import logging
from typing import Any, Dict, NamedTuple, Optional

import requests

from dealflow.errors import UnauthenticatedError

logger = logging.getLogger('services.identity')

BEARER_PREFIX = 'Bearer '


class AuthenticatedUser(NamedTuple):
    id: str
    email: Optional[str]
    metadata: Dict[str, Any]


def extract_bearer_token(header_value: Optional[str]) -> str:
    """Pull the token out of an Authorization header or raise 401."""
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        raise UnauthenticatedError('No token provided')
    token = header_value[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError('No token provided')
    return token


class IdentityProvider:
    """Thin client for GET {supabase_url}/auth/v1/user."""

    def __init__(self, base_url: Optional[str], api_key: Optional[str], timeout: int = 10):
        self.base_url = (base_url or '').rstrip('/')
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def get_user(self, token: str) -> AuthenticatedUser:
        if not self.configured:
            logger.error("Identity provider not configured; rejecting token")
            raise UnauthenticatedError('Authentication failed')

        try:
            resp = requests.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    'apikey': self.api_key,
                    'Authorization': f'{BEARER_PREFIX}{token}',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Identity provider request failed: %s", e)
            raise UnauthenticatedError('Authentication failed')

        if resp.status_code != 200:
            logger.info("Identity provider rejected token: %d", resp.status_code)
            raise UnauthenticatedError('Invalid token')

        try:
            user = resp.json()
        except ValueError:
            user = None

        if not isinstance(user, dict) or not user.get('id'):
            raise UnauthenticatedError('Invalid token')

        return AuthenticatedUser(
            id=str(user['id']),
            email=user.get('email'),
            metadata=user.get('user_metadata') or {},
        )
