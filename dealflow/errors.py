"""
Error taxonomy — every handler failure maps to one of these and renders as
{"error": <message>} with the class's status code.
"""


class ApiError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request body'


class UnauthenticatedError(ApiError):
    status_code = 401
    default_message = 'Authentication failed'


class UnauthorizedError(ApiError):
    """Shared-secret mismatch on an inbound webhook."""
    status_code = 401
    default_message = 'Invalid webhook secret'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Admin access required'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


class StoreError(ApiError):
    status_code = 500
    default_message = 'Database error'


class UpstreamError(ApiError):
    """SMTP relay or outbound webhook failure."""
    status_code = 502
    default_message = 'Upstream service error'


class ServiceUnavailableError(ApiError):
    status_code = 503
    default_message = 'Service unavailable'
