"""
Error taxonomy for the Scarlet API.

Every error carries the HTTP status it maps to; the Flask error handler in
scarlet.views renders them as {"message": ...} bodies.
"""


class ScarletError(Exception):
    """Base class for all expected API failures"""
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message}


class ValidationError(ScarletError):
    status_code = 400
    default_message = 'Invalid request'


class AuthenticationError(ScarletError):
    status_code = 401
    default_message = 'Unauthorized: No token provided'


class AuthorizationError(ScarletError):
    status_code = 403
    default_message = 'Forbidden: Access denied'


class NotFoundError(ScarletError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(ScarletError):
    status_code = 409
    default_message = 'Conflict'


class DependencyError(ScarletError):
    """Store or identity provider failure"""
    status_code = 500
    default_message = 'Server error'


ERROR_KINDS = {
    'validation': ValidationError,
    'authentication': AuthenticationError,
    'authorization': AuthorizationError,
    'not_found': NotFoundError,
    'conflict': ConflictError,
    'dependency': DependencyError,
}
