"""
Error taxonomy for the classroom roster service.
Every controller and session operation fails with one of these.
"""


class ClassroomError(Exception):
    """Base class for all typed classroom errors"""
    code = 'CLASSROOM_ERROR'
    status_code = 500
    default_message = 'Unexpected classroom error'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        """Response body used by the API error handler"""
        body = {
            'success': False,
            'error': self.message,
            'code': self.code
        }
        if self.details:
            body['details'] = self.details
        return body


class NotAuthenticated(ClassroomError):
    code = 'AUTH_REQUIRED'
    status_code = 401
    default_message = 'Authentication required'


class NotFound(ClassroomError):
    code = 'NOT_FOUND'
    status_code = 404
    default_message = 'Student not found'


class StoreUnavailable(ClassroomError):
    code = 'STORE_UNAVAILABLE'
    status_code = 503
    default_message = 'Storage backend is unavailable'


class InvalidCredentials(ClassroomError):
    code = 'INVALID_CREDENTIALS'
    status_code = 401
    default_message = 'Invalid email or password'


class InvalidImportData(ClassroomError):
    code = 'INVALID_IMPORT_DATA'
    status_code = 400
    default_message = 'Import data is invalid'


class ValidationFailed(ClassroomError):
    code = 'VALIDATION_FAILED'
    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, errors, message=None):
        # errors maps field name -> message
        self.errors = dict(errors)
        super().__init__(message, fields=self.errors)


class InvalidSessionState(ClassroomError):
    code = 'INVALID_SESSION_STATE'
    status_code = 409
    default_message = 'Operation not allowed in the current session state'


class AccountExists(ClassroomError):
    code = 'ACCOUNT_EXISTS'
    status_code = 409
    default_message = 'Email already registered'
