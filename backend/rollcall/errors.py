"""Error taxonomy for enrollment, token and check-in operations.

Each error carries a stable ``code`` used by clients to pick the recovery
action (re-enroll, re-scan, wait for a new token, retry) and the HTTP status
returned by the API error handler.
"""


class RollcallError(Exception):
    """Base class for errors surfaced to API callers."""

    code = 'Error'
    status_code = 400
    default_message = 'Request could not be completed'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {
            'error': True,
            'code': self.code,
            'message': self.message,
            'status_code': self.status_code
        }


class ValidationError(RollcallError):
    """Request payload or query parameters are invalid."""
    code = 'ValidationError'
    status_code = 400
    default_message = 'Invalid request'


class Forbidden(RollcallError):
    code = 'Forbidden'
    status_code = 403
    default_message = 'Instructor access required'


class InvalidCredential(RollcallError):
    """Identity credential is malformed, expired or not signed by the provider."""
    code = 'InvalidCredential'
    status_code = 401
    default_message = 'Your sign-in could not be verified. Please sign in again.'


class BatchNotFound(RollcallError):
    code = 'BatchNotFound'
    status_code = 404
    default_message = 'This batch does not exist. Please check the link you scanned.'


class BatchInactive(RollcallError):
    code = 'BatchInactive'
    status_code = 410
    default_message = 'This batch has been closed by the instructor.'


class NotEnrolled(RollcallError):
    code = 'NotEnrolled'
    status_code = 403
    default_message = 'You are not enrolled in this batch. Please enroll first.'


class InvalidToken(RollcallError):
    code = 'InvalidToken'
    status_code = 400
    default_message = 'This attendance code is not valid. Please scan the QR code again.'


class TokenBatchMismatch(RollcallError):
    code = 'TokenBatchMismatch'
    status_code = 400
    default_message = 'This attendance code belongs to a different batch.'


class TokenExpired(RollcallError):
    code = 'TokenExpired'
    status_code = 410
    default_message = "This attendance code has expired. Please scan today's QR code."


class Transient(RollcallError):
    """Network or timeout failure; the caller may retry safely."""
    code = 'Transient'
    status_code = 503
    default_message = 'The service is temporarily unavailable. Please try again.'
