"""
Trackmate Error Taxonomy

Every failure a service can report maps onto one of these classes, and the
API layer turns each class into an HTTP status:

- AuthenticationError -> 401
- InvalidInputError   -> 400
- ForbiddenError      -> 403
- NotFoundError       -> 404
- StorageError        -> 500
"""


class TrackmateError(Exception):
    """Base class for all Trackmate errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(TrackmateError):
    """No identity, or the identity could not be verified"""

    status_code = 401


class InvalidInputError(TrackmateError):
    """Rejected before any write; the caller can fix the input and retry"""

    status_code = 400


class LapTimeValidationError(InvalidInputError):
    """Lap time outside the plausibility bounds"""


class DeepLinkError(InvalidInputError):
    """Malformed or unsupported timing deep link"""


class NotFoundError(TrackmateError):
    status_code = 404


class ForbiddenError(TrackmateError):
    """Authenticated, but acting on something owned by another driver"""

    status_code = 403


class StorageError(TrackmateError):
    """Backend/storage failure, surfaced verbatim"""

    status_code = 500
