"""
Typed service-layer errors.

Services raise these; the error handlers registered by the application
factory translate them into the JSON error envelope using
``status_code``.  Routes never build error responses for these cases
themselves.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 500

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationFailure(ServiceError):
    """Request body or query string failed validation."""

    status_code = 400


class NotFoundError(ServiceError):
    """An id references nothing."""

    status_code = 404


class DuplicateConstraintError(ServiceError):
    """A unique field (department name, employee email) would collide."""

    status_code = 409


class ReferentialViolationError(ServiceError):
    """
    A foreign key is missing, or a delete is blocked by dependents.
    """

    status_code = 400


class UnsupportedFormatError(ServiceError):
    """Export requested in a format the renderer cannot produce."""

    status_code = 400


class StoreUnavailableError(ServiceError):
    """The database failed underneath a read or aggregate query."""

    status_code = 500
