# app/core/exceptions.py
"""Domain errors raised by services and rendered by the API layer"""


class AppError(Exception):
    """Base class for errors that map to a client-facing HTTP status"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    """Malformed or semantically invalid input"""

    status_code = 400


class DateRangeTooLargeError(BadRequestError):
    """Requested slot range exceeds the allowed number of days"""


class ForbiddenError(AppError):
    """Caller may not act on the resource"""

    status_code = 403


class NotFoundError(AppError):
    """Entity does not exist in the caller's organization"""

    status_code = 404


class ConflictError(AppError):
    """Requested time range collides with an existing booking"""

    status_code = 409
