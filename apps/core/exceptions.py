"""
Error taxonomy shared by services, the HTTP layer and the API client.

Services raise these; config.urls renders them as
{"message": ..., "error": <class name>} with the mapped status code. The
client maps the error name, or failing that the status code, back onto the
same classes.
"""


class TaskTrackerError(Exception):
    """Base error. Anything not more specific is an internal failure."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskTrackerError):
    """Missing or malformed input (empty title, weak password, bad enum)."""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: str = None, errors: list = None):
        super().__init__(message)
        self.errors = list(errors or [])


class Unauthorized(TaskTrackerError):
    status_code = 401
    default_message = "Authentication required"


class NotFound(TaskTrackerError):
    status_code = 404
    default_message = "Not found"


class Conflict(TaskTrackerError):
    # Duplicate registrations answer 400, which is what existing clients expect;
    # the "error" field in the body tells them apart from ValidationError.
    status_code = 400
    default_message = "Already exists"


ERRORS_BY_STATUS = {
    400: ValidationError,
    401: Unauthorized,
    404: NotFound,
}

ERRORS_BY_CODE = {
    cls.__name__: cls
    for cls in (TaskTrackerError, ValidationError, Unauthorized, NotFound, Conflict)
}
