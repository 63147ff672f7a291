"""
Typed failures raised by the exam core and the catalog repositories.

They subclass ValueError so that callers catching ValueError (the usual
"bad request" path in the routers) still see them; the HTTP status each
one maps to travels with the class.
"""


class ExamServiceError(ValueError):
    status_code = 400


class ValidationError(ExamServiceError):
    status_code = 400


class NotAuthenticated(ExamServiceError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotAuthorized(ExamServiceError):
    status_code = 403


class NotFoundError(ExamServiceError):
    status_code = 404


class ConflictError(ExamServiceError):
    status_code = 409


class AlreadySubmitted(ConflictError):
    status_code = 409
