"""Application error taxonomy.

Every error raised by the services carries its HTTP status and is rendered by
the handlers in ``schoolsafe.main`` as ``{"success": false, "message": ...}``.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    # Duplicates are reported as 400, like every other client error.
    status_code = 400
    default_message = "Already exists"
