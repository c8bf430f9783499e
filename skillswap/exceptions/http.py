"""
Application error taxonomy. Each error carries the HTTP status the outer
API layer should map it to; none of them is fatal to the process.
"""


class AppError(Exception):
    status_code: int = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(AppError):
    """Referenced entity is absent or hidden by visibility rules."""

    status_code = 404


class ForbiddenError(AppError):
    """Caller lacks the required role or relationship."""

    status_code = 403


class InvalidOperationError(AppError):
    """Action is not valid in the entity's current state."""

    status_code = 400


class ConflictError(AppError):
    status_code = 409


class ValidationError(AppError):
    """Malformed input (out-of-range rating, oversize text, ...)."""

    status_code = 422
