from .http import (
    AppError,
    ConflictError,
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppError",
    "ConflictError",
    "ForbiddenError",
    "InvalidOperationError",
    "NotFoundError",
    "ValidationError",
]
