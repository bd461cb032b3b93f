# liftlog/errors.py
"""
Error taxonomy shared by repositories, services and the HTTP layer.

Services raise these unchanged; `liftlog.main` renders them as
`{"error": {"code": ..., "message": ...}}` with the class's status code.
`CacheError` is the only class that services swallow.
"""
from __future__ import annotations


class AppError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class InvalidState(AppError):
    code = "INVALID_STATE"
    status_code = 400
    default_message = "Workout is not active"


class InvalidInput(AppError):
    code = "INVALID_INPUT"
    status_code = 400
    default_message = "Invalid input data"


class Conflict(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource conflict"


class StoreError(AppError):
    code = "STORE_ERROR"
    default_message = "Persistence failure"


class CacheError(AppError):
    code = "CACHE_ERROR"
    default_message = "Cache failure"
