# errors.py — Application error taxonomy, mapped to HTTP responses in main.py
from typing import Dict, List, Optional


class AppError(Exception):
    """Base class for errors that are safe to show to the caller"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationFailed(AppError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409
