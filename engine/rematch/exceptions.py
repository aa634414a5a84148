"""Application exceptions — each carries the HTTP status the API maps it to."""

from __future__ import annotations


class RematchError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(RematchError):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class TemplateValidationError(ValidationError):
    """Raised when a prompt template lacks buyer or listing placeholders."""

    def __init__(self, missing_buyer: list[str], missing_listing: list[str]):
        super().__init__("Invalid template")
        self.missing_buyer = missing_buyer
        self.missing_listing = missing_listing


class NotFoundError(RematchError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class ConfigurationError(RematchError):
    """Raised when the database is not configured."""

    def __init__(self, message: str = "Database not configured"):
        super().__init__(message, status_code=503)


class PersistenceError(RematchError):
    """Raised when a database operation fails or cannot complete."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)
