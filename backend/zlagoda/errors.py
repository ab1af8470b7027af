# Overview: Error taxonomy shared by services and routes.

"""
Every failure a service can report is one of these classes. Routes never
inspect message text; the Flask error handlers registered in create_app map
each class to its HTTP status.
"""


class AppError(Exception):
    """Base for expected, client-visible failures."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """400-level input problem. Raised before any I/O."""
    status_code = 400


class NotFoundError(AppError):
    """Referenced product, card, employee or receipt is missing."""
    status_code = 404


class InsufficientStockError(AppError):
    """Requested quantity exceeds quantity on hand (domain rule, not malformed input)."""
    status_code = 400


class ConflictError(AppError):
    """409-level business rule conflict (e.g., duplicate receipt number)."""
    status_code = 409


class LockTimeoutError(ConflictError):
    """A row lock could not be acquired in time. Safe to retry."""

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryable"] = True
        return body


class StorageError(AppError):
    """Unexpected database failure; the transaction has been rolled back."""
    status_code = 500


class PermissionDeniedError(AppError):
    """Caller's role does not grant the permission a route requires."""
    status_code = 403

    def __init__(self, required_permission: str):
        super().__init__("Permission denied")
        self.required_permission = required_permission

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["required_permission"] = self.required_permission
        return body
