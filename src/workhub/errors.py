from abc import ABC

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """Single violated validation rule."""

    field: str = Field(..., description="Dotted path of the offending field, e.g. location.city")
    message: str = Field(..., description="Human-readable description of the violation")


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class ConflictError(UserError):
    """Raised when a write collides with existing data (duplicate name, dependent records)."""


class ValidationError(UserError):
    """Raised when user input fails validation.

    Carries every violated rule so that callers see all problems at once.
    """

    def __init__(self, message: str = "Validation failed", field_errors: list[FieldError] | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or []

    @classmethod
    def from_field_errors(cls, field_errors: list[FieldError]) -> "ValidationError":
        message = "; ".join(f"{e.field}: {e.message}" for e in field_errors)
        return cls(f"Validation failed: {message}", field_errors)


class RetryableConflictError(Exception):
    """Raised when an atomic update lost a race too many times.

    Nothing was written. The whole operation is safe to retry.
    """


class StatisticsUpdateError(Exception):
    """Raised when a child entity was persisted but its city statistics were not updated."""

    def __init__(self, entity_id: str, cause: Exception) -> None:
        super().__init__(f"'{entity_id}' was saved but city statistics could not be updated: {cause}")
        self.entity_id = entity_id
