"""Domain error taxonomy raised by scope resolution and aggregators."""

from __future__ import annotations


class LedgerviewError(Exception):
    """Base class for errors translated at the HTTP boundary."""

    code = "internal_error"
    default_message = "An internal error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(LedgerviewError):
    code = "not_found"
    default_message = "Resource not found."


class UserNotFoundError(NotFoundError):
    code = "user_not_found"
    default_message = "User not found."


class BusinessNotFoundError(NotFoundError):
    code = "business_not_found"
    default_message = "Business not found."


class ProjectNotFoundError(NotFoundError):
    code = "project_not_found"
    default_message = "Project not found."


class OwnershipError(LedgerviewError):
    code = "forbidden"
    default_message = "User does not own this resource."


class BusinessOwnershipError(OwnershipError):
    default_message = "User does not own this business."


class ProjectOwnershipError(OwnershipError):
    default_message = "User does not own this project."


class InvalidInputError(LedgerviewError):
    code = "invalid_input"
    default_message = "Invalid input."
