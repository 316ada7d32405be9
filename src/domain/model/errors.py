"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Each class carries the HTTP status the API layer answers with, and whether
its message is safe to show to the caller (operational) or not.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    is_operational = True
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status(self) -> str:
        """'fail' for client errors, 'error' for server errors."""
        return "fail" if 400 <= self.status_code < 500 else "error"


class ValidationError(DomainError):
    """Input violates a business validation rule."""

    status_code = 400
    default_message = "Invalid input data"


class IncorrectCredentialsError(ValidationError):
    """Login failed. Same message for unknown email and wrong password."""

    default_message = "Incorrect email or password!"


class InvalidResetTokenError(ValidationError):
    """Reset token matches no user or has expired."""

    default_message = "Token is invalid or has expired"


class AuthenticationError(DomainError):
    """Caller could not be authenticated."""

    status_code = 401
    default_message = "Authentication failed"


class NotLoggedInError(AuthenticationError):
    default_message = "You are not logged in! Please log in to get access."


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token. Please log in again!"


class TokenExpiredError(AuthenticationError):
    default_message = "Your token has expired! Please log in again."


class NoSuchUserError(AuthenticationError):
    default_message = "The user belonging to this token does no longer exist."


class StalePasswordError(AuthenticationError):
    default_message = "User recently changed password! Please log in again."


class WrongCurrentPasswordError(AuthenticationError):
    default_message = "Your current password is wrong."


class AuthorizationError(DomainError):
    """Caller lacks permission for the requested action."""

    status_code = 403
    default_message = "You do not have permission to perform this action"


ForbiddenError = AuthorizationError


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""

    status_code = 409
    default_message = "Duplicate field value. Please use another value!"


class DependencyError(DomainError):
    """An outbound collaborator (mail, ...) failed."""

    status_code = 500
    default_message = "There was an error sending the email. Try again later!"


class InternalError(DomainError):
    """Unclassified fault. Its message is never shown in production."""

    is_operational = False
