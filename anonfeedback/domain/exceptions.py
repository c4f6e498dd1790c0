"""
Domain exceptions - Semantic error types for accounts and messages.

Every exception carries the HTTP-like status code and the default
user-facing message the API layer reports for it, so the status
taxonomy lives next to the business rule that produces it.
"""


class MessageBoardError(Exception):
    """Base class for domain errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(MessageBoardError):
    """Malformed input that passed the request schema."""

    status_code = 400
    default_message = "Invalid request"


class Conflict(MessageBoardError):
    """Handle or verified email already taken."""

    status_code = 400
    default_message = "Already exists"


class Unauthorized(MessageBoardError):
    """No valid caller identity."""

    status_code = 401
    default_message = "Unauthorized"


class Forbidden(MessageBoardError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(MessageBoardError):
    status_code = 404
    default_message = "Not found"


class UpstreamFailure(MessageBoardError):
    """An external collaborator (email provider) failed."""

    status_code = 500
    default_message = "Upstream service failed"


class InternalError(MessageBoardError):
    status_code = 500
    default_message = "Internal server error"


class AccountNotFound(NotFound):
    default_message = "User not found"


class InvalidVerificationCode(ValidationFailed):
    default_message = "Invalid Verification code"


class VerificationCodeExpired(ValidationFailed):
    default_message = "Verification code has expired"


class UsernameTaken(Conflict):
    default_message = "Username is already taken"


class EmailAlreadyVerified(Conflict):
    default_message = "User with this email already exists and is verified. Please log in."


class EmailAlreadyRegistered(Conflict):
    """Lost a race against a concurrent sign-up for the same email."""

    default_message = "User with this email already exists"


class NotAcceptingMessages(Forbidden):
    default_message = "User is not accepting messages"


class AccountNotVerified(Forbidden):
    default_message = "Please verify your account before logging in"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid credentials"


class EmailDeliveryFailed(UpstreamFailure):
    default_message = "Failed to send verification email"


class PasswordTooLong(ValidationFailed):
    default_message = "Password must be at most 72 bytes"
