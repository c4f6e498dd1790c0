"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account verification workflow and the
anonymous messaging rules. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .accounts import AccountService
from .exceptions import (
    AccountNotFound,
    AccountNotVerified,
    Conflict,
    EmailAlreadyRegistered,
    EmailAlreadyVerified,
    EmailDeliveryFailed,
    Forbidden,
    InternalError,
    InvalidCredentials,
    InvalidVerificationCode,
    MessageBoardError,
    NotAcceptingMessages,
    NotFound,
    PasswordTooLong,
    Unauthorized,
    UpstreamFailure,
    UsernameTaken,
    ValidationFailed,
    VerificationCodeExpired,
)
from .models import Account, Message, VerificationState, VerifyResult
from .ports import AccountRepository, EmailResult, EmailSender

__all__ = [
    "Account",
    "AccountNotFound",
    "AccountNotVerified",
    "AccountRepository",
    "AccountService",
    "Conflict",
    "EmailAlreadyRegistered",
    "EmailAlreadyVerified",
    "EmailDeliveryFailed",
    "EmailResult",
    "EmailSender",
    "Forbidden",
    "InternalError",
    "InvalidCredentials",
    "InvalidVerificationCode",
    "Message",
    "MessageBoardError",
    "NotAcceptingMessages",
    "NotFound",
    "PasswordTooLong",
    "Unauthorized",
    "UpstreamFailure",
    "UsernameTaken",
    "ValidationFailed",
    "VerificationCodeExpired",
    "VerificationState",
    "VerifyResult",
]
