"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Every response carries ``success`` and ``message``.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

from anonfeedback.domain.accounts import MAX_PASSWORD_BYTES
from anonfeedback.domain.models import Account, Message

Username = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=3,
        max_length=20,
        pattern=r"^[a-zA-Z0-9_]+$",
    ),
]

MessageContent = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=1000),
]


class SignUpRequest(BaseModel):
    """Request model for registration."""

    username: Username
    email: EmailStr
    password: str = Field(
        ..., min_length=6, description="User password (min 6 characters, max 72 bytes)"
    )

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class VerifyCodeRequest(BaseModel):
    """Request model for verification code submission."""

    # Not constrained to the handle pattern - may arrive URL-encoded
    username: str = Field(..., min_length=1)
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        description="6-digit verification code",
    )


class SignInRequest(BaseModel):
    """Request model for sign-in with email or username."""

    identifier: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)


class AcceptMessagesRequest(BaseModel):
    accept_messages: bool


class SendMessageRequest(BaseModel):
    username: str = Field(..., min_length=1)
    content: MessageContent


class ApiResponse(BaseModel):
    """Standard response envelope."""

    success: bool
    message: str


class AccountOut(BaseModel):
    """Public view of an account - never exposes credential or code."""

    id: str
    username: str
    email: str
    is_verified: bool
    is_accepting_messages: bool

    @classmethod
    def from_account(cls, account: Account) -> "AccountOut":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            is_verified=account.is_verified,
            is_accepting_messages=account.is_accepting_messages,
        )


class MessageOut(BaseModel):
    content: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageOut":
        return cls(content=message.content, created_at=message.created_at)


class SignInResponse(ApiResponse):
    access_token: str
    token_type: str = "bearer"


class AcceptMessagesResponse(ApiResponse):
    account: AccountOut


class AcceptanceStatusResponse(ApiResponse):
    is_accepting_messages: bool


class MessagesResponse(ApiResponse):
    messages: list[MessageOut]
