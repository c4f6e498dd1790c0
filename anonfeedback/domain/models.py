"""
Domain models - Account record and the messages it owns.

Verification lifecycle
======================

    UNVERIFIED --(code issued)--> PENDING_CODE --(code validated)--> VERIFIED
         ^                             |
         +------(code expires)---------+

A re-registration issues a fresh code and moves an UNVERIFIED or
PENDING_CODE account back to PENDING_CODE. VERIFIED is terminal: nothing
in this package resets ``is_verified`` once it is true.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class VerificationState(str, Enum):
    """Verification lifecycle state of an account at a given instant."""

    UNVERIFIED = "UNVERIFIED"
    PENDING_CODE = "PENDING_CODE"
    VERIFIED = "VERIFIED"


class VerifyResult(Enum):
    """
    Result of comparing a submitted code against the stored one.

    INVALID_CODE takes precedence over EXPIRED when both apply.
    """

    SUCCESS = "success"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Message:
    """Anonymous message stored in an account's mailbox."""

    content: str
    created_at: datetime


@dataclass
class Account:
    """Persisted user account."""

    id: str
    username: str
    email: str
    password_hash: str
    verify_code: str
    verify_code_expiry: datetime
    is_verified: bool = False
    is_accepting_messages: bool = True
    messages: list[Message] = field(default_factory=list)

    def verification_state(self, now: datetime) -> VerificationState:
        if self.is_verified:
            return VerificationState.VERIFIED
        if now < self.verify_code_expiry:
            return VerificationState.PENDING_CODE
        return VerificationState.UNVERIFIED
