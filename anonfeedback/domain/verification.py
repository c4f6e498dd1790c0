"""
Verification codes - issuance, validation and the verification email.

Codes are 6-digit numeric strings drawn uniformly from [100000, 999999]
with the secrets module. The expiry is absolute (issuance time + TTL) and
the emailed validity window is rendered from the same TTL.
"""

import html
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import VerifyResult

CODE_MIN = 100000
CODE_MAX = 999999

VERIFICATION_EMAIL_SUBJECT = "Feedback - Verify your email"


@dataclass(frozen=True)
class IssuedCode:
    """Verification code with its absolute expiry."""

    code: str
    expires_at: datetime


def issue_verification_code(now: datetime, ttl: timedelta) -> IssuedCode:
    """Generate a new code valid for ``ttl`` from ``now``."""
    code = str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
    return IssuedCode(code=code, expires_at=now + ttl)


def check_verification_code(
    stored_code: str, expires_at: datetime, submitted_code: str, now: datetime
) -> VerifyResult:
    """
    Compare a submitted code against the stored code and expiry.

    The code check runs first, so a wrong code is reported as
    INVALID_CODE even when the stored code has also expired.
    """
    code_matches = secrets.compare_digest(stored_code.encode(), submitted_code.encode())
    not_expired = now < expires_at

    if not code_matches:
        return VerifyResult.INVALID_CODE
    if not not_expired:
        return VerifyResult.EXPIRED
    return VerifyResult.SUCCESS


def describe_validity(ttl: timedelta) -> str:
    """Human-readable validity window, e.g. '1 hour' or '10 minutes'."""
    seconds = int(ttl.total_seconds())
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    if seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds} seconds"


def render_verification_email(username: str, code: str, ttl: timedelta) -> tuple[str, str]:
    """
    Render the verification email.

    Returns:
        Tuple of (subject, html_body)
    """
    body = (
        '<html lang="en" dir="ltr">'
        "<head><title>Verify your email</title></head>"
        "<body>"
        f"<h1>Hello {html.escape(username)}, thanks for registering</h1>"
        f"<p>Your OTP is: {code}</p>"
        f"<p>This OTP is valid for {describe_validity(ttl)}. "
        "Please do not share it with anyone.</p>"
        "<p>Thanks,<br/>The Feedback Team</p>"
        "</body>"
        "</html>"
    )
    return VERIFICATION_EMAIL_SUBJECT, body
