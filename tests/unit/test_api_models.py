"""
Unit tests for API request/response models.

Tests Pydantic model validation for the v1 endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from anonfeedback.api.models import (
    AccountOut,
    SendMessageRequest,
    SignInRequest,
    SignUpRequest,
    VerifyCodeRequest,
)
from anonfeedback.domain.models import Account


class TestSignUpRequest:
    """Tests for sign-up request validation."""

    def test_valid_request(self) -> None:
        """Well-formed sign-up request is accepted."""
        request = SignUpRequest(username="alice", email="a@x.com", password="pw123456")
        assert request.username == "alice"
        assert request.email == "a@x.com"

    def test_username_is_stripped(self) -> None:
        """Username whitespace is stripped before validation."""
        request = SignUpRequest(username="  alice ", email="a@x.com", password="pw123456")
        assert request.username == "alice"

    @pytest.mark.parametrize("username", ["ab", "a" * 21, "bad name", "al!ce"])
    def test_invalid_username_rejected(self, username: str) -> None:
        """Usernames outside the allowed pattern or length are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(username=username, email="a@x.com", password="pw123456")
        assert "username" in str(exc_info.value)

    def test_username_boundaries(self) -> None:
        """Usernames of exactly 3 and 20 characters are accepted."""
        assert SignUpRequest(username="abc", email="a@x.com", password="pw1234").username == "abc"
        long_name = "a" * 20
        assert SignUpRequest(username=long_name, email="a@x.com", password="pw1234").username == long_name

    def test_invalid_email_rejected(self) -> None:
        """Malformed email is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(username="alice", email="not-an-email", password="pw123456")
        assert "email" in str(exc_info.value)

    def test_short_password_rejected(self) -> None:
        """Passwords under 6 characters are rejected."""
        with pytest.raises(ValidationError):
            SignUpRequest(username="alice", email="a@x.com", password="12345")

    def test_password_at_bcrypt_limit_accepted(self) -> None:
        """A 72-byte password is accepted."""
        request = SignUpRequest(username="alice", email="a@x.com", password="p" * 72)
        assert len(request.password) == 72

    def test_password_over_bcrypt_limit_rejected(self) -> None:
        """A 73-byte password is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            SignUpRequest(username="alice", email="a@x.com", password="p" * 73)
        assert "72 bytes" in str(exc_info.value)

    def test_password_limit_counts_bytes(self) -> None:
        """Password limit is measured in UTF-8 bytes, not characters."""
        # 40 two-byte characters: 40 chars but 80 bytes
        with pytest.raises(ValidationError):
            SignUpRequest(username="alice", email="a@x.com", password="\u00e9" * 40)


class TestVerifyCodeRequest:
    """Tests for verification code request validation."""

    def test_six_characters_accepted(self) -> None:
        """Six-character code is accepted."""
        assert VerifyCodeRequest(username="alice", code="123456").code == "123456"

    @pytest.mark.parametrize("code", ["12345", "1234567", ""])
    def test_wrong_length_rejected(self, code: str) -> None:
        """Codes that are not 6 characters are rejected."""
        with pytest.raises(ValidationError):
            VerifyCodeRequest(username="alice", code=code)

    def test_encoded_username_accepted(self) -> None:
        """URL-encoded usernames pass through unchanged."""
        assert VerifyCodeRequest(username="al%5Fice", code="123456").username == "al%5Fice"


class TestSignInRequest:
    """Tests for sign-in request validation."""

    def test_valid(self) -> None:
        """Well-formed sign-in request is accepted."""
        request = SignInRequest(identifier="a@x.com", password="pw123456")
        assert request.identifier == "a@x.com"

    def test_short_identifier_rejected(self) -> None:
        """Identifiers under 3 characters are rejected."""
        with pytest.raises(ValidationError):
            SignInRequest(identifier="ab", password="pw123456")


class TestSendMessageRequest:
    """Tests for message request validation."""

    def test_content_is_stripped(self) -> None:
        """Message content is stripped."""
        assert SendMessageRequest(username="alice", content="  hi  ").content == "hi"

    def test_blank_content_rejected(self) -> None:
        """Whitespace-only content is rejected."""
        with pytest.raises(ValidationError):
            SendMessageRequest(username="alice", content="   ")

    def test_content_max_length(self) -> None:
        """Content is limited to 1000 characters."""
        assert len(SendMessageRequest(username="alice", content="x" * 1000).content) == 1000
        with pytest.raises(ValidationError):
            SendMessageRequest(username="alice", content="x" * 1001)


class TestAccountOut:
    """Tests for the public account view."""

    def test_hides_secrets(self) -> None:
        """Public account view omits password hash and verification code."""
        account = Account(
            id="42",
            username="alice",
            email="a@x.com",
            password_hash="hash",
            verify_code="123456",
            verify_code_expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        dumped = AccountOut.from_account(account).model_dump()
        assert dumped == {
            "id": "42",
            "username": "alice",
            "email": "a@x.com",
            "is_verified": False,
            "is_accepting_messages": True,
        }
