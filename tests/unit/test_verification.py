"""
Unit tests for verification code issuance, validation and the email body.
"""

import re
from datetime import datetime, timedelta, timezone

from anonfeedback.domain.models import VerifyResult
from anonfeedback.domain.verification import (
    CODE_MAX,
    CODE_MIN,
    check_verification_code,
    describe_validity,
    issue_verification_code,
    render_verification_email,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestIssueVerificationCode:
    """Tests for the verification code issuer."""

    def test_code_is_6_digits(self) -> None:
        """Issued code is a 6-digit string."""
        issued = issue_verification_code(NOW, timedelta(hours=1))
        assert re.match(r"^\d{6}$", issued.code)

    def test_code_in_range(self) -> None:
        """Issued code lies in [100000, 999999]."""
        for _ in range(200):
            value = int(issue_verification_code(NOW, timedelta(hours=1)).code)
            assert CODE_MIN <= value <= CODE_MAX

    def test_expiry_is_issuance_plus_ttl(self) -> None:
        """Expiry is issuance time plus TTL."""
        issued = issue_verification_code(NOW, timedelta(hours=1))
        assert issued.expires_at == NOW + timedelta(hours=1)

    def test_codes_vary(self) -> None:
        """Codes are not always the same (randomness check)."""
        codes = {issue_verification_code(NOW, timedelta(hours=1)).code for _ in range(10)}
        assert len(codes) >= 2


class TestCheckVerificationCode:
    """Outcome table for code validation."""

    def test_matching_code_before_expiry_succeeds(self) -> None:
        """Matching code before expiry succeeds."""
        result = check_verification_code("123456", NOW + timedelta(seconds=1), "123456", NOW)
        assert result == VerifyResult.SUCCESS

    def test_wrong_code_is_invalid(self) -> None:
        """Non-matching code is invalid."""
        result = check_verification_code("123456", NOW + timedelta(hours=1), "654321", NOW)
        assert result == VerifyResult.INVALID_CODE

    def test_matching_code_after_expiry_is_expired(self) -> None:
        """Matching code after expiry is expired."""
        result = check_verification_code("123456", NOW - timedelta(seconds=1), "123456", NOW)
        assert result == VerifyResult.EXPIRED

    def test_expiry_instant_is_already_expired(self) -> None:
        """A code is valid only strictly before its expiry."""
        result = check_verification_code("123456", NOW, "123456", NOW)
        assert result == VerifyResult.EXPIRED

    def test_invalid_code_wins_over_expired(self) -> None:
        """Wrong code past expiry reports invalid."""
        result = check_verification_code("123456", NOW - timedelta(hours=2), "000000", NOW)
        assert result == VerifyResult.INVALID_CODE

    def test_comparison_is_exact(self) -> None:
        """Codes must match exactly, without trimming."""
        result = check_verification_code("123456", NOW + timedelta(hours=1), " 23456", NOW)
        assert result == VerifyResult.INVALID_CODE


class TestVerificationEmail:
    """Tests for the rendered verification email."""

    def test_subject(self) -> None:
        """Email subject is fixed."""
        subject, _ = render_verification_email("alice", "123456", timedelta(hours=1))
        assert subject == "Feedback - Verify your email"

    def test_body_contains_username_and_code(self) -> None:
        """Email body greets the user and shows the code."""
        _, body = render_verification_email("alice", "123456", timedelta(hours=1))
        assert "Hello alice" in body
        assert "Your OTP is: 123456" in body

    def test_validity_text_follows_ttl(self) -> None:
        """Validity text is rendered from the TTL."""
        _, one_hour = render_verification_email("alice", "123456", timedelta(hours=1))
        _, ten_minutes = render_verification_email("alice", "123456", timedelta(minutes=10))
        assert "valid for 1 hour." in one_hour
        assert "valid for 10 minutes." in ten_minutes

    def test_username_is_escaped(self) -> None:
        """Username is HTML-escaped in the body."""
        _, body = render_verification_email("<b>x</b>", "123456", timedelta(hours=1))
        assert "<b>x</b>" not in body
        assert "&lt;b&gt;x&lt;/b&gt;" in body

    def test_describe_validity(self) -> None:
        """TTLs render as human-readable durations."""
        assert describe_validity(timedelta(hours=2)) == "2 hours"
        assert describe_validity(timedelta(minutes=1)) == "1 minute"
        assert describe_validity(timedelta(seconds=90)) == "90 seconds"
