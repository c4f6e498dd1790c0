"""
Unit tests for access token issuance and decoding.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from anonfeedback.api.tokens import create_access_token, decode_access_token
from anonfeedback.domain.exceptions import Unauthorized
from anonfeedback.domain.models import Account


@pytest.fixture
def account() -> Account:
    return Account(
        id="3f2b8a9e-1111-4c4c-9d9d-000000000001",
        username="alice",
        email="a@x.com",
        password_hash="hash",
        verify_code="123456",
        verify_code_expiry=datetime.now(timezone.utc),
        is_verified=True,
    )


class TestAccessTokens:
    """Tests for access token creation and decoding."""

    def test_round_trip_returns_account_id(self, account: Account) -> None:
        """Decoding a fresh token yields the account id."""
        token = create_access_token(account, "secret")
        assert decode_access_token(token, "secret") == account.id

    def test_claims(self, account: Account) -> None:
        """Token carries sub, username and exp claims."""
        token = create_access_token(account, "secret", ttl=timedelta(minutes=5))
        payload = jwt.decode(token, "secret", algorithms=["HS256"])
        assert payload["sub"] == account.id
        assert payload["username"] == "alice"
        assert payload["exp"] - payload["iat"] == 300

    def test_wrong_secret(self, account: Account) -> None:
        """Token signed with another secret is rejected."""
        token = create_access_token(account, "secret")
        with pytest.raises(Unauthorized):
            decode_access_token(token, "other-secret")

    def test_expired_token(self, account: Account) -> None:
        """Expired token is rejected."""
        token = create_access_token(account, "secret", ttl=timedelta(seconds=-1))
        with pytest.raises(Unauthorized):
            decode_access_token(token, "secret")

    def test_garbage_token(self) -> None:
        """Non-JWT input is rejected."""
        with pytest.raises(Unauthorized):
            decode_access_token("not-a-jwt", "secret")

    def test_missing_subject(self) -> None:
        """Token without a subject is rejected."""
        token = jwt.encode({"username": "alice"}, "secret", algorithm="HS256")
        with pytest.raises(Unauthorized):
            decode_access_token(token, "secret")
