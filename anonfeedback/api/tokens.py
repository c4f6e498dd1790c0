"""
Access tokens - JWT issuance and decoding.

Tokens carry the account id in ``sub``; the gate and mailbox routes
trust only that claim for the caller's identity.
"""

from datetime import datetime, timedelta, timezone

import jwt

from anonfeedback.domain.exceptions import Unauthorized
from anonfeedback.domain.models import Account


def create_access_token(
    account: Account, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=1)
) -> str:
    """Create a signed access token for a verified account."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": account.id,
        "username": account.username,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> str:
    """
    Validate a token and return the account id it was issued for.

    Raises:
        Unauthorized: Token is expired, tampered with, or has no subject
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError:
        raise Unauthorized() from None

    account_id = payload.get("sub")
    if not account_id:
        raise Unauthorized()
    return account_id
