"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from .models import Account, Message

# Columns the domain is allowed to change through update_fields()
UPDATABLE_FIELDS = frozenset(
    {
        "username",
        "password_hash",
        "verify_code",
        "verify_code_expiry",
        "is_verified",
        "is_accepting_messages",
    }
)


@dataclass(frozen=True)
class EmailResult:
    """Outcome of an email delivery attempt."""

    success: bool
    message: str


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    async def find_by_handle(self, username: str) -> Account | None:
        """
        Find the account holding a handle.

        A verified holder wins over unverified ones; among unverified
        holders the most recently updated one is returned.
        """
        ...

    async def find_verified_by_handle(self, username: str) -> Account | None:
        """Find the verified account holding a handle, if any."""
        ...

    async def find_by_email(self, email: str) -> Account | None:
        """Find an account by normalized email address."""
        ...

    async def find_by_id(self, account_id: str) -> Account | None:
        """Find an account by its identifier."""
        ...

    async def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
        verify_code: str,
        verify_code_expiry: datetime,
    ) -> Account | None:
        """
        Create an unverified account accepting messages with an empty mailbox.

        Returns:
            The created account, or None if the email is already registered
        """
        ...

    async def update_fields(
        self, account_id: str, fields: dict[str, Any], unverified_only: bool = False
    ) -> Account | None:
        """
        Atomically update a subset of account fields.

        Args:
            account_id: Account identifier
            fields: Column name to new value, keys from UPDATABLE_FIELDS
            unverified_only: Only apply the update while the account is unverified

        Returns:
            The updated account, or None if no account matched
        """
        ...

    async def append_message(self, account_id: str, message: Message) -> bool:
        """
        Atomically append a message if the account is accepting messages.

        Returns:
            True if appended, False if the account is missing or not accepting
        """
        ...

    async def list_messages(self, account_id: str) -> list[Message] | None:
        """
        Return the mailbox ordered by creation time, newest first.

        Returns:
            The sorted messages, or None if the account does not exist
        """
        ...

    async def ping(self) -> None:
        """Check storage connectivity, raising on failure."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, to: str, subject: str, body: str) -> EmailResult:
        """
        Send an email.

        Args:
            to: Recipient email address
            subject: Subject line
            body: Rendered HTML body

        Returns:
            EmailResult; delivery failures are reported, not raised
        """
        ...
