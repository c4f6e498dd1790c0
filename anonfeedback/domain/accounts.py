"""
Account domain service - verification workflow and anonymous messaging.

This module orchestrates the account lifecycle on top of the repository
and email sender ports:

- register: issue a verification code and email it
- verify_code: validate a submitted code and mark the account verified
- authenticate: check credentials of a verified account
- get/set_accepting_messages: the message acceptance gate
- send_message: anonymous ingestion into a mailbox
- get_messages: mailbox retrieval, newest first

Storage writes are single atomic repository calls. The message append is
conditional on the gate, so a gate flip racing an inbound message is
reported as NotAcceptingMessages instead of silently delivering.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from urllib.parse import unquote

import bcrypt

from .exceptions import (
    AccountNotFound,
    AccountNotVerified,
    EmailAlreadyRegistered,
    EmailAlreadyVerified,
    EmailDeliveryFailed,
    InvalidCredentials,
    InvalidVerificationCode,
    NotAcceptingMessages,
    PasswordTooLong,
    UsernameTaken,
    VerificationCodeExpired,
)
from .models import Account, Message, VerifyResult, utcnow
from .ports import AccountRepository, EmailSender
from .verification import (
    check_verification_code,
    issue_verification_code,
    render_verification_email,
)

logger = logging.getLogger(__name__)

# bcrypt refuses longer secrets
MAX_PASSWORD_BYTES = 72


@dataclass
class AccountService:
    """
    Domain service for accounts and their mailboxes.

    The clock is injectable so expiry behaviour can be tested
    deterministically.
    """

    repository: AccountRepository
    email_sender: EmailSender
    code_ttl: timedelta = timedelta(hours=1)
    bcrypt_cost: int = 10
    clock: Callable[[], datetime] = field(default=utcnow)

    async def register(self, username: str, email: str, password: str) -> Account:
        """
        Register an account, or retry registration of an unverified one.

        Args:
            username: Requested handle (will be trimmed)
            email: Email address (will be normalized)
            password: Plaintext password (will be hashed)

        Returns:
            The created or updated account

        Raises:
            PasswordTooLong: The password exceeds what bcrypt accepts
            UsernameTaken: A verified account already holds the handle
            EmailAlreadyVerified: The email belongs to a verified account
            EmailDeliveryFailed: The verification email could not be sent
        """
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise PasswordTooLong()
        username = username.strip()
        normalized_email = self._normalize_email(email)

        if await self.repository.find_verified_by_handle(username) is not None:
            raise UsernameTaken()

        issued = issue_verification_code(self.clock(), self.code_ttl)
        password_hash = await self._hash_password(password)

        existing = await self.repository.find_by_email(normalized_email)
        if existing is not None:
            if existing.is_verified:
                raise EmailAlreadyVerified()
            account = await self.repository.update_fields(
                existing.id,
                {
                    "username": username,
                    "password_hash": password_hash,
                    "verify_code": issued.code,
                    "verify_code_expiry": issued.expires_at,
                },
                unverified_only=True,
            )
            if account is None:
                # Verified between the lookup and the update
                raise EmailAlreadyVerified()
            logger.info("Reissued verification code for pending account %s", account.id)
        else:
            account = await self.repository.create_account(
                username=username,
                email=normalized_email,
                password_hash=password_hash,
                verify_code=issued.code,
                verify_code_expiry=issued.expires_at,
            )
            if account is None:
                raise EmailAlreadyRegistered()
            logger.info("Created account %s", account.id)

        subject, body = render_verification_email(username, issued.code, self.code_ttl)
        result = await self.email_sender.send(normalized_email, subject, body)
        if not result.success:
            raise EmailDeliveryFailed(result.message)

        return account

    async def verify_code(self, username: str, code: str) -> Account:
        """
        Validate a submitted verification code.

        Args:
            username: Handle, possibly URL-encoded
            code: Submitted 6-character code

        Raises:
            AccountNotFound: No account holds the handle
            InvalidVerificationCode: Code does not match (checked first)
            VerificationCodeExpired: Code matches but has expired
        """
        account = await self.repository.find_by_handle(unquote(username))
        if account is None:
            raise AccountNotFound()

        result = check_verification_code(
            account.verify_code, account.verify_code_expiry, code, self.clock()
        )
        if result == VerifyResult.INVALID_CODE:
            raise InvalidVerificationCode()
        if result == VerifyResult.EXPIRED:
            raise VerificationCodeExpired()

        if account.is_verified:
            return account

        updated = await self.repository.update_fields(account.id, {"is_verified": True})
        if updated is None:
            raise AccountNotFound()
        logger.info("Account %s verified", updated.id)
        return updated

    async def is_username_available(self, username: str) -> bool:
        """A handle is available unless a verified account holds it."""
        return await self.repository.find_verified_by_handle(username.strip()) is None

    async def authenticate(self, identifier: str, password: str) -> Account:
        """
        Check credentials given an email address or a handle.

        Raises:
            InvalidCredentials: Unknown identifier or wrong password
            AccountNotVerified: Credentials belong to an unverified account
        """
        identifier = identifier.strip()
        account = await self.repository.find_by_email(self._normalize_email(identifier))
        if account is None:
            account = await self.repository.find_by_handle(identifier)

        if account is None:
            raise InvalidCredentials()
        if not account.is_verified:
            raise AccountNotVerified()
        if not await self._check_password(password, account.password_hash):
            raise InvalidCredentials()
        return account

    async def set_accepting_messages(self, account_id: str, accept: bool) -> Account:
        """Write the acceptance gate of the caller's own account."""
        account = await self.repository.update_fields(
            account_id, {"is_accepting_messages": accept}
        )
        if account is None:
            raise AccountNotFound()
        return account

    async def get_accepting_messages(self, account_id: str) -> bool:
        """Read the acceptance gate of the caller's own account."""
        account = await self.repository.find_by_id(account_id)
        if account is None:
            raise AccountNotFound()
        return account.is_accepting_messages

    async def send_message(self, username: str, content: str) -> Message:
        """
        Deliver an anonymous message to the account holding a handle.

        Raises:
            AccountNotFound: No account holds the handle
            NotAcceptingMessages: The recipient's gate is closed
        """
        account = await self.repository.find_by_handle(username.strip())
        if account is None:
            raise AccountNotFound()
        if not account.is_accepting_messages:
            raise NotAcceptingMessages()

        message = Message(content=content.strip(), created_at=self.clock())
        if not await self.repository.append_message(account.id, message):
            raise NotAcceptingMessages()
        return message

    async def get_messages(self, account_id: str) -> list[Message]:
        """Return the caller's mailbox, newest first."""
        messages = await self.repository.list_messages(account_id)
        if messages is None:
            raise AccountNotFound()
        return messages

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    async def _hash_password(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_password_sync, password)

    def _hash_password_sync(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()

    async def _check_password(self, password: str, password_hash: str) -> bool:
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            return False
        return await asyncio.to_thread(bcrypt.checkpw, password.encode(), password_hash.encode())
